"""Parsing of TETRA upper MAC PDUs: SYSINFO, MAC-RESOURCE, channel allocation and ACCESS-ASSIGN."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Mapping, Optional, Sequence

from .common import bits_to_uint

MACPDU_LEN_2ND_STOLEN = -2
MACPDU_LEN_START_FRAG = -1

# MAC PDU types
PDU_T_MAC_RESOURCE = 0
PDU_T_MAC_FRAG_END = 1
PDU_T_BROADCAST = 2
PDU_T_MAC_SUPPL = 3

# MAC-FRAG / MAC-END subtypes
MAC_FRAGE_FRAG = 0
MAC_FRAGE_END = 1

# Broadcast subtypes
MAC_BC_SYSINFO = 0
MAC_BC_ACCESS_DEFINE = 1

# BS service details flags
BS_SERVDET_REG_RQD = 1 << 11
BS_SERVDET_DEREG_RQD = 1 << 10
BS_SERVDET_PRIO_CELL = 1 << 9
BS_SERVDET_MIN_MODE = 1 << 8
BS_SERVDET_MIGRATION = 1 << 7
BS_SERVDET_SYS_W_SERV = 1 << 6
BS_SERVDET_VOICE_SERV = 1 << 5
BS_SERVDET_CSD_SERV = 1 << 4
BS_SERVDET_SNDCP_SERV = 1 << 2
BS_SERVDET_AIR_ENCR = 1 << 1
BS_SERVDET_ADV_LINK = 1 << 0

# SYSINFO optional field flags
OPT_FIELD_EVEN_MULTIFRAME = 0
OPT_FIELD_ODD_MULTIFRAME = 1
OPT_FIELD_ACCESS_CODE = 2
OPT_FIELD_EXT_SERVICES = 3

# ACCESS-ASSIGN headers, frames 1..17
ACC_ASS_DLCC_ULCO = 0
ACC_ASS_DLF1_ULCA = 1
ACC_ASS_DLF1_ULAO = 2
ACC_ASS_DLF1_ULF1 = 3

# ACCESS-ASSIGN headers, frame 18
ACC_ASS_ULCO = 0
ACC_ASS_ULCA = 1
ACC_ASS_ULAO = 2
ACC_ASS_ULCA2 = 3

# ACCESS-ASSIGN presence flags
ACC_ASS_PRES_ACCESS1 = 1 << 0
ACC_ASS_PRES_ACCESS2 = 1 << 1
ACC_ASS_PRES_DL_USAGE = 1 << 2
ACC_ASS_PRES_UL_USAGE = 1 << 3

# Usage markers
DL_US_UNALLOC = 0
DL_US_ASS_CTRL = 1
DL_US_COM_CTRL = 2
DL_US_RESERVED = 3
DL_US_TRAFFIC = 4
UL_US_UNALLOC = 0
UL_US_TRAFFIC = 1

# Channel allocation types
ALLOC_T_REPLACE = 0
ALLOC_T_ADDITIONAL = 1
ALLOC_T_QUIT_GO = 2
ALLOC_T_REPL_SLOT1 = 3


class AddressType(IntEnum):
    """Address types of a MAC-RESOURCE PDU."""

    NULL = 0
    SSI = 1
    EVENT_LABEL = 2
    USSI = 3
    SMI = 4
    SSI_EVENT = 5
    SSI_USAGE = 6
    SMI_EVENT = 7


_ADDR_LEN_BY_TYPE = {
    AddressType.NULL: 0,
    AddressType.SSI: 24,
    AddressType.EVENT_LABEL: 10,
    AddressType.USSI: 24,
    AddressType.SMI: 24,
    AddressType.SSI_EVENT: 34,
    AddressType.SSI_USAGE: 30,
    AddressType.SMI_EVENT: 34,
}

# Table 21.90; 0xff marks the second sub-slot
_NR_SLOTS = (0, 1, 2, 3, 4, 5, 6, 8, 10, 13, 17, 24, 34, 51, 68, 0xFF)


class _BitReader:
    """Cursor over a sequence of unpacked bits."""

    def __init__(self, bits: Sequence[int], pos: int = 0) -> None:
        self.bits = bits
        self.pos = pos

    def peek(self, width: int, offset: int = 0) -> int:
        start = self.pos + offset
        end = start + width
        if start < 0 or end > len(self.bits):
            raise ValueError(
                f"need {width} bits at offset {start}, only {len(self.bits)} available"
            )
        return bits_to_uint(self.bits[start:end])

    def read(self, width: int) -> int:
        value = self.peek(width)
        self.pos += width
        return value

    def skip(self, width: int) -> None:
        self.pos += width


@dataclass
class MleSysInfo:
    """MLE part of the SYSINFO broadcast."""

    la: int = 0
    subscr_class: int = 0
    bs_service_details: int = 0


@dataclass
class SysInfo:
    """Decoded SYSINFO broadcast PDU (21.4.4.1)."""

    main_carrier: int = 0
    freq_band: int = 0
    freq_offset: int = 0
    duplex_spacing: int = 0
    reverse_operation: int = 0
    num_of_csch: int = 0
    ms_txpwr_max_cell: int = 0
    rxlev_access_min: int = 0
    access_parameter: int = 0
    radio_dl_timeout: int = 0
    cck_valid_no_hf: int = 0
    cck_id: int = 0
    hyperframe_number: int = 0
    option_field: int = 0
    frame_bitmap: int = 0
    access_code: int = 0
    ext_service: int = 0
    mle_si: MleSysInfo = field(default_factory=MleSysInfo)


@dataclass
class ChanAlloc:
    """Decoded channel allocation element (21.5.2)."""

    type: int = 0
    timeslot: int = 0
    ul_dl: int = 0
    clch_perm: int = 0
    cell_chg_f: int = 0
    carrier_nr: int = 0
    ext_carr_pres: int = 0
    ext_freq_band: int = 0
    ext_freq_offset: int = 0
    ext_duplex_spc: int = 0
    ext_reverse_oper: int = 0
    monit_pattern: int = 0
    monit_patt_f18: int = 0
    aug_ul_dl_ass: int = 0
    aug_bandwidth: int = 0
    aug_modulation: int = 0
    aug_max_ul_qam: int = 0
    aug_conf_chan_stat: int = 0
    aug_bs_imbalance: int = 0
    aug_bs_tx_rel: int = 0
    aug_napping_sts: int = 0
    bit_length: int = 0


@dataclass
class Address:
    """Address carried in a MAC-RESOURCE PDU."""

    type: int = AddressType.NULL
    mcc: int = 0
    mnc: int = 0
    ssi: int = 0
    event_label: int = 0
    usage_marker: int = 0


@dataclass
class ResourcePdu:
    """Decoded MAC-RESOURCE PDU header (21.4.3.1).

    ``macpdu_length`` is None for a reserved length indication.
    ``tm_sdu_offset`` is the bit offset at which the TM-SDU starts.
    """

    fill_bits: int = 0
    grant_position: int = 0
    encryption_mode: int = 0
    is_encrypted: bool = False
    rand_acc_flag: int = 0
    macpdu_length: Optional[int] = None
    addr: Address = field(default_factory=Address)
    power_control_pres: int = 0
    slot_granting_pres: int = 0
    slot_granting_nr_slots: int = 0
    slot_granting_delay: int = 0
    chan_alloc_pres: int = 0
    cad: Optional[ChanAlloc] = None
    tm_sdu_offset: int = 0


@dataclass
class AccessField:
    """Access code and base frame length of an ACCESS-ASSIGN field."""

    access_code: int = 0
    base_frame_len: int = 0


@dataclass
class AccessAssign:
    """Decoded ACCESS-ASSIGN PDU (21.4.7.2); ``pres`` tells which fields are set."""

    hdr: int = 0
    pres: int = 0
    ul_usage: int = 0
    dl_usage: int = 0
    access: list[AccessField] = field(default_factory=lambda: [AccessField(), AccessField()])


def _decode_mle_sysinfo(reader: _BitReader) -> MleSysInfo:
    return MleSysInfo(
        la=reader.read(14),
        subscr_class=reader.read(16),
        bs_service_details=reader.read(12),
    )


def decode_sysinfo(bits: Sequence[int]) -> SysInfo:
    """Decode a SYSINFO broadcast PDU from its unpacked bits."""
    reader = _BitReader(bits, 4)  # skip broadcast and sysinfo headers
    sid = SysInfo()
    sid.main_carrier = reader.read(12)
    sid.freq_band = reader.read(4)
    sid.freq_offset = reader.read(2)
    sid.duplex_spacing = reader.read(3)
    sid.reverse_operation = reader.read(1)
    sid.num_of_csch = reader.read(2)
    sid.ms_txpwr_max_cell = reader.read(3)
    sid.rxlev_access_min = reader.read(4)
    sid.access_parameter = reader.read(4)
    sid.radio_dl_timeout = reader.read(4)
    sid.cck_valid_no_hf = reader.read(1)
    # CCK id and hyperframe number share the same storage; the cursor is not advanced.
    shared = reader.peek(16)
    sid.cck_id = shared
    sid.hyperframe_number = shared
    sid.option_field = reader.read(2)
    # Every option value carries a 20-bit field sharing one storage slot.
    optional = reader.read(20)
    sid.frame_bitmap = optional
    sid.access_code = optional
    sid.ext_service = optional
    sid.mle_si = _decode_mle_sysinfo(_BitReader(bits, 124 - 42))
    return sid


def decode_chan_alloc(bits: Sequence[int]) -> ChanAlloc:
    """Decode a channel allocation element; ``bit_length`` gives the bits consumed."""
    reader = _BitReader(bits)
    cad = ChanAlloc()
    cad.type = reader.read(2)
    cad.timeslot = reader.read(4)
    cad.ul_dl = reader.read(2)
    cad.clch_perm = reader.read(1)
    cad.cell_chg_f = reader.read(1)
    cad.carrier_nr = reader.read(12)
    cad.ext_carr_pres = reader.read(1)
    if cad.ext_carr_pres:
        cad.ext_freq_band = reader.read(4)
        cad.ext_freq_offset = reader.read(2)
        cad.ext_duplex_spc = reader.read(3)
        cad.ext_reverse_oper = reader.read(1)
    cad.monit_pattern = reader.read(2)
    if cad.monit_pattern == 0:
        cad.monit_patt_f18 = reader.read(2)
    if cad.ul_dl == 0:
        cad.aug_ul_dl_ass = reader.read(2)
        cad.aug_bandwidth = reader.read(3)
        cad.aug_modulation = reader.read(3)
        cad.aug_max_ul_qam = reader.read(3)
        reader.skip(3)  # reserved
        cad.aug_conf_chan_stat = reader.read(3)
        cad.aug_bs_imbalance = reader.read(4)
        cad.aug_bs_tx_rel = reader.read(5)
        cad.aug_napping_sts = reader.read(2)
        if cad.aug_napping_sts == 1:
            reader.skip(11)  # napping info 21.5.2c
        reader.skip(4)  # reserved
        if reader.read(1):
            reader.skip(16)
        if reader.read(1):
            reader.skip(16)
        reader.skip(1)
    cad.bit_length = reader.pos
    return cad


def decode_nr_slots(value: int) -> int:
    """Number of granted slots for a 4-bit code (table 21.90)."""
    return _NR_SLOTS[value & 0xF]


def decode_length(length_ind: int) -> int:
    """Decode a MAC length indication into octets or a special MACPDU_LEN_* value.

    Raises ValueError for reserved indications.
    """
    y2 = z2 = 1
    if length_ind in (0, 0x3B, 0x3C):
        raise ValueError(f"reserved length indication 0x{length_ind:x}")
    if 0 < length_ind <= 0x12:
        return y2 * length_ind
    if 0x12 < length_ind <= 0x3A:
        return 18 * y2 + (length_ind - 18) * z2
    if length_ind == 0x3E:
        return MACPDU_LEN_2ND_STOLEN
    if length_ind == 0x3F:
        return MACPDU_LEN_START_FRAG
    raise ValueError(f"reserved length indication 0x{length_ind:x}")


def decode_resource(bits: Sequence[int], is_decrypted: int = 0) -> ResourcePdu:
    """Decode the header of a MAC-RESOURCE PDU."""
    reader = _BitReader(bits, 2)
    rsd = ResourcePdu()
    rsd.fill_bits = reader.read(1)
    rsd.grant_position = reader.read(1)
    rsd.encryption_mode = reader.read(2)
    rsd.is_encrypted = rsd.encryption_mode > 0 and not is_decrypted
    rsd.rand_acc_flag = reader.read(1)
    try:
        rsd.macpdu_length = decode_length(reader.read(6))
    except ValueError:
        rsd.macpdu_length = None
    addr_type = AddressType(reader.read(3))
    rsd.addr.type = addr_type
    if addr_type == AddressType.NULL:
        rsd.tm_sdu_offset = 0
        return rsd
    if addr_type in (AddressType.SSI, AddressType.USSI, AddressType.SMI):
        rsd.addr.ssi = reader.peek(24)
    elif addr_type == AddressType.EVENT_LABEL:
        rsd.addr.event_label = reader.peek(10)
    elif addr_type in (AddressType.SSI_EVENT, AddressType.SMI_EVENT):
        rsd.addr.ssi = reader.peek(24)
        rsd.addr.event_label = reader.peek(10, 24)
    elif addr_type == AddressType.SSI_USAGE:
        rsd.addr.ssi = reader.peek(24)
        rsd.addr.usage_marker = reader.peek(6, 24)
    reader.skip(_ADDR_LEN_BY_TYPE[addr_type])

    rsd.power_control_pres = reader.read(1)
    if rsd.power_control_pres:
        reader.skip(4)
    rsd.slot_granting_pres = reader.read(1)
    if rsd.slot_granting_pres:
        rsd.slot_granting_nr_slots = decode_nr_slots(reader.read(4))
        rsd.slot_granting_delay = reader.read(4)
    rsd.chan_alloc_pres = reader.read(1)
    if rsd.chan_alloc_pres and not rsd.is_encrypted:
        # The length is only known for unencrypted elements.
        rsd.cad = decode_chan_alloc(bits[reader.pos:])
        reader.skip(rsd.cad.bit_length)
    rsd.tm_sdu_offset = reader.pos
    return rsd


def _decode_access_field(value: int) -> AccessField:
    value &= 0x3F
    return AccessField(access_code=value >> 4, base_frame_len=value & 0xF)


def decode_access_assign(bits: Sequence[int], f18: int = 0) -> AccessAssign:
    """Decode an ACCESS-ASSIGN PDU; ``f18`` selects the frame 18 layout."""
    reader = _BitReader(bits)
    aad = AccessAssign()
    aad.hdr = reader.read(2)
    field1 = reader.read(6)
    field2 = reader.read(6)

    both_access = False
    if not f18:
        if aad.hdr == ACC_ASS_DLCC_ULCO:
            both_access = True
        elif aad.hdr in (ACC_ASS_DLF1_ULCA, ACC_ASS_DLF1_ULAO):
            aad.dl_usage = field1
            aad.pres |= ACC_ASS_PRES_DL_USAGE
            aad.access[1] = _decode_access_field(field2)
            aad.pres |= ACC_ASS_PRES_ACCESS2
        else:
            aad.dl_usage = field1
            aad.pres |= ACC_ASS_PRES_DL_USAGE
            aad.ul_usage = field2
            aad.pres |= ACC_ASS_PRES_UL_USAGE
    else:
        if aad.hdr in (ACC_ASS_ULCO, ACC_ASS_ULCA, ACC_ASS_ULAO):
            both_access = True
        else:
            aad.access[1] = _decode_access_field(field2)
            aad.pres |= ACC_ASS_PRES_ACCESS2

    if both_access:
        aad.access[0] = _decode_access_field(field1)
        aad.access[1] = _decode_access_field(field2)
        aad.pres |= ACC_ASS_PRES_ACCESS1 | ACC_ASS_PRES_ACCESS2
    return aad


def _lookup(table: Mapping[int, str], value: int) -> str:
    try:
        return table[value]
    except KeyError:
        return f"unknown 0x{value:x}"


_MACPDU_NAMES = {
    PDU_T_MAC_RESOURCE: "RESOURCE",
    PDU_T_MAC_FRAG_END: "FRAG/END",
    PDU_T_BROADCAST: "BROADCAST",
    PDU_T_MAC_SUPPL: "SUPPLEMENTARY",
}

_SERV_DET_NAMES = {
    BS_SERVDET_REG_RQD: "Registration mandatory",
    BS_SERVDET_DEREG_RQD: "De-registration mandatory",
    BS_SERVDET_PRIO_CELL: "Priority cell",
    BS_SERVDET_MIN_MODE: "Cell never uses minimum mode",
    BS_SERVDET_MIGRATION: "Migration supported",
    BS_SERVDET_SYS_W_SERV: "Normal mode",
    BS_SERVDET_VOICE_SERV: "Voice service",
    BS_SERVDET_CSD_SERV: "Circuit data",
    BS_SERVDET_SNDCP_SERV: "SNDCP data",
    BS_SERVDET_AIR_ENCR: "Air encryption",
    BS_SERVDET_ADV_LINK: "Advanced link",
}

_DL_USAGE_NAMES = {
    DL_US_UNALLOC: "Unallocated",
    DL_US_ASS_CTRL: "Assigned control",
    DL_US_COM_CTRL: "Common control",
    DL_US_RESERVED: "Reserved",
}

_ADDR_TYPE_NAMES = {
    AddressType.NULL: "Null PDU",
    AddressType.SSI: "SSI",
    AddressType.EVENT_LABEL: "Event Label",
    AddressType.USSI: "USSI (migrading MS un-exchanged)",
    AddressType.SMI: "SMI (management)",
    AddressType.SSI_EVENT: "SSI + Event Label",
    AddressType.SSI_USAGE: "SSI + Usage Marker",
    AddressType.SMI_EVENT: "SMI + Event Label",
}

_ALLOC_TYPE_NAMES = {
    ALLOC_T_REPLACE: "Replace",
    ALLOC_T_ADDITIONAL: "Additional",
    ALLOC_T_QUIT_GO: "Quit and go",
    ALLOC_T_REPL_SLOT1: "Replace + Slot1",
}

_UL_DL_NAMES = {
    0: "Augmented",
    1: "Downlink only",
    2: "Uplink only",
    3: "Uplink + Downlink",
}


def macpdu_name(pdu_type: int) -> str:
    """Name of a MAC PDU type."""
    return _lookup(_MACPDU_NAMES, pdu_type & 0xFF)


def bs_serv_det_name(flag: int) -> str:
    """Name of a BS service details flag."""
    return _lookup(_SERV_DET_NAMES, flag)


def dl_usage_name(num: int) -> str:
    """Name of a downlink usage marker."""
    num &= 0xFF
    if num <= 3:
        return _lookup(_DL_USAGE_NAMES, num)
    return "Traffic"


def ul_usage_name(num: int) -> str:
    """Name of an uplink usage marker."""
    return "Unallocated" if (num & 0xFF) == 0 else "Traffic"


def addr_type_name(addr_type: int) -> str:
    """Name of an address type."""
    return _lookup(_ADDR_TYPE_NAMES, addr_type & 0xFF)


def alloc_type_name(alloc_type: int) -> str:
    """Name of a channel allocation type."""
    return _lookup(_ALLOC_TYPE_NAMES, alloc_type & 0xFF)


def addr_dump(addr: Address) -> str:
    """Render an address as text, e.g. ``SSI(1234)``."""
    kind = addr.type
    if kind in (AddressType.SSI, AddressType.USSI, AddressType.SMI):
        detail = f"{addr.ssi}"
    elif kind in (AddressType.EVENT_LABEL, AddressType.SSI_EVENT, AddressType.SMI_EVENT):
        detail = f"{addr.ssi}/E{addr.event_label}"
    elif kind == AddressType.SSI_USAGE:
        detail = f"{addr.ssi}/U{addr.usage_marker}"
    else:
        detail = ""
    return f"{addr_type_name(kind)}({detail})"


def ul_dl_name(ul_dl: int) -> str:
    """Name of a channel allocation UL/DL assignment."""
    return _lookup(_UL_DL_NAMES, ul_dl & 0xFF)