"""TETRA upper MAC layer above the TMV-SAP: dispatch of MAC PDUs and fragment reassembly."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

from .common import LogicalChannel, MacState, bits_to_uint, dl_carrier_hz, ul_carrier_hz
from .mac_pdu import (
    ACC_ASS_PRES_ACCESS1,
    ACC_ASS_PRES_ACCESS2,
    ACC_ASS_PRES_DL_USAGE,
    ACC_ASS_PRES_UL_USAGE,
    BS_SERVDET_ADV_LINK,
    BS_SERVDET_AIR_ENCR,
    BS_SERVDET_CSD_SERV,
    BS_SERVDET_DEREG_RQD,
    BS_SERVDET_MIGRATION,
    BS_SERVDET_MIN_MODE,
    BS_SERVDET_PRIO_CELL,
    BS_SERVDET_REG_RQD,
    BS_SERVDET_SNDCP_SERV,
    BS_SERVDET_SYS_W_SERV,
    BS_SERVDET_VOICE_SERV,
    MAC_FRAGE_FRAG,
    MACPDU_LEN_2ND_STOLEN,
    MACPDU_LEN_START_FRAG,
    PDU_T_BROADCAST,
    PDU_T_MAC_FRAG_END,
    PDU_T_MAC_RESOURCE,
    PDU_T_MAC_SUPPL,
    AddressType,
    ChanAlloc,
    SysInfo,
    alloc_type_name,
    decode_access_assign,
    decode_chan_alloc,
    decode_resource,
    decode_sysinfo,
    ul_dl_name,
)
from .tdma import TdmaTime

FRAGSLOT_NR_SLOTS = 5  # slot 0 is unused
N203 = 6  # maximum fragment slot age in multiframes
FRAGSLOT_MSGB_SIZE = 8192

# Bits handed to the LLC when the real TM-SDU length is unknown.
_UNKNOWN_SDU_LEN = 100

_SERVICE_FLAGS = (
    (BS_SERVDET_ADV_LINK, "advanced_link"),
    (BS_SERVDET_AIR_ENCR, "air_encryption"),
    (BS_SERVDET_SNDCP_SERV, "sndcp_data"),
    (BS_SERVDET_CSD_SERV, "circuit_data"),
    (BS_SERVDET_VOICE_SERV, "voice_service"),
    (BS_SERVDET_SYS_W_SERV, "normal_mode"),
    (BS_SERVDET_MIGRATION, "migration_supported"),
    (BS_SERVDET_MIN_MODE, "never_minimum_mode"),
    (BS_SERVDET_PRIO_CELL, "priority_cell"),
    (BS_SERVDET_DEREG_RQD, "dereg_mandatory"),
    (BS_SERVDET_REG_RQD, "reg_mandatory"),
)

_MAC_CHANNELS = (LogicalChannel.BNCH, LogicalChannel.UNKNOWN, LogicalChannel.SCH_F)


class _SduReceiver(Protocol):
    def receive(self, bits: Sequence[int]) -> Any: ...


@dataclass
class TmvUnitdata:
    """A TMV-UNITDATA indication: a decoded MAC block with its channel and time."""

    bits: Sequence[int]
    lchan: int = LogicalChannel.UNKNOWN
    crc_ok: bool = True
    tdma_time: TdmaTime = field(default_factory=TdmaTime)


@dataclass
class FragSlot:
    """A partially reassembled fragmented MAC PDU for one timeslot."""

    active: bool = False
    age: int = 0
    num_frags: int = 0
    encryption: bool = False
    key: Any = None
    header_len: int = 0
    bits: list[int] = field(default_factory=list)

    @property
    def length(self) -> int:
        """Number of TM-SDU bits collected so far."""
        return len(self.bits)


def _num_fill_bits(bits: Sequence[int], end: int) -> int:
    """Count trailing fill bits (the last 1 bit and the zeros after it)."""
    for i in range(1, end):
        if bits[end - i] == 1:
            return i
    return 0


def alloc_dump(cad: ChanAlloc, state: MacState) -> str:
    """Render a channel allocation as text."""
    if cad.ext_carr_pres:
        band, offset = cad.ext_freq_band, cad.ext_freq_offset
    else:
        sid = state.last_sid if state.last_sid is not None else SysInfo()
        band, offset = sid.freq_band, sid.freq_offset
    freq = dl_carrier_hz(band, cad.carrier_nr, offset)
    return f"{alloc_type_name(cad.type)} (TN{cad.timeslot}/{ul_dl_name(cad.ul_dl)}/{freq}Hz)"


class UpperMac:
    """Decodes MAC PDUs and hands TM-SDUs to the LLC.

    ``receive`` returns the number of bits the PDU occupied, or None where
    it fills the rest of the slot or its length cannot be determined.
    Encrypted PDUs are not decrypted and are not passed on.
    """

    reassemble_fragments = True

    def __init__(self, state: MacState, llc: _SduReceiver) -> None:
        self.state = state
        self.llc = llc
        self.fragslots = [FragSlot() for _ in range(FRAGSLOT_NR_SLOTS)]

    def receive(self, unitdata: TmvUnitdata) -> Optional[int]:
        """Process one TMV-UNITDATA indication."""
        if not unitdata.crc_ok:
            return None
        bits = tuple(unitdata.bits)

        if unitdata.tdma_time.fn == 18 and self.reassemble_fragments:
            self.age_fragslots()

        lchan = unitdata.lchan
        if lchan == LogicalChannel.AACH:
            self._rx_aach(unitdata, bits)
            return None
        if lchan not in _MAC_CHANNELS:
            return None

        pdu_type = bits_to_uint(bits[:2])
        if pdu_type == PDU_T_BROADCAST:
            return self._rx_bcast(unitdata, bits)
        if pdu_type == PDU_T_MAC_RESOURCE:
            return self._rx_resrc(unitdata, bits)
        if pdu_type == PDU_T_MAC_SUPPL:
            return self._rx_suppl(bits)
        if pdu_type == PDU_T_MAC_FRAG_END:
            if self.reassemble_fragments:
                if bits[2] == MAC_FRAGE_FRAG:
                    return self._rx_macfrag(unitdata, bits)
                return self._rx_macend(unitdata, bits)
            if bits[3] == MAC_FRAGE_FRAG:
                self._deliver(bits[4:4 + _UNKNOWN_SDU_LEN])
            return None
        return None

    def age_fragslots(self) -> None:
        """Age active fragment slots, dropping those older than N203 multiframes."""
        for index, slot in enumerate(self.fragslots):
            if slot.active:
                slot.age += 1
                if slot.age > N203:
                    self.fragslots[index] = FragSlot()

    def _deliver(self, bits: Sequence[int]) -> None:
        if len(bits) >= 4:
            self.llc.receive(tuple(bits))

    def _rx_bcast(self, unitdata: TmvUnitdata, bits: Sequence[int]) -> Optional[int]:
        sid = decode_sysinfo(bits)
        unitdata.tdma_time.hn = sid.hyperframe_number

        display = self.state.display
        display.dl_freq = dl_carrier_hz(sid.freq_band, sid.main_carrier, sid.freq_offset)
        display.ul_freq = ul_carrier_hz(
            sid.freq_band,
            sid.main_carrier,
            sid.freq_offset,
            sid.duplex_spacing,
            sid.reverse_operation,
        )
        if not sid.cck_valid_no_hf:
            display.curr_hyperframe = sid.hyperframe_number
        details = sid.mle_si.bs_service_details
        for flag, attr in _SERVICE_FLAGS:
            setattr(display, attr, bool(details & flag))

        self.state.last_sid = sid
        return None

    def _rx_resrc(self, unitdata: TmvUnitdata, bits: Sequence[int]) -> Optional[int]:
        rsd = decode_resource(bits, 0)
        if rsd.macpdu_length is None:
            return None

        end = len(bits)
        pdu_bits: Optional[int]
        if rsd.macpdu_length == MACPDU_LEN_2ND_STOLEN:
            pdu_bits = None
            self.state.cur_burst.blk2_stolen = True
        elif rsd.macpdu_length == MACPDU_LEN_START_FRAG:
            pdu_bits = None
        else:
            pdu_bits = rsd.macpdu_length * 8
            end = min(pdu_bits, len(bits))

        if rsd.fill_bits:
            end -= _num_fill_bits(bits, end)

        if rsd.addr.type == AddressType.NULL:
            return None

        self.state.ssi = rsd.addr.ssi
        self.state.usage_marker = rsd.addr.usage_marker
        self.state.addr_type = rsd.addr.type

        offset = rsd.tm_sdu_offset
        l2 = list(bits[offset:end]) if end > offset else []
        if not l2 or rsd.is_encrypted:
            return pdu_bits

        if rsd.macpdu_length != MACPDU_LEN_START_FRAG or not self.reassemble_fragments:
            self._deliver(l2)
        else:
            self.fragslots[unitdata.tdma_time.tn] = FragSlot(
                active=True,
                num_frags=1,
                encryption=rsd.encryption_mode > 0,
                key=None,
                header_len=offset,
                bits=l2,
            )
        return pdu_bits

    def _append_frag_bits(self, slot: FragSlot, bits: Sequence[int]) -> None:
        if slot.header_len + slot.length + len(bits) > FRAGSLOT_MSGB_SIZE:
            return
        slot.bits.extend(bits)
        slot.num_frags += 1
        slot.age = 0

    def _rx_macfrag(self, unitdata: TmvUnitdata, bits: Sequence[int]) -> Optional[int]:
        slot = self.fragslots[unitdata.tdma_time.tn]
        if slot.active:
            start = 4
            end = len(bits)
            if bits[3]:
                end -= _num_fill_bits(bits, end)
            self._append_frag_bits(slot, bits[start:end] if end > start else ())
        return None

    def _rx_macend(self, unitdata: TmvUnitdata, bits: Sequence[int]) -> int:
        index = unitdata.tdma_time.tn
        slot = self.fragslots[index]
        fill_present = bits[3]
        length_indicator = bits_to_uint(bits[5:11])
        pos = 11

        if slot.active:
            slot_granting = bits[pos]
            pos += 1
            if slot_granting:
                pos += 8
            chanalloc_present = bits[pos]
            pos += 1

            end = min(length_indicator * 8, len(bits))
            if fill_present:
                end -= _num_fill_bits(bits, end)
            if chanalloc_present:
                pos += decode_chan_alloc(bits[pos:]).bit_length

            self._append_frag_bits(slot, bits[pos:end] if end > pos else ())
            if not slot.encryption or slot.key is not None:
                self._deliver(slot.bits)

        self.fragslots[index] = FragSlot()
        return length_indicator * 8

    def _rx_suppl(self, bits: Sequence[int]) -> Optional[int]:
        offset = 17 + 1 + 8 if bits[17] else 17 + 1
        self._deliver(bits[offset:offset + _UNKNOWN_SDU_LEN])
        return None

    def _rx_aach(self, unitdata: TmvUnitdata, bits: Sequence[int]) -> None:
        aad = decode_access_assign(bits, 1 if unitdata.tdma_time.fn == 18 else 0)
        display = self.state.display
        if aad.pres & ACC_ASS_PRES_ACCESS1:
            display.access1_code = chr(ord("A") + aad.access[0].access_code)
            display.access1 = aad.access[0].base_frame_len
        if aad.pres & ACC_ASS_PRES_ACCESS2:
            display.access2_code = chr(ord("A") + aad.access[1].access_code)
            display.access2 = aad.access[1].base_frame_len
        if aad.pres & ACC_ASS_PRES_DL_USAGE:
            display.dl_usage = aad.dl_usage
        if aad.pres & ACC_ASS_PRES_UL_USAGE:
            display.ul_usage = aad.ul_usage

        burst = self.state.cur_burst
        burst.is_traffic = aad.dl_usage if aad.dl_usage > 3 else 0
        burst.blk1_stolen = False
        burst.blk2_stolen = False