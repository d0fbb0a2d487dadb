"""Parsing of TETRA LLC PDUs (clause 21)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping, Sequence

from .common import bits_to_uint

_UINT32_MASK = 0xFFFFFFFF
_FCS_POLY = 0x04C11DB7
_FCS_BITS = 32


class LlcPduType(IntEnum):
    """LLC PDU types on the air (table 21.1)."""

    BL_ADATA = 0
    BL_DATA = 1
    BL_UDATA = 2
    BL_ACK = 3
    BL_ADATA_FCS = 4
    BL_DATA_FCS = 5
    BL_UDATA_FCS = 6
    BL_ACK_FCS = 7
    AL_SETUP = 8
    AL_DATA_FINAL = 9
    AL_UDATA_UFINAL = 10
    AL_ACK_RNR = 11
    AL_RECONNECT = 12
    SUPPL = 13
    L2SIG = 14
    AL_DISC = 15


class LlcPduDec(IntEnum):
    """Decoded LLC PDU kinds."""

    UNKNOWN = 0
    BL_ADATA = 1
    BL_DATA = 2
    BL_UDATA = 3
    BL_ACK = 4
    AL_SETUP = 5
    AL_DATA = 6
    AL_FINAL = 7
    AL_UDATA = 8
    AL_UFINAL = 9
    AL_ACK = 10
    AL_RNR = 11
    AL_RECONNECT = 12
    AL_DISC = 13
    ALX_DATA = 14
    ALX_FINAL = 15
    ALX_UDATA = 16
    ALX_UFINAL = 17
    ALX_ACK = 18
    ALX_RNR = 19


_PDUT_NAMES = {
    LlcPduType.BL_ADATA: "BL-ADATA",
    LlcPduType.BL_DATA: "BL-DATA",
    LlcPduType.BL_UDATA: "BL-UDATA",
    LlcPduType.BL_ACK: "BL-ACK",
    LlcPduType.BL_ADATA_FCS: "BL-ADATA-FCS",
    LlcPduType.BL_DATA_FCS: "BL-DATA-FCS",
    LlcPduType.BL_UDATA_FCS: "BL-UDATA-FCS",
    LlcPduType.BL_ACK_FCS: "BL-ACK-FCS",
    LlcPduType.AL_SETUP: "AL-SETUP",
    LlcPduType.AL_DATA_FINAL: "AL-DATA/FINAL",
    LlcPduType.AL_UDATA_UFINAL: "AL-UDATA/FINAL",
    LlcPduType.AL_ACK_RNR: "AL-ACK/AL-RNR",
    LlcPduType.AL_RECONNECT: "AL-RECONNECT",
    LlcPduType.SUPPL: "AL-SUPPLEMENTARY",
    LlcPduType.L2SIG: "AL-L2SIG",
    LlcPduType.AL_DISC: "AL-DISC",
}

_PDUT_DEC_NAMES = {
    LlcPduDec.BL_ADATA: "BL-ADATA",
    LlcPduDec.BL_DATA: "BL-DATA",
    LlcPduDec.BL_UDATA: "BL-UDATA",
    LlcPduDec.BL_ACK: "BL-ACK",
    LlcPduDec.AL_SETUP: "AL-SETUP",
    LlcPduDec.AL_DATA: "AL-DATA",
    LlcPduDec.AL_FINAL: "AL-FINAL",
    LlcPduDec.AL_UDATA: "AL-UDATA",
    LlcPduDec.AL_UFINAL: "AL-UFINAL",
    LlcPduDec.AL_ACK: "AL-ACK",
    LlcPduDec.AL_RNR: "AL-RNR",
    LlcPduDec.AL_RECONNECT: "AL-RECONNECT",
    LlcPduDec.AL_DISC: "AL-DISC",
    LlcPduDec.ALX_DATA: "ALX-DATA",
    LlcPduDec.ALX_FINAL: "ALX-FINAL",
    LlcPduDec.ALX_UDATA: "ALX-UDATA",
    LlcPduDec.ALX_UFINAL: "ALX-UFINAL",
    LlcPduDec.ALX_ACK: "ALX-ACK",
    LlcPduDec.ALX_RNR: "ALX-RNR",
}

# Minimum PDU length in bits for each on-air type; 0 where parsing is not implemented.
_PDU_MIN_LENGTHS = (6, 5, 4, 5, 6 + 32, 5 + 32, 4 + 32, 5 + 32, 0, 13, 17, 1, 0, 0, 0, 0)

# Basic link PDUs: decoded kind, carries N(R), carries N(S), carries FCS.
_BASIC_LINK = {
    LlcPduType.BL_ADATA: (LlcPduDec.BL_ADATA, True, True, False),
    LlcPduType.BL_ADATA_FCS: (LlcPduDec.BL_ADATA, True, True, True),
    LlcPduType.BL_DATA: (LlcPduDec.BL_DATA, False, True, False),
    LlcPduType.BL_DATA_FCS: (LlcPduDec.BL_DATA, False, True, True),
    LlcPduType.BL_UDATA: (LlcPduDec.BL_UDATA, False, False, False),
    LlcPduType.BL_UDATA_FCS: (LlcPduDec.BL_UDATA, False, False, True),
    LlcPduType.BL_ACK: (LlcPduDec.BL_ACK, True, False, False),
    LlcPduType.BL_ACK_FCS: (LlcPduDec.BL_ACK, True, False, True),
}

_EMPTY_SDU_KINDS = {
    LlcPduType.AL_SETUP: LlcPduDec.AL_SETUP,
    LlcPduType.AL_RECONNECT: LlcPduDec.AL_RECONNECT,
    LlcPduType.AL_DISC: LlcPduDec.AL_DISC,
}


@dataclass
class LlcPdu:
    """A parsed LLC PDU.

    ``tl_sdu`` holds the unpacked bits of the TL-SDU (without FCS) and
    ``header_len`` the number of bits consumed by the LLC header.
    """

    pdu_type: LlcPduDec = LlcPduDec.UNKNOWN
    nr: int = 0
    ns: int = 0
    ss: int = 0
    have_fcs: bool = False
    fcs: int = 0
    fcs_invalid: bool = False
    tl_sdu: tuple[int, ...] = ()
    header_len: int = 0

    @property
    def tl_sdu_len(self) -> int:
        """Length of the TL-SDU in bits."""
        return len(self.tl_sdu)


def compute_fcs(bits: Sequence[int]) -> int:
    """32-bit frame check sequence over unpacked bits."""
    crc = _UINT32_MASK
    if len(bits) < _FCS_BITS:
        crc = (crc << (_FCS_BITS - len(bits))) & _UINT32_MASK
    for bit in bits:
        feedback = (bit ^ (crc >> 31)) & 1
        crc = (crc << 1) & _UINT32_MASK
        if feedback:
            crc ^= _FCS_POLY
    return ~crc & _UINT32_MASK


def parse_llc_pdu(bits: Sequence[int]) -> LlcPdu:
    """Parse the unpacked bits of an LLC PDU.

    Raises ValueError when fewer than the 4 bits of the PDU type are given.
    """
    bits = tuple(bits)
    length = len(bits)
    if length < 4:
        raise ValueError(f"LLC PDU needs at least 4 bits, got {length}")

    pdu = LlcPdu()
    raw_type = LlcPduType(bits_to_uint(bits[:4]))
    if length < _PDU_MIN_LENGTHS[raw_type]:
        pdu.header_len = length
        return pdu

    cur = 4

    def take(width: int) -> int:
        nonlocal cur
        value = bits_to_uint(bits[cur:cur + width])
        cur += width
        return value

    sdu_end = length
    if raw_type in _BASIC_LINK:
        kind, has_nr, has_ns, has_fcs = _BASIC_LINK[raw_type]
        pdu.pdu_type = kind
        if has_nr:
            pdu.nr = take(1)
        if has_ns:
            pdu.ns = take(1)
        if has_fcs:
            sdu_end = length - _FCS_BITS
            pdu.have_fcs = True
            pdu.fcs = bits_to_uint(bits[sdu_end:])
            pdu.fcs_invalid = pdu.fcs != compute_fcs(bits[cur:sdu_end])
    elif raw_type == LlcPduType.AL_DATA_FINAL:
        final = take(1)
        take(1)  # AR flag
        pdu.ns = take(3)
        pdu.ss = take(8)
        pdu.pdu_type = LlcPduDec.AL_FINAL if final else LlcPduDec.AL_DATA
        # The FCS of a final segment is checked after defragmentation.
        pdu.have_fcs = bool(final)
    elif raw_type == LlcPduType.AL_UDATA_UFINAL:
        final = take(1)
        pdu.ns = take(8)
        pdu.ss = take(8)
        pdu.pdu_type = LlcPduDec.AL_UFINAL if final else LlcPduDec.AL_UDATA
        pdu.have_fcs = bool(final)
    elif raw_type == LlcPduType.AL_ACK_RNR:
        pdu.pdu_type = LlcPduDec.AL_ACK if take(1) else LlcPduDec.AL_RNR
        sdu_end = cur
    elif raw_type in _EMPTY_SDU_KINDS:
        pdu.pdu_type = _EMPTY_SDU_KINDS[raw_type]
        sdu_end = cur
    else:
        pdu.pdu_type = LlcPduDec.UNKNOWN
        sdu_end = cur

    if length < cur:
        pdu.tl_sdu = ()
        pdu.header_len = length
    else:
        pdu.tl_sdu = bits[cur:sdu_end]
        pdu.header_len = cur
    return pdu


def _lookup(table: Mapping[int, str], value: int) -> str:
    try:
        return table[value]
    except KeyError:
        return f"unknown 0x{value:x}"


def llc_pdut_name(pdut: int) -> str:
    """Name of an on-air LLC PDU type."""
    return _lookup(_PDUT_NAMES, pdut & 0xFF)


def llc_pdut_dec_name(pdut: int) -> str:
    """Name of a decoded LLC PDU kind."""
    return _lookup(_PDUT_DEC_NAMES, pdut)