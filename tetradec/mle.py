"""Reception of TL-SDUs (MLE PDUs) and dispatch by protocol discriminator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from .common import bits_to_uint
from .pdu_names import (
    MlePdisc,
    cmce_pdut_name,
    mle_pdisc_name,
    mle_pdut_name,
    mm_pdut_name,
    sndcp_pdut_name,
)

# Width of the PDU type field following the discriminator, per protocol.
_PDU_TYPE_WIDTH = {
    MlePdisc.MM: (4, mm_pdut_name),
    MlePdisc.CMCE: (5, cmce_pdut_name),
    MlePdisc.SNDCP: (4, sndcp_pdut_name),
    MlePdisc.MLE: (3, mle_pdut_name),
}


@dataclass
class TlSdu:
    """A received TL-SDU with the header fields that could be read.

    Fields that do not apply or lie beyond the received bits are None.
    """

    bits: tuple[int, ...]
    pdisc: int
    pdisc_name: str
    pdu_type: Optional[int] = None
    pdu_name: Optional[str] = None
    nsapi: Optional[int] = None
    pcomp: Optional[int] = None
    dcomp: Optional[int] = None
    ip_version: Optional[int] = None
    ihl: Optional[int] = None
    protocol: Optional[int] = None


def _field(bits: Sequence[int], start: int, width: int) -> Optional[int]:
    if start + width > len(bits):
        return None
    return bits_to_uint(bits[start:start + width])


def parse_tl_sdu(bits: Sequence[int]) -> TlSdu:
    """Decode the MLE header of a TL-SDU.

    Raises ValueError when the 3-bit protocol discriminator is missing.
    """
    bits = tuple(bits)
    if len(bits) < 3:
        raise ValueError(f"TL-SDU needs at least 3 bits, got {len(bits)}")
    pdisc = bits_to_uint(bits[:3])
    sdu = TlSdu(bits=bits, pdisc=pdisc, pdisc_name=mle_pdisc_name(pdisc))

    if pdisc not in _PDU_TYPE_WIDTH:
        return sdu
    width, namer = _PDU_TYPE_WIDTH[MlePdisc(pdisc)]
    sdu.pdu_type = _field(bits, 3, width)
    if sdu.pdu_type is not None:
        sdu.pdu_name = namer(sdu.pdu_type, 0)

    if pdisc == MlePdisc.SNDCP:
        sdu.nsapi = _field(bits, 7, 4)
        sdu.pcomp = _field(bits, 11, 4)
        sdu.dcomp = _field(bits, 15, 4)
        sdu.ip_version = _field(bits, 19, 4)
        header_words = _field(bits, 23, 4)
        sdu.ihl = None if header_words is None else 4 * header_words
        sdu.protocol = _field(bits, 27 + 64, 8)
    return sdu