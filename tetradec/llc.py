"""TETRA LLC entity: dispatches TM-SDUs and reassembles advanced-link segments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Sequence

from .llc_pdu import LlcPdu, LlcPduDec, parse_llc_pdu

_DIRECT = frozenset({
    LlcPduDec.BL_ADATA,
    LlcPduDec.BL_DATA,
    LlcPduDec.BL_UDATA,
    LlcPduDec.BL_ACK,
    LlcPduDec.AL_SETUP,
    LlcPduDec.AL_ACK,
    LlcPduDec.AL_RNR,
    LlcPduDec.AL_RECONNECT,
    LlcPduDec.AL_DISC,
})

_SEGMENT = frozenset({
    LlcPduDec.AL_DATA,
    LlcPduDec.AL_UDATA,
    LlcPduDec.ALX_DATA,
    LlcPduDec.ALX_UDATA,
})

_FINAL_SEGMENT = frozenset({
    LlcPduDec.AL_FINAL,
    LlcPduDec.AL_UFINAL,
    LlcPduDec.ALX_FINAL,
    LlcPduDec.ALX_UFINAL,
})


@dataclass
class _DefragEntry:
    ns: int
    last_ss: int = 0
    bits: list[int] = field(default_factory=list)


class LlcEntity:
    """Receives TM-SDUs and hands complete TL-SDUs to ``sdu_handler``."""

    def __init__(self, sdu_handler: Callable[[tuple[int, ...]], Any]) -> None:
        self._sdu_handler = sdu_handler
        self._defrag: dict[int, _DefragEntry] = {}

    def receive(self, bits: Sequence[int]) -> LlcPdu:
        """Process one TM-SDU given as unpacked bits and return the parsed LLC PDU.

        Raises ValueError for a TM-SDU shorter than 4 bits.
        """
        bits = tuple(bits)
        if len(bits) < 4:
            raise ValueError(f"TM-SDU too short: {len(bits)} bits")
        pdu = parse_llc_pdu(bits)
        if not pdu.tl_sdu:
            return pdu

        if pdu.pdu_type in _DIRECT:
            self._sdu_handler(pdu.tl_sdu)
        elif pdu.pdu_type in _SEGMENT:
            self._defrag_in(pdu)
        elif pdu.pdu_type in _FINAL_SEGMENT:
            self._defrag_in(pdu)
            self._defrag_out(pdu)
        return pdu

    def pending(self) -> dict[int, tuple[int, ...]]:
        """Partially reassembled TL-SDUs, keyed by N(S)."""
        return {ns: tuple(entry.bits) for ns, entry in self._defrag.items()}

    def _defrag_in(self, pdu: LlcPdu) -> None:
        entry = self._defrag.setdefault(pdu.ns, _DefragEntry(ns=pdu.ns))
        # A first segment, or the next expected one; anything else is dropped.
        if not entry.last_ss or entry.last_ss == pdu.ss - 1:
            entry.last_ss = pdu.ss
            entry.bits.extend(pdu.tl_sdu)

    def _defrag_out(self, pdu: LlcPdu) -> None:
        entry = self._defrag.pop(pdu.ns)
        self._sdu_handler(tuple(entry.bits))