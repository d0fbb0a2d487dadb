"""TETRA TDMA time keeping (EN 300 392-2, section 7.3)."""

from __future__ import annotations

from dataclasses import dataclass

_UINT32_MASK = 0xFFFFFFFF


@dataclass
class TdmaTime:
    """Position in the TDMA structure.

    ``hn`` is the hyperframe (1..65535), ``mn`` the multiframe (1..60),
    ``fn`` the frame (1..18), ``tn`` the timeslot (1..4) and ``sn`` the
    symbol (1..255).
    """

    hn: int = 0
    sn: int = 0
    tn: int = 0
    fn: int = 0
    mn: int = 0

    def _normalize_mn(self) -> None:
        if self.mn > 60:
            self.mn %= 60

    def _normalize_fn(self) -> None:
        if self.fn > 18:
            self.mn = (self.mn + self.fn // 18) & _UINT32_MASK
            self.fn %= 18
        self._normalize_mn()

    def _normalize_tn(self) -> None:
        if self.tn > 4:
            self.fn = (self.fn + self.tn // 4) & _UINT32_MASK
            self.tn %= 4
        self._normalize_fn()

    def _normalize_sn(self) -> None:
        if self.sn > 255:
            tn_delta = self.sn // 255
            self.sn = self.sn % 255 + 1
            self.tn = (self.tn + tn_delta) & _UINT32_MASK
        self._normalize_tn()

    def add_symbols(self, count: int) -> None:
        """Advance by ``count`` symbols."""
        self.sn = (self.sn + count) & _UINT32_MASK
        self._normalize_sn()

    def add_timeslots(self, count: int) -> None:
        """Advance by ``count`` timeslots."""
        self.tn = (self.tn + count) & _UINT32_MASK
        self._normalize_tn()

    def add_frames(self, count: int) -> None:
        """Advance by ``count`` frames."""
        self.fn = (self.fn + count) & _UINT32_MASK
        self._normalize_fn()

    def dump(self) -> str:
        """Render as ``MN/FN/TN/SN``."""
        return f"{self.mn:02d}/{self.fn:02d}/{self.tn}/{self.sn:03d}"

    def to_frame_number(self) -> int:
        """Absolute frame number counted from the start of hyperframe 0."""
        return ((((self.hn & 0xFFFF) * 60) + self.mn) * 18 + self.fn) & _UINT32_MASK