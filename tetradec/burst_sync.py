"""Burst synchronization: locks onto the TETRA slot structure in a raw bit stream."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Iterable, Optional

from .burst import TrainSeq, find_train_seq
from .common import TETRA_BITS_PER_TS
from .tdma import TdmaTime

BITBUF_SIZE = 4096

# Offset from the start of the SYNC training sequence to the next frame start.
_SYNC_TO_NEXT_FRAME = 296
_SYNC_OFFSET = 214
_NORM_OFFSET = 244

_LOCKED_MASK = (1 << TrainSeq.NORM_1) | (1 << TrainSeq.NORM_2) | (1 << TrainSeq.SYNC)


class RxState(IntEnum):
    """Synchronization states."""

    UNLOCKED = 0
    KNOW_FSTART = 1
    LOCKED = 2


class BurstSynchronizer:
    """Finds bursts in a bit stream and passes each to ``on_burst(bits, train_seq)``.

    ``time`` is advanced by one timeslot for every burst examined while locked.
    """

    def __init__(
        self,
        on_burst: Callable[[tuple[int, ...], TrainSeq], Any],
        time: Optional[TdmaTime] = None,
    ) -> None:
        self.on_burst = on_burst
        self.time = time if time is not None else TdmaTime()
        self.state = RxState.UNLOCKED
        self.bitbuf_start_bitnum = 0
        self.next_frame_start_bitnum = 0
        self._buf: list[int] = []

    @property
    def bits_in_buf(self) -> int:
        """Number of bits currently buffered."""
        return len(self._buf)

    def _drop(self, count: int) -> None:
        del self._buf[:count]
        self.bitbuf_start_bitnum += count

    def feed(self, bits: Iterable[int]) -> RxState:
        """Append raw bits, handle at most one burst, and return the new state.

        Raises ValueError when more bits are given than the buffer holds.
        """
        bits = list(bits)
        if len(bits) > BITBUF_SIZE:
            raise ValueError(f"at most {BITBUF_SIZE} bits per call, got {len(bits)}")
        space = BITBUF_SIZE - len(self._buf)
        if space < len(bits):
            self._drop(len(bits) - space)
        self._buf.extend(bits)

        if self.state == RxState.UNLOCKED:
            if len(self._buf) < TETRA_BITS_PER_TS * 2:
                return self.state
            found = find_train_seq(self._buf, len(self._buf), 1 << TrainSeq.SYNC)
            if found is None:
                return self.state
            _, offset = found
            self.state = RxState.KNOW_FSTART
            self.next_frame_start_bitnum = (
                self.bitbuf_start_bitnum + offset + _SYNC_TO_NEXT_FRAME
            )
            return self.state

        if self.state == RxState.KNOW_FSTART:
            if self.bitbuf_start_bitnum + len(self._buf) < self.next_frame_start_bitnum:
                return self.state
            self._drop(max(0, self.next_frame_start_bitnum - self.bitbuf_start_bitnum))
            self.next_frame_start_bitnum += TETRA_BITS_PER_TS
            self.state = RxState.LOCKED

        if len(self._buf) < TETRA_BITS_PER_TS:
            return self.state

        self.time.add_timeslots(1)
        found = find_train_seq(self._buf, len(self._buf), _LOCKED_MASK)
        burst = tuple(self._buf[:TETRA_BITS_PER_TS])
        if found is None:
            self.state = RxState.UNLOCKED
        else:
            seq, offset = found
            if seq == TrainSeq.SYNC:
                if offset == _SYNC_OFFSET:
                    self.on_burst(burst, seq)
                else:
                    self.state = RxState.UNLOCKED
            elif offset == _NORM_OFFSET:
                self.on_burst(burst, seq)

        self._drop(TETRA_BITS_PER_TS)
        self.next_frame_start_bitnum += TETRA_BITS_PER_TS
        return self.state