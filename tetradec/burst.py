"""TETRA physical layer bursts: construction, training sequence search and splitting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence

from .common import MacState
from .tdma import TdmaTime

BLK_1 = 1
BLK_2 = 2

_BITS_PER_SYM = 2

_SB_BLK1_OFFSET = (6 + 1 + 40) * _BITS_PER_SYM
_SB_BBK_OFFSET = (6 + 1 + 40 + 60 + 19) * _BITS_PER_SYM
_SB_BLK2_OFFSET = (6 + 1 + 40 + 60 + 19 + 15) * _BITS_PER_SYM

_SB_BLK1_BITS = 60 * _BITS_PER_SYM
_SB_BBK_BITS = 15 * _BITS_PER_SYM
_SB_BLK2_BITS = 108 * _BITS_PER_SYM

_NDB_BLK1_OFFSET = (5 + 1 + 1) * _BITS_PER_SYM
_NDB_BBK1_OFFSET = (5 + 1 + 1 + 108) * _BITS_PER_SYM
_NDB_BBK2_OFFSET = (5 + 1 + 1 + 108 + 7 + 11) * _BITS_PER_SYM
_NDB_BLK2_OFFSET = (5 + 1 + 1 + 108 + 7 + 11 + 8) * _BITS_PER_SYM

_NDB_BBK1_BITS = 7 * _BITS_PER_SYM
_NDB_BBK2_BITS = 8 * _BITS_PER_SYM
_NDB_BLK_BITS = 108 * _BITS_PER_SYM
_NDB_BBK_BITS = _SB_BBK_BITS

# 9.4.4.3.1 Frequency correction field
F_BITS = (1,) * 8 + (0,) * 64 + (1,) * 8

# 9.4.4.3.2 Normal training sequences
N_BITS = (1, 1, 0, 1, 0, 0, 0, 0, 1, 1, 1, 0, 1, 0, 0, 1, 1, 1, 0, 1, 0, 0)
P_BITS = (0, 1, 1, 1, 1, 0, 1, 0, 0, 1, 0, 0, 0, 0, 1, 1, 0, 1, 1, 1, 1, 0)
Q_BITS = (1, 0, 1, 1, 0, 1, 1, 1, 0, 0, 0, 0, 0, 1, 1, 0, 1, 0, 1, 1, 0, 1)
N3_BITS = (1, 1, 1, 0, 0, 1, 1, 0, 1, 1, 1, 1, 0, 0, 0, 1, 1, 1, 1, 0, 0,
           0, 1, 1, 1, 1, 0, 0, 0, 0, 0, 0, 0)
P3_BITS = (1, 0, 1, 0, 1, 1, 1, 1, 1, 1, 0, 1, 0, 1, 0, 1, 0, 1, 1, 1, 0,
           0, 0, 1, 1, 0, 0, 0, 1, 0, 0, 1, 0)

# 9.4.4.3.3 Extended training sequences
X_BITS = (1, 0, 0, 1, 1, 1, 0, 1, 0, 0, 0, 0, 1, 1, 1, 0, 1, 0, 0, 1, 1, 1,
          0, 1, 0, 0, 0, 0, 1, 1)
X3_BITS = (0, 1, 1, 1, 0, 0, 1, 1, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 1, 1, 1, 0,
           1, 1, 0, 1, 0, 1, 0, 1, 1, 1, 1, 1, 0, 1, 0, 0, 0, 0, 0, 1, 1, 1, 0)

# 9.4.4.3.4 Synchronization training sequence
Y_BITS = (1, 1, 0, 0, 0, 0, 0, 1, 1, 0, 0, 1, 1, 1, 0, 0, 1, 1, 1, 0, 1, 0,
          0, 1, 1, 1, 0, 0, 0, 0, 0, 1, 1, 0, 0, 1, 1, 1)

# 9.4.4.3.5 Tail bits
T_BITS = (1, 1, 0, 0)
T3_BITS = (1, 1, 1, 0, 0, 0)


class TrainSeq(IntEnum):
    """Training sequences that identify a burst type."""

    NORM_1 = 0
    NORM_2 = 1
    NORM_3 = 2
    SYNC = 3
    EXT = 4


class TpSapType(IntEnum):
    """Kinds of burst blocks handed to the lower MAC over the TP-SAP."""

    SB1 = 0
    SB2 = 1
    NDB = 2
    BBK = 3
    SCH_HU = 4
    SCH_F = 5


class PhaseAdj(IntEnum):
    """Phase adjustment bit pairs (9.4.4.3.6)."""

    HA = 0
    HB = 1
    HC = 2
    HD = 3
    HE = 4
    HF = 5
    HG = 6
    HH = 7
    HI = 8
    HJ = 9


# Table 8.14: symbol ranges (first, last) the adjustment is computed over.
_PHASE_ADJ_N = {
    PhaseAdj.HA: (8, 122),
    PhaseAdj.HB: (123, 249),
    PhaseAdj.HC: (8, 108),
    PhaseAdj.HD: (109, 249),
    PhaseAdj.HE: (112, 230),
    PhaseAdj.HF: (1, 111),
    PhaseAdj.HG: (3, 117),
    PhaseAdj.HH: (118, 224),
    PhaseAdj.HI: (3, 103),
    PhaseAdj.HJ: (104, 224),
}

# Symbol value (bit0 | bit1 << 1) to phase shift in units of pi/4.
_BITS_TO_PHASE = (1, -1, 3, -3)

_PHASE_TO_BITS = {
    -3: (1, 1),
    -1: (0, 1),
    1: (0, 0),
    3: (1, 0),
}

_TRAIN_BITS = {
    TrainSeq.SYNC: Y_BITS,
    TrainSeq.NORM_1: N_BITS,
    TrainSeq.NORM_2: P_BITS,
    TrainSeq.NORM_3: Q_BITS,
    TrainSeq.EXT: X_BITS,
}

_SEARCH_ORDER = (
    TrainSeq.SYNC,
    TrainSeq.NORM_1,
    TrainSeq.NORM_2,
    TrainSeq.NORM_3,
    TrainSeq.EXT,
)


@dataclass
class BurstPart:
    """One block of a received burst, as passed to the lower MAC."""

    type: TpSapType
    blk_num: int
    bits: tuple[int, ...]


def _take(bits: Sequence[int], width: int, name: str) -> list[int]:
    if len(bits) < width:
        raise ValueError(f"{name} needs {width} bits, got {len(bits)}")
    return list(bits[:width])


def _calc_phase_adj(phase: int) -> int:
    remainder = abs(phase) % 8
    if phase < 0:
        remainder = -remainder
    adj = -remainder
    if adj > 3:
        adj -= 8
    elif adj < -3:
        adj += 8
    return adj


def sum_up_phase(bits: Sequence[int], sym_count: int) -> int:
    """Cumulative phase shift of ``sym_count`` symbols, in units of pi/4."""
    needed = 2 * sym_count
    if len(bits) < needed:
        raise ValueError(f"{sym_count} symbols need {needed} bits, got {len(bits)}")
    return sum(
        _BITS_TO_PHASE[(low & 1) | ((high & 1) << 1)]
        for low, high in zip(bits[0:needed:2], bits[1:needed:2])
    )


def phase_adj_bits(bits: Sequence[int], pa: PhaseAdj) -> tuple[int, int]:
    """Phase adjustment bit pair for the burst ``bits`` and adjustment ``pa``."""
    first, last = _PHASE_ADJ_N[PhaseAdj(pa)]
    total = sum_up_phase(bits[2 * (first - 1):], 1 + last - first)
    return _PHASE_TO_BITS[_calc_phase_adj(total)]


def build_sync_c_d_burst(
    sb: Sequence[int], bb: Sequence[int], bkn: Sequence[int]
) -> list[int]:
    """Build a synchronization continuous downlink burst (9.4.4.2.6)."""
    buf = (
        list(Q_BITS[10:])
        + [0, 0]
        + list(F_BITS)
        + _take(sb, _SB_BLK1_BITS, "synchronization block")
        + list(Y_BITS)
        + _take(bb, _SB_BBK_BITS, "broadcast block")
        + _take(bkn, _SB_BLK2_BITS, "block 2")
        + [0, 0]
        + list(Q_BITS[:10])
    )
    buf[12:14] = phase_adj_bits(buf, PhaseAdj.HC)
    buf[498:500] = phase_adj_bits(buf, PhaseAdj.HD)
    return buf


def build_norm_c_d_burst(
    bkn1: Sequence[int], bb: Sequence[int], bkn2: Sequence[int], two_log_chan: int
) -> list[int]:
    """Build a normal continuous downlink burst (9.4.4.2.5)."""
    broadcast = _take(bb, _NDB_BBK_BITS, "broadcast block")
    buf = (
        list(Q_BITS[10:])
        + [0, 0]
        + _take(bkn1, _NDB_BLK_BITS, "block 1")
        + broadcast[:_NDB_BBK1_BITS]
        + list(P_BITS if two_log_chan else N_BITS)
        + broadcast[_NDB_BBK1_BITS:]
        + _take(bkn2, _NDB_BLK_BITS, "block 2")
        + [0, 0]
        + list(Q_BITS[:10])
    )
    buf[12:14] = phase_adj_bits(buf, PhaseAdj.HA)
    buf[498:500] = phase_adj_bits(buf, PhaseAdj.HB)
    return buf


def find_train_seq(
    bits: Sequence[int], end: int, mask: int
) -> Optional[tuple[TrainSeq, int]]:
    """Find the first training sequence selected by ``mask`` in ``bits[:end]``.

    ``mask`` has bit ``1 << seq`` set for every sequence to look for.
    Returns the sequence and its bit offset, or None.
    """
    data = tuple(bits[:max(0, min(end, len(bits)))])
    patterns = [
        (seq, _TRAIN_BITS[seq]) for seq in _SEARCH_ORDER if mask & (1 << seq)
    ]
    for offset, bit in enumerate(data):
        for seq, pattern in patterns:
            if bit == pattern[0] and data[offset:offset + len(pattern)] == pattern:
                return seq, offset
    return None


def split_burst(
    burst: Sequence[int], train_seq: TrainSeq, time: TdmaTime, state: MacState
) -> list[BurstPart]:
    """Split a received burst into the blocks for the lower MAC.

    Also records the frame position and timeslot content in ``state.display``.
    """
    burst = tuple(burst)
    display = state.display
    display.curr_multiframe = time.mn
    display.curr_frame = time.fn

    parts: list[BurstPart] = []
    if train_seq == TrainSeq.SYNC:
        parts = [
            BurstPart(TpSapType.SB1, BLK_1,
                      burst[_SB_BLK1_OFFSET:_SB_BLK1_OFFSET + _SB_BLK1_BITS]),
            BurstPart(TpSapType.BBK, 0,
                      burst[_SB_BBK_OFFSET:_SB_BBK_OFFSET + _SB_BBK_BITS]),
            BurstPart(TpSapType.SB2, BLK_2,
                      burst[_SB_BLK2_OFFSET:_SB_BLK2_OFFSET + _SB_BLK2_BITS]),
        ]
        content = 3
    elif train_seq in (TrainSeq.NORM_1, TrainSeq.NORM_2):
        bbk = (
            burst[_NDB_BBK1_OFFSET:_NDB_BBK1_OFFSET + _NDB_BBK1_BITS]
            + burst[_NDB_BBK2_OFFSET:_NDB_BBK2_OFFSET + _NDB_BBK2_BITS]
        )
        blk1 = burst[_NDB_BLK1_OFFSET:_NDB_BLK1_OFFSET + _NDB_BLK_BITS]
        blk2 = burst[_NDB_BLK2_OFFSET:_NDB_BLK2_OFFSET + _NDB_BLK_BITS]
        if train_seq == TrainSeq.NORM_2:
            parts = [
                BurstPart(TpSapType.BBK, 0, bbk),
                BurstPart(TpSapType.NDB, BLK_1, blk1),
                BurstPart(TpSapType.NDB, BLK_2, blk2),
            ]
            content = 2
        else:
            parts = [
                BurstPart(TpSapType.BBK, 0, bbk),
                BurstPart(TpSapType.SCH_F, 0, blk1 + blk2),
            ]
            content = 4 if state.cur_burst.is_traffic else 1
    else:
        # Uplink training sequences are not expected on the downlink.
        content = 0

    if 1 <= time.tn <= len(display.timeslot_content):
        display.timeslot_content[time.tn - 1] = content
    return parts