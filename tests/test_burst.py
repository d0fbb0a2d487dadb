import random

import pytest

from tetradec.burst import (
    BLK_1,
    BLK_2,
    PhaseAdj,
    TpSapType,
    TrainSeq,
    build_norm_c_d_burst,
    build_sync_c_d_burst,
    find_train_seq,
    phase_adj_bits,
    split_burst,
    sum_up_phase,
)
from tetradec.common import TETRA_BITS_PER_TS, MacState
from tetradec.tdma import TdmaTime


def _random_bits(rng, count):
    return [rng.randint(0, 1) for _ in range(count)]


def test_sync_burst_has_sync_sequence_at_214():
    burst = build_sync_c_d_burst([0] * 120, [0] * 30, [0] * 216)
    assert len(burst) == TETRA_BITS_PER_TS
    assert find_train_seq(burst, len(burst), 1 << TrainSeq.SYNC) == (TrainSeq.SYNC, 214)


@pytest.mark.parametrize("two_log_chan,expected", [(0, TrainSeq.NORM_1), (1, TrainSeq.NORM_2)])
def test_norm_burst_training_sequence(two_log_chan, expected):
    burst = build_norm_c_d_burst([0] * 216, [0] * 30, [0] * 216, two_log_chan)
    assert len(burst) == TETRA_BITS_PER_TS
    mask = (1 << TrainSeq.NORM_1) | (1 << TrainSeq.NORM_2)
    assert find_train_seq(burst, len(burst), mask) == (expected, 244)


def test_phase_adjust_bits_are_embedded_in_norm_burst():
    rng = random.Random(7)
    burst = build_norm_c_d_burst(
        _random_bits(rng, 216), _random_bits(rng, 30), _random_bits(rng, 216), 0
    )
    assert phase_adj_bits(burst, PhaseAdj.HA) == tuple(burst[12:14])
    assert phase_adj_bits(burst, PhaseAdj.HB) == tuple(burst[498:500])


def test_phase_adjust_bits_are_embedded_in_sync_burst():
    rng = random.Random(11)
    burst = build_sync_c_d_burst(
        _random_bits(rng, 120), _random_bits(rng, 30), _random_bits(rng, 216)
    )
    assert phase_adj_bits(burst, PhaseAdj.HC) == tuple(burst[12:14])
    assert phase_adj_bits(burst, PhaseAdj.HD) == tuple(burst[498:500])


def test_phase_adjust_of_zero_bits():
    assert phase_adj_bits([0] * 510, PhaseAdj.HA) == (1, 1)


def test_sum_up_phase_zero_symbols_each_add_one():
    assert sum_up_phase([0] * 20, 10) == 10


def test_sum_up_phase_table_values():
    assert sum_up_phase([0, 0, 1, 0, 0, 1, 1, 1], 4) == 1 - 1 + 3 - 3
    assert sum_up_phase([0, 1], 1) == 3
    assert sum_up_phase([1, 1], 1) == -3


def test_sum_up_phase_too_few_bits():
    with pytest.raises(ValueError):
        sum_up_phase([0, 0, 1], 2)


def test_find_train_seq_absent():
    assert find_train_seq([0] * 600, 600, 0x1F) is None


def test_find_train_seq_respects_end_and_mask():
    burst = build_sync_c_d_burst([0] * 120, [0] * 30, [0] * 216)
    assert find_train_seq(burst, 214 + 20, 1 << TrainSeq.SYNC) is None
    assert find_train_seq(burst, len(burst), 1 << TrainSeq.EXT) is None


def test_build_rejects_short_blocks():
    with pytest.raises(ValueError):
        build_sync_c_d_burst([0] * 100, [0] * 30, [0] * 216)
    with pytest.raises(ValueError):
        build_norm_c_d_burst([0] * 216, [0] * 29, [0] * 216, 0)


def test_split_sync_burst_round_trip():
    rng = random.Random(1)
    sb, bb, bkn = _random_bits(rng, 120), _random_bits(rng, 30), _random_bits(rng, 216)
    burst = build_sync_c_d_burst(sb, bb, bkn)
    state = MacState()
    time = TdmaTime(tn=2, fn=5, mn=17)
    parts = split_burst(burst, TrainSeq.SYNC, time, state)
    assert [(p.type, p.blk_num) for p in parts] == [
        (TpSapType.SB1, BLK_1),
        (TpSapType.BBK, 0),
        (TpSapType.SB2, BLK_2),
    ]
    assert [list(p.bits) for p in parts] == [sb, bb, bkn]
    assert state.display.timeslot_content[1] == 3
    assert state.display.curr_multiframe == 17
    assert state.display.curr_frame == 5


@pytest.mark.parametrize("is_traffic,content", [(0, 1), (5, 4)])
def test_split_norm1_burst(is_traffic, content):
    rng = random.Random(2)
    bkn1, bb, bkn2 = _random_bits(rng, 216), _random_bits(rng, 30), _random_bits(rng, 216)
    burst = build_norm_c_d_burst(bkn1, bb, bkn2, 0)
    state = MacState()
    state.cur_burst.is_traffic = is_traffic
    parts = split_burst(burst, TrainSeq.NORM_1, TdmaTime(tn=4), state)
    assert [p.type for p in parts] == [TpSapType.BBK, TpSapType.SCH_F]
    assert list(parts[0].bits) == bb
    assert list(parts[1].bits) == bkn1 + bkn2
    assert state.display.timeslot_content[3] == content


def test_split_norm2_burst():
    rng = random.Random(3)
    bkn1, bb, bkn2 = _random_bits(rng, 216), _random_bits(rng, 30), _random_bits(rng, 216)
    burst = build_norm_c_d_burst(bkn1, bb, bkn2, 1)
    state = MacState()
    parts = split_burst(burst, TrainSeq.NORM_2, TdmaTime(tn=1), state)
    assert [(p.type, p.blk_num) for p in parts] == [
        (TpSapType.BBK, 0),
        (TpSapType.NDB, BLK_1),
        (TpSapType.NDB, BLK_2),
    ]
    assert [list(p.bits) for p in parts] == [bb, bkn1, bkn2]
    assert state.display.timeslot_content[0] == 2


def test_split_uplink_sequence_yields_nothing():
    state = MacState()
    state.display.timeslot_content[2] = 3
    parts = split_burst([0] * 510, TrainSeq.NORM_3, TdmaTime(tn=3), state)
    assert parts == []
    assert state.display.timeslot_content[2] == 0