import pytest

from tetradec.burst import TrainSeq, build_norm_c_d_burst, build_sync_c_d_burst
from tetradec.burst_sync import BITBUF_SIZE, BurstSynchronizer, RxState


def _sync():
    return build_sync_c_d_burst([0] * 120, [0] * 30, [0] * 216)


def _norm(two_log_chan):
    return build_norm_c_d_burst([0] * 216, [0] * 30, [0] * 216, two_log_chan)


def _collector():
    received = []

    def on_burst(bits, seq):
        received.append((list(bits), seq))

    return received, on_burst


def _chunks(bits, size):
    for start in range(0, len(bits), size):
        yield bits[start:start + size]


def test_starts_unlocked_and_waits_for_two_slots():
    received, on_burst = _collector()
    sync = BurstSynchronizer(on_burst)
    assert sync.feed([0] * 500) == RxState.UNLOCKED
    assert received == []


def test_finds_sync_and_knows_frame_start():
    received, on_burst = _collector()
    sync = BurstSynchronizer(on_burst)
    stream = [0] * 100 + _sync() + [0] * 510
    assert sync.feed(stream) == RxState.KNOW_FSTART
    assert sync.next_frame_start_bitnum == 100 + 510
    assert received == []


def test_locks_and_delivers_following_sync_burst():
    received, on_burst = _collector()
    sync = BurstSynchronizer(on_burst)
    second = _sync()
    sync.feed([0] * 100 + _sync() + second)
    assert sync.feed([]) == RxState.LOCKED
    assert received == [(second, TrainSeq.SYNC)]


def test_misaligned_sync_burst_unlocks():
    received, on_burst = _collector()
    sync = BurstSynchronizer(on_burst)
    sync.feed([0] * 100 + _sync() + [0] * 10 + _sync())
    assert sync.feed([]) == RxState.UNLOCKED
    assert received == []


def test_stream_of_bursts_delivered_in_order():
    received, on_burst = _collector()
    synchronizer = BurstSynchronizer(on_burst)
    bursts = [_sync(), _norm(0), _norm(1), _sync(), _norm(0)]
    stream = [0] * 100 + [bit for burst in bursts for bit in burst] + [0] * 2040
    states = [synchronizer.feed(chunk) for chunk in _chunks(stream, 255)]
    assert [bits for bits, _ in received] == bursts[1:]
    assert [seq for _, seq in received] == [
        TrainSeq.NORM_1,
        TrainSeq.NORM_2,
        TrainSeq.SYNC,
        TrainSeq.NORM_1,
    ]
    assert RxState.LOCKED in states
    assert states[-1] == RxState.UNLOCKED


def test_buffer_never_exceeds_capacity():
    received, on_burst = _collector()
    synchronizer = BurstSynchronizer(on_burst)
    for _ in range(5):
        synchronizer.feed([0] * 2000)
        assert synchronizer.bits_in_buf <= BITBUF_SIZE
    assert synchronizer.bitbuf_start_bitnum + synchronizer.bits_in_buf == 10000


def test_rejects_oversized_input():
    received, on_burst = _collector()
    synchronizer = BurstSynchronizer(on_burst)
    with pytest.raises(ValueError):
        synchronizer.feed([0] * (BITBUF_SIZE + 1))