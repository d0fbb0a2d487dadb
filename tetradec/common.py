"""Shared TETRA helpers: bit packing, carrier frequencies and decoder state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Iterable, Optional, Sequence

TETRA_SYM_PER_TS = 255
TETRA_BITS_PER_TS = TETRA_SYM_PER_TS * 2
TETRA_CRC_OK = 0x1D0F

_UINT32_MASK = 0xFFFFFFFF


class LogicalChannel(IntEnum):
    """Logical channels (chapter 22.2.x)."""

    UNKNOWN = 0
    SCH_F = 1
    SCH_HD = 2
    SCH_HU = 3
    STCH = 4
    SCH_P8_F = 5
    SCH_P8_HD = 6
    SCH_P8_HU = 7
    AACH = 8
    TCH = 9
    BSCH = 10
    BNCH = 11


_LCHAN_NAMES = {
    LogicalChannel.UNKNOWN: "UNKNOWN",
    LogicalChannel.SCH_F: "SCH/F",
    LogicalChannel.SCH_HD: "SCH/HD",
    LogicalChannel.SCH_HU: "SCH/HU",
    LogicalChannel.STCH: "STCH",
    LogicalChannel.SCH_P8_F: "SCH-P8/F",
    LogicalChannel.SCH_P8_HD: "SCH-P8/HD",
    LogicalChannel.SCH_P8_HU: "SCH-P8/HU",
    LogicalChannel.AACH: "AACH",
    LogicalChannel.TCH: "TCH",
    LogicalChannel.BSCH: "BSCH",
    LogicalChannel.BNCH: "BNCH",
}

_CARRIER_OFFSET = (0, 6250, -6250, 12500)

# TS 100 392-15, Table 2; values in kHz, None marks reserved entries.
_R = None
_DUPLEX_SPACING_KHZ: tuple[tuple[Optional[int], ...], ...] = (
    (_R, 1600, 10000, 10000, 10000, 10000, 10000, _R, _R, _R, _R, _R, _R, _R, _R, _R),
    (_R, 4500, _R, 36000, 7000, _R, _R, _R, 45000, 45000, _R, _R, _R, _R, _R, _R),
    (0,) * 16,
    (_R, _R, _R, 8000, 8000, _R, _R, _R, 18000, 18000, _R, _R, _R, _R, _R, _R),
    (_R, _R, _R, 18000, 5000, _R, 30000, 30000, _R, 39000, _R, _R, _R, _R, _R, _R),
    (_R, _R, _R, _R, 9500, _R, _R, _R, _R, _R, _R, _R, _R, _R, _R, _R),
    (_R,) * 16,
    (_R,) * 16,
)


def _unknown(value: int) -> str:
    return f"unknown 0x{value:x}"


def bits_to_uint(bits: Iterable[int]) -> int:
    """Pack a sequence of unpacked bits (MSB first) into an unsigned 32-bit integer."""
    result = 0
    for bit in bits:
        result = ((result << 1) | (bit & 1)) & _UINT32_MASK
    return result


def dl_carrier_hz(band: int, carrier: int, offset: int) -> int:
    """Downlink carrier frequency in Hz."""
    return band * 100_000_000 + carrier * 25_000 + _CARRIER_OFFSET[offset & 3]


def ul_carrier_hz(band: int, carrier: int, offset: int, duplex: int, reverse: int) -> int:
    """Uplink carrier frequency in Hz, or 0 where the duplex spacing is reserved."""
    freq = dl_carrier_hz(band, carrier, offset)
    spacing_khz = _DUPLEX_SPACING_KHZ[duplex & 7][band & 15]
    if spacing_khz is None:
        return 0
    spacing = spacing_khz * 1000
    return freq + spacing if reverse else freq - spacing


def lchan_name(lchan: int) -> str:
    """Human-readable name of a logical channel."""
    try:
        return _LCHAN_NAMES[LogicalChannel(lchan)]
    except ValueError:
        return _unknown(lchan)


@dataclass
class DisplayState:
    """Summary of the decoded cell for display."""

    curr_hyperframe: int = 0
    curr_multiframe: int = 0
    curr_frame: int = 0
    timeslot_content: list[int] = field(default_factory=lambda: [0, 0, 0, 0])
    dl_usage: int = 0
    ul_usage: int = 0
    access1_code: str = "\0"
    access2_code: str = "\0"
    access1: int = 0
    access2: int = 0
    dl_freq: int = 0
    ul_freq: int = 0
    mcc: int = 0
    mnc: int = 0
    cc: int = 0
    last_crc_fail: bool = False
    advanced_link: bool = False
    air_encryption: bool = False
    sndcp_data: bool = False
    circuit_data: bool = False
    voice_service: bool = False
    normal_mode: bool = False
    migration_supported: bool = False
    never_minimum_mode: bool = False
    priority_cell: bool = False
    dereg_mandatory: bool = False
    reg_mandatory: bool = False


@dataclass
class CurrentBurst:
    """Properties of the burst currently being decoded."""

    is_traffic: int = 0
    blk1_stolen: bool = False
    blk2_stolen: bool = False


@dataclass
class MacState:
    """State shared across the MAC layer while decoding a cell."""

    voice_channels: list[Any] = field(default_factory=list)
    cur_burst: CurrentBurst = field(default_factory=CurrentBurst)
    last_sid: Any = None
    crypto: Any = None
    dumpdir: Optional[str] = None
    ssi: int = 0
    tsn: int = 0
    usage_marker: int = 0
    addr_type: int = 0
    display: DisplayState = field(default_factory=DisplayState)
    codec_first_pass: bool = True
    put_voice_data: Optional[Callable[[Sequence[int]], None]] = None
    last_frame: int = 0
    curr_active_timeslot: int = 0