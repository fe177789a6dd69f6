"""MeasureTiming: derives beats and subdivisions per measure from a decoded chart."""

from dataclasses import dataclass

import numpy as np

from chartreader.chart_models import DecodedChart

#: Used when a chart carries no time-signature marker.
DEFAULT_TIME_SIGNATURE = "44"

COMPOUND_TWELVE = (12, 8)
DEFAULT_SUBDIVISIONS = 4


@dataclass(frozen=True)
class MeasureInfo:
    """
    Timing for one measure.

    Attributes:
        beats_per_measure: Beats counted by the player for this measure.
        subdivisions:      Note value of one beat (4 = quarter, 8 = eighth).
        chord_count:       Number of chord tokens in the measure.
    """

    beats_per_measure: int = 4
    subdivisions: int = 4
    chord_count: int = 1


def parse_time_signature(time_signature: str | None) -> tuple[int, int]:
    """
    Turn the raw signature digits into ``(beats_per_measure, subdivisions)``.

    "44" -> (4, 4), "34" -> (3, 4), "68" -> (6, 8). Signatures starting with
    "12" are 12/8, the only two-digit numerator the notation uses.

    Raises:
        ValueError: If the signature contains anything but digits.
    """
    digits = time_signature or DEFAULT_TIME_SIGNATURE
    if not digits.isdigit():
        raise ValueError(f"Invalid time signature '{time_signature}'.")
    if digits.startswith("12"):
        return COMPOUND_TWELVE
    beats = int(digits[0])
    subdivisions = int(digits[1]) if len(digits) > 1 else DEFAULT_SUBDIVISIONS
    return beats, subdivisions


def measure_infos(chart: DecodedChart) -> list[MeasureInfo]:
    """Build one MeasureInfo per decoded measure, all sharing the chart's signature."""
    beats, subdivisions = parse_time_signature(chart.time_signature)
    return [
        MeasureInfo(beats_per_measure=beats, subdivisions=subdivisions, chord_count=len(m.chords))
        for m in chart.measures
    ]


def _measure_boundaries(infos: list[MeasureInfo]) -> np.ndarray:
    """Cumulative beat count at the end of each measure."""
    return np.cumsum([info.beats_per_measure for info in infos], dtype=np.int64)


def total_beats(infos: list[MeasureInfo]) -> int:
    return int(sum(info.beats_per_measure for info in infos))


def beat_index_to_measure_index(infos: list[MeasureInfo], beat_index: int) -> int:
    """
    Find the measure containing ``beat_index``.

    Returns:
        Measure index, or -1 for a negative beat or one past the last measure.
    """
    if beat_index < 0 or not infos:
        return -1
    boundaries = _measure_boundaries(infos)
    index = int(np.searchsorted(boundaries, beat_index, side="right"))
    return index if index < len(infos) else -1


def beat_is_on_new_measure(infos: list[MeasureInfo], beat_index: int) -> bool:
    """True when ``beat_index`` is the downbeat of a measure (beat 0 always is)."""
    if beat_index == 0:
        return True
    if not infos:
        return False
    return bool(np.any(_measure_boundaries(infos) == beat_index))
