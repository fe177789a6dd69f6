"""Unit tests for measure timing derived from decoded charts."""

import pytest

from chartreader.chart_interpreter import decode
from chartreader.measure_timing import (
    MeasureInfo,
    beat_index_to_measure_index,
    beat_is_on_new_measure,
    measure_infos,
    parse_time_signature,
    total_beats,
)


def _infos(*beats: int) -> list[MeasureInfo]:
    return [MeasureInfo(beats_per_measure=b) for b in beats]


@pytest.mark.parametrize(
    ("signature", "expected"),
    [
        ("44", (4, 4)),
        ("34", (3, 4)),
        ("68", (6, 8)),
        ("12", (12, 8)),
        ("5", (5, 4)),
        (None, (4, 4)),
    ],
)
def test_parse_time_signature(signature: str | None, expected: tuple[int, int]) -> None:
    assert parse_time_signature(signature) == expected


def test_parse_time_signature_rejects_non_digits() -> None:
    with pytest.raises(ValueError):
        parse_time_signature("4/4")


def test_measure_infos_counts_chords() -> None:
    infos = measure_infos(decode("T34 C G7|Fn|"))
    assert infos == [
        MeasureInfo(beats_per_measure=3, subdivisions=4, chord_count=2),
        MeasureInfo(beats_per_measure=3, subdivisions=4, chord_count=2),
    ]


def test_measure_infos_default_to_four_four() -> None:
    infos = measure_infos(decode("C|"))
    assert infos == [MeasureInfo(beats_per_measure=4, subdivisions=4, chord_count=1)]


def test_total_beats() -> None:
    assert total_beats(_infos(4, 3, 4)) == 11
    assert total_beats([]) == 0


def test_beat_index_to_measure_index() -> None:
    infos = _infos(4, 3, 4)
    assert beat_index_to_measure_index(infos, 0) == 0
    assert beat_index_to_measure_index(infos, 3) == 0
    assert beat_index_to_measure_index(infos, 4) == 1
    assert beat_index_to_measure_index(infos, 6) == 1
    assert beat_index_to_measure_index(infos, 7) == 2
    assert beat_index_to_measure_index(infos, 10) == 2


def test_beat_index_out_of_range() -> None:
    infos = _infos(4, 4)
    assert beat_index_to_measure_index(infos, -1) == -1
    assert beat_index_to_measure_index(infos, 8) == -1
    assert beat_index_to_measure_index([], 0) == -1


def test_beat_is_on_new_measure() -> None:
    infos = _infos(4, 3)
    assert beat_is_on_new_measure(infos, 0)
    assert beat_is_on_new_measure(infos, 4)
    assert not beat_is_on_new_measure(infos, 5)
    assert beat_is_on_new_measure(infos, 7)
