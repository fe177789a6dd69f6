"""Data models for decoded chord charts."""

from dataclasses import dataclass
from typing import Any

#: Label used wherever a no-chord placeholder has to be shown as text.
NO_CHORD_LABEL = "NC"


@dataclass(frozen=True)
class ChordToken:
    """
    A single chord slot inside a measure.

    Attributes:
        chord_string: Literal chord symbol, e.g. "C^7/E". ``None`` marks the
                      no-chord (N.C.) placeholder.
    """

    chord_string: str | None = None

    @property
    def no_chord(self) -> bool:
        return self.chord_string is None

    def __str__(self) -> str:
        return NO_CHORD_LABEL if self.chord_string is None else self.chord_string


@dataclass(frozen=True)
class Measure:
    """One bar's worth of chord tokens, in performance order."""

    chords: tuple[ChordToken, ...]


@dataclass(frozen=True)
class DecodedChart:
    """
    Result of decoding one chart string.

    Attributes:
        measures:       Linear measure sequence with repeats and jumps expanded
                        and empty measures removed.
        time_signature: Raw digits of the last time-signature marker (e.g. "44"),
                        or ``None`` when the chart carries none.
        raw:            The chart string exactly as it was passed in.
    """

    measures: tuple[Measure, ...]
    time_signature: str | None
    raw: str

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view: measures become lists of chord labels."""
        return {
            "raw": self.raw,
            "time_signature": self.time_signature,
            "measures": [[str(chord) for chord in measure.chords] for measure in self.measures],
        }
