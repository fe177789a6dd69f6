"""ChordParser: splits chord symbols into root, quality and bass, and transposes them."""

import logging
import re
from dataclasses import dataclass, replace

from chartreader.chart_models import NO_CHORD_LABEL, ChordToken, DecodedChart, Measure

logger = logging.getLogger(__name__)

# Chromatic pitch classes (index 0 = C); the first spelling is the preferred one.
CHROMATIC_NOTES: list[tuple[str, ...]] = [
    ("C", "B#"),
    ("C#", "Db"),
    ("D",),
    ("D#", "Eb"),
    ("E", "Fb"),
    ("F", "E#"),
    ("F#", "Gb"),
    ("G",),
    ("G#", "Ab"),
    ("A",),
    ("A#", "Bb"),
    ("B", "Cb"),
]

_CHORD_RE = re.compile(r"^([A-G][#b]?)([^/]*)(?:/([A-G][#b]?))?$")


@dataclass(frozen=True)
class ChordSymbol:
    """
    A chord symbol split into its parts.

    Attributes:
        root:    Root note with optional accidental, e.g. "Bb". "NC" for no chord.
        quality: Everything between root and slash, e.g. "-7b5" or "^7".
        bass:    Slash-bass note without the slash, or "" when absent.
    """

    root: str
    quality: str = ""
    bass: str = ""

    def __str__(self) -> str:
        if self.root == NO_CHORD_LABEL:
            return NO_CHORD_LABEL
        slash = f"/{self.bass}" if self.bass else ""
        return f"{self.root}{self.quality}{slash}"


def parse_chord_string(chord_string: str) -> ChordSymbol:
    """
    Split a literal chord string such as "C^7/E" into root, quality and bass.

    Raises:
        ValueError: If the string does not start with a root note A-G.
    """
    found = _CHORD_RE.match(chord_string.strip())
    if found is None:
        raise ValueError(f"Cannot parse chord symbol '{chord_string}'.")
    root, quality, bass = found.groups()
    return ChordSymbol(root=root, quality=quality, bass=bass or "")


def parse_chord_token(token: ChordToken) -> ChordSymbol:
    """Like parse_chord_string, but maps the no-chord placeholder to "NC"."""
    if token.chord_string is None:
        return ChordSymbol(root=NO_CHORD_LABEL)
    return parse_chord_string(token.chord_string)


def note_index(note: str) -> int:
    """Return the pitch class (0-11) of a note name, or -1 if unknown."""
    for index, spellings in enumerate(CHROMATIC_NOTES):
        if note in spellings:
            return index
    return -1


def transpose_note(note: str, semitones: int) -> str:
    """Shift a note by ``semitones``; unknown note names come back unchanged."""
    index = note_index(note)
    if index < 0:
        return note
    return CHROMATIC_NOTES[(index + semitones) % 12][0]


def _transpose_token(token: ChordToken, semitones: int) -> ChordToken:
    if token.no_chord:
        return token
    try:
        symbol = parse_chord_token(token)
    except ValueError:
        logger.debug("Leaving untransposable chord %r as is", token.chord_string)
        return token
    moved = replace(
        symbol,
        root=transpose_note(symbol.root, semitones),
        bass=transpose_note(symbol.bass, semitones) if symbol.bass else "",
    )
    return ChordToken(str(moved))


def transpose_chart(chart: DecodedChart, semitones: int) -> DecodedChart:
    """
    Return a copy of ``chart`` with every chord root and bass note shifted.

    The raw chart string and the time signature are carried over untouched.
    """
    if semitones % 12 == 0:
        return chart
    measures = tuple(
        Measure(chords=tuple(_transpose_token(chord, semitones) for chord in measure.chords))
        for measure in chart.measures
    )
    return replace(chart, measures=measures)
