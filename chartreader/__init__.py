"""chartreader: decode compact lead-sheet chart strings into measures."""

__version__ = "0.1.0"

from chartreader.chart_interpreter import ChartInterpreter, decode  # noqa: E402
from chartreader.chart_models import ChordToken, DecodedChart, Measure  # noqa: E402
from chartreader.playlist import Playlist, Song, read_playlist  # noqa: E402

__all__ = [
    "ChartInterpreter",
    "ChordToken",
    "DecodedChart",
    "Measure",
    "Playlist",
    "Song",
    "__version__",
    "decode",
    "read_playlist",
]
