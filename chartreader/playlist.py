"""PlaylistReader: reads iReal-style playlist links into decoded songs."""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import unquote

from chartreader.chart_interpreter import decode
from chartreader.chart_models import DecodedChart
from chartreader.chord_parser import CHROMATIC_NOTES, note_index
from chartreader.measure_timing import MeasureInfo, measure_infos

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"^\s*(irealb(?:ook)?)://(.*)$", re.DOTALL)

SONG_SEPARATOR = "==="
FIELD_SEPARATOR = "="

#: Prefix that marks a scrambled chart in the irealb:// format.
SCRAMBLED_MUSIC_PREFIX = "1r34LbKcu7"

_SCRAMBLE_BLOCK = 50
MINOR_KEY_SUFFIX = "-"
RELATIVE_MAJOR_OFFSET = 3


@dataclass(frozen=True)
class Song:
    """
    One song of a playlist.

    Attributes:
        title:    Song title.
        composer: Composer as written in the link ("Last First").
        style:    Style label, e.g. "Medium Swing".
        key:      Key as written, minor keys end with "-" (e.g. "A-").
        bpm:      Tempo, or ``None`` when the link leaves it at 0.
        chart:    The decoded music field.
    """

    title: str
    composer: str
    style: str
    key: str
    bpm: int | None
    chart: DecodedChart

    @property
    def is_minor(self) -> bool:
        return self.key.endswith(MINOR_KEY_SUFFIX)

    @property
    def key_note(self) -> str:
        return self.key.removesuffix(MINOR_KEY_SUFFIX)

    @property
    def relative_major_key(self) -> str:
        """Major key sharing this song's signature; unknown keys come back as written."""
        if not self.is_minor:
            return self.key_note
        index = note_index(self.key_note)
        if index < 0:
            return self.key_note
        return CHROMATIC_NOTES[(index + RELATIVE_MAJOR_OFFSET) % 12][0]

    def measure_infos(self) -> list[MeasureInfo]:
        return measure_infos(self.chart)


@dataclass(frozen=True)
class Playlist:
    """Songs of one link, plus the playlist name when the link carries one."""

    name: str | None
    songs: list[Song] = field(default_factory=list)


def _swap_block(block: str) -> str:
    chars = list(block)
    for i in [*range(5), *range(10, 24)]:
        chars[i], chars[_SCRAMBLE_BLOCK - 1 - i] = block[_SCRAMBLE_BLOCK - 1 - i], block[i]
    return "".join(chars)


def unscramble_music(music: str) -> str:
    """
    Undo the irealb:// character shuffling of a music field.

    The text after the prefix is cut into 50-character blocks; inside each
    block characters 0-4 and 10-23 trade places with their mirror position.
    The final block (up to 51 characters) is left alone.
    """
    if not music.startswith(SCRAMBLED_MUSIC_PREFIX):
        return music
    rest = music[len(SCRAMBLED_MUSIC_PREFIX):]
    parts = []
    while len(rest) > _SCRAMBLE_BLOCK + 1:
        parts.append(_swap_block(rest[:_SCRAMBLE_BLOCK]))
        rest = rest[_SCRAMBLE_BLOCK:]
    parts.append(rest)
    return "".join(parts)


def _parse_bpm(value: str) -> int | None:
    value = value.strip()
    if not value.isdigit() or int(value) == 0:
        return None
    return int(value)


def parse_song(data: str, old_format: bool = False) -> Song:
    """
    Split one song record into its fields and decode its music.

    irealb:    title=composer==style=key=transpose=music=comp style=bpm=repeats
    irealbook: title=composer=style=key=n=music

    Raises:
        ValueError: If the record has too few fields to hold a music field.
    """
    fields = data.split(FIELD_SEPARATOR)
    if old_format:
        if len(fields) < 6:
            raise ValueError(f"Song record has {len(fields)} fields, expected at least 6.")
        title, composer, style, key, music = fields[0], fields[1], fields[2], fields[3], fields[5]
        bpm = None
    else:
        if len(fields) < 7:
            raise ValueError(f"Song record has {len(fields)} fields, expected at least 7.")
        title, composer, style, key, music = fields[0], fields[1], fields[3], fields[4], fields[6]
        bpm = _parse_bpm(fields[8]) if len(fields) > 8 else None

    return Song(
        title=title.strip(),
        composer=composer.strip(),
        style=style.strip(),
        key=key.strip(),
        bpm=bpm,
        chart=decode(unscramble_music(music)),
    )


def read_playlist(url: str) -> Playlist:
    """
    Read an ``irealb://`` (or older ``irealbook://``) link.

    Songs are separated by "==="; when there is more than one record the
    last one is the playlist name. Records that cannot be split are skipped.

    Raises:
        ValueError: If the text is not a playlist link or holds no song.
    """
    found = _URL_RE.match(url)
    if found is None:
        raise ValueError("Not an irealb:// or irealbook:// link.")
    scheme, body = found.groups()
    records = unquote(body).split(SONG_SEPARATOR)

    name = None
    if len(records) > 1:
        name = records.pop().strip() or None

    songs = []
    for record in records:
        try:
            songs.append(parse_song(record, old_format=scheme == "irealbook"))
        except ValueError as exc:
            logger.warning("Skipping song record %r: %s", record[:40], exc)

    if not songs:
        raise ValueError("Playlist link holds no readable song.")
    return Playlist(name=name, songs=songs)
