"""chartreader CLI entry point."""

import json
import logging
import sys

import click

from chartreader import __version__
from chartreader.chart_interpreter import decode as decode_chart
from chartreader.chart_models import DecodedChart
from chartreader.chord_parser import parse_chord_string, transpose_chart
from chartreader.measure_timing import measure_infos, total_beats
from chartreader.playlist import read_playlist

MAX_TRANSPOSE = 11


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _read_chart(chart: str) -> str:
    """Return the chart text, reading stdin when CHART is '-'."""
    if chart == "-":
        return sys.stdin.read()
    return chart


def _echo_measures(chart: DecodedChart) -> None:
    width = len(str(len(chart.measures)))
    for index, measure in enumerate(chart.measures, start=1):
        chords = "  ".join(str(chord) for chord in measure.chords)
        click.echo(f"  {index:>{width}} | {chords}")


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="chartreader")
def main() -> None:
    """chartreader: lead-sheet chart decoder."""


# ── decode subcommand ──────────────────────────────────────────────────────────

@main.command()
@click.argument("chart")
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the decoded chart as JSON instead of a measure listing.",
)
@click.option(
    "--transpose",
    type=click.IntRange(-MAX_TRANSPOSE, MAX_TRANSPOSE),
    default=0,
    show_default=True,
    metavar="SEMITONES",
    help="Shift every chord root and bass note by this many semitones.",
)
@click.option(
    "--timing",
    is_flag=True,
    default=False,
    help="Also print beats per measure and the total beat count.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log decoder decisions.")
def decode(chart: str, as_json: bool, transpose: int, timing: bool, verbose: bool) -> None:
    """
    Decode a chart string into its linear sequence of measures.

    CHART is the encoded chart (wrap in quotes), or '-' to read it from stdin.

    \b
    Examples:
      chartreader decode "T44{C^7|A-7|D-7|G7}"
      chartreader decode "T34 C|F|G7|C Z" --transpose 2
      cat chart.txt | chartreader decode - --json
    """
    _configure_logging(verbose)

    decoded = decode_chart(_read_chart(chart))
    if transpose:
        decoded = transpose_chart(decoded, transpose)

    try:
        infos = measure_infos(decoded)
    except ValueError as exc:
        click.echo(f"  ERROR: Could not read time signature: {exc}", err=True)
        sys.exit(1)

    if as_json:
        payload = decoded.to_dict()
        if timing:
            payload["timing"] = [
                {"beats_per_measure": i.beats_per_measure, "subdivisions": i.subdivisions}
                for i in infos
            ]
        click.echo(json.dumps(payload, indent=2))
        return

    signature = decoded.time_signature or "none"
    click.echo(f"chartreader v{__version__}")
    click.echo(f"  Time signature : {signature}  |  Measures: {len(decoded.measures)}")
    click.echo()

    if not decoded.measures:
        click.echo("  WARNING: No measures decoded.", err=True)
        return

    _echo_measures(decoded)

    if timing and infos:
        click.echo()
        first = infos[0]
        click.echo(f"  Beats per measure : {first.beats_per_measure}/{first.subdivisions}")
        click.echo(f"  Total beats       : {total_beats(infos)}")


# ── chord subcommand ───────────────────────────────────────────────────────────

@main.command()
@click.argument("symbol")
def chord(symbol: str) -> None:
    """
    Split a chord symbol into root, quality and bass note.

    \b
    Examples:
      chartreader chord "C^7/E"
      chartreader chord "Bb-7b5"
    """
    try:
        parsed = parse_chord_string(symbol)
    except ValueError as exc:
        click.echo(f"  ERROR: {exc}", err=True)
        sys.exit(1)

    click.echo(f"  Root    : {parsed.root}")
    click.echo(f"  Quality : {parsed.quality or '(major)'}")
    click.echo(f"  Bass    : {parsed.bass or '-'}")


# ── playlist subcommand ────────────────────────────────────────────────────────

@main.command()
@click.argument("url")
@click.option(
    "--song",
    "song_number",
    type=click.IntRange(min=1),
    default=None,
    metavar="N",
    help="Show the measures of song N (1-based) instead of the song list.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the playlist as JSON.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log decoder decisions.")
def playlist(url: str, song_number: int | None, as_json: bool, verbose: bool) -> None:
    """
    Read an irealb:// playlist link and decode every song in it.

    URL is the playlist link (wrap in quotes), or '-' to read it from stdin.

    \b
    Examples:
      chartreader playlist "irealb://..."
      chartreader playlist "irealb://..." --song 2
      cat playlist.txt | chartreader playlist - --json
    """
    _configure_logging(verbose)

    try:
        parsed = read_playlist(_read_chart(url))
    except ValueError as exc:
        click.echo(f"  ERROR: Could not read playlist: {exc}", err=True)
        sys.exit(1)

    songs = parsed.songs
    if song_number is not None:
        if song_number > len(songs):
            click.echo(f"  ERROR: Playlist has only {len(songs)} song(s).", err=True)
            sys.exit(1)
        songs = [songs[song_number - 1]]

    if as_json:
        payload = {
            "name": parsed.name,
            "songs": [
                {
                    "title": song.title,
                    "composer": song.composer,
                    "style": song.style,
                    "key": song.key,
                    "relative_major_key": song.relative_major_key,
                    "bpm": song.bpm,
                    **song.chart.to_dict(),
                }
                for song in songs
            ],
        }
        click.echo(json.dumps(payload, indent=2))
        return

    click.echo(f"chartreader v{__version__}")
    click.echo(f"  Playlist : {parsed.name or '(unnamed)'}  |  Songs: {len(parsed.songs)}")
    click.echo()

    for song in songs:
        tempo = f"{song.bpm} BPM" if song.bpm else "no tempo"
        click.echo(
            f"  {song.title}  ({song.composer})  key {song.key or '?'}  "
            f"{song.style}  {tempo}  {len(song.chart.measures)} measure(s)"
        )
        if song_number is not None:
            click.echo()
            _echo_measures(song.chart)
