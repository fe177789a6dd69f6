"""ChartInterpreter: decodes a chart string into a linear measure sequence."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from chartreader.chart_models import ChordToken, DecodedChart, Measure
from chartreader.rule_engine import Rule, RuleMatch, find_rule, literal, pattern

logger = logging.getLogger(__name__)

#: Chord letter that stands for "the previous chord root again".
INVISIBLE_CHORD_LETTER = "W"

# Caret annotations that arm a jump, keyed by their lower-cased text.
_JUMP_ANNOTATIONS: dict[str, str] = {
    "d.c. al 3rd ending": "third_ending_imminent",
    "d.c. al fine": "dc_al_fine_imminent",
    "d.c. al coda": "dc_al_coda_imminent",
    "d.s. al coda": "ds_al_coda_imminent",
}
_FINE_ANNOTATION = "fine"

Timeline = list[list[ChordToken]]


@dataclass
class DecodeState:
    """
    Mutable record threaded through one decode call.

    Index fields point into ``timeline`` as it was when they were recorded.
    ``None`` means "never set"; slicing treats an unset start as the beginning
    of the timeline and an unset end as its end.
    """

    timeline: Timeline = field(default_factory=list)
    last_chord_root: str | None = None
    start_repeat_index: int | None = None
    end_repeat_index: int | None = None
    segno_index: int | None = None
    coda_index: int | None = None
    fine_index: int | None = None
    third_ending_imminent: bool = False
    dc_al_fine_imminent: bool = False
    dc_al_coda_imminent: bool = False
    ds_al_coda_imminent: bool = False
    time_signature: str | None = None

    # ------------------------------------------------------------------
    # Timeline primitives
    # ------------------------------------------------------------------

    def create_new_measure(self) -> None:
        """Open a new measure unless the last one is still empty."""
        if not self.timeline or self.timeline[-1]:
            self.timeline.append([])

    def current_measure(self) -> list[ChordToken]:
        if not self.timeline:
            self.timeline.append([])
        return self.timeline[-1]

    def append_copies(self, start: int | None, end: int | None) -> None:
        """Append fresh copies of ``timeline[start:end]``."""
        segment = self.timeline[start:end]
        self.timeline.extend(list(measure) for measure in segment)

    def close_repeat(self) -> None:
        if self.end_repeat_index is None:
            self.end_repeat_index = len(self.timeline)
        self.append_copies(self.start_repeat_index, self.end_repeat_index)
        self.create_new_measure()

    def resolve_endings(self) -> None:
        """Expand every armed jump, in fixed order, at a closing bar line."""
        if self.third_ending_imminent:
            logger.debug("Resolving 3rd ending repeat")
            self.close_repeat()
            self.third_ending_imminent = False
        if self.dc_al_fine_imminent:
            logger.debug("Resolving D.C. al Fine up to measure %s", self.fine_index)
            self.append_copies(0, self.fine_index)
            self.dc_al_fine_imminent = False
        if self.dc_al_coda_imminent:
            logger.debug("Resolving D.C. al Coda up to measure %s", self.coda_index)
            self.append_copies(0, self.coda_index)
            self.dc_al_coda_imminent = False
        if self.ds_al_coda_imminent:
            logger.debug(
                "Resolving D.S. al Coda from measure %s to %s", self.segno_index, self.coda_index
            )
            self.append_copies(self.segno_index, self.coda_index)
            self.ds_al_coda_imminent = False

    def finish(self, raw: str) -> DecodedChart:
        measures = tuple(Measure(chords=tuple(chords)) for chords in self.timeline if chords)
        return DecodedChart(measures=measures, time_signature=self.time_signature, raw=raw)


# ── Rule handlers ────────────────────────────────────────────────────────────

def _new_measure(state: DecodeState, match: RuleMatch) -> None:
    state.create_new_measure()


def _resolve_endings(state: DecodeState, match: RuleMatch) -> None:
    state.resolve_endings()


def _check_annotation(state: DecodeState, match: RuleMatch) -> None:
    text = (match.groups[0] or "").lower()
    flag = _JUMP_ANNOTATIONS.get(text)
    if flag is not None:
        setattr(state, flag, True)
    elif text == _FINE_ANNOTATION:
        state.fine_index = len(state.timeline)


def _set_time_signature(state: DecodeState, match: RuleMatch) -> None:
    state.time_signature = match.groups[0]


def _repeat_last_measure(state: DecodeState, match: RuleMatch) -> None:
    if len(state.timeline) < 2:
        return
    state.timeline[-1] = list(state.timeline[-2])


def _repeat_last_measure_and_add_new(state: DecodeState, match: RuleMatch) -> None:
    if not state.timeline:
        return
    state.timeline.append(list(state.timeline[-1]))


def _repeat_last_two_measures(state: DecodeState, match: RuleMatch) -> None:
    timeline = state.timeline
    if len(timeline) < 3:
        return
    timeline[-1] = list(timeline[-3])
    timeline.append(list(timeline[-2]))


def _push_no_chord(state: DecodeState, match: RuleMatch) -> None:
    state.current_measure().append(ChordToken())


def _set_segno(state: DecodeState, match: RuleMatch) -> None:
    state.segno_index = max(0, len(state.timeline) - 1)


def _set_coda(state: DecodeState, match: RuleMatch) -> None:
    state.coda_index = len(state.timeline)


def _open_repeat(state: DecodeState, match: RuleMatch) -> None:
    state.create_new_measure()
    state.start_repeat_index = len(state.timeline) - 1
    state.end_repeat_index = None


def _close_repeat(state: DecodeState, match: RuleMatch) -> None:
    state.close_repeat()


def _numbered_ending(state: DecodeState, match: RuleMatch) -> None:
    # Only the first ending marks where the repeat turns back.
    if match.groups[0] == "1":
        state.end_repeat_index = len(state.timeline) - 1


def _push_chord(state: DecodeState, match: RuleMatch) -> None:
    measure = state.current_measure()
    chord = match.text
    if chord.startswith(INVISIBLE_CHORD_LETTER):
        if state.last_chord_root is not None:
            chord = state.last_chord_root + chord[len(INVISIBLE_CHORD_LETTER):]
        else:
            logger.debug("Invisible chord %r has no previous chord to restate", chord)
    else:
        state.last_chord_root = chord.split("/")[0]
    measure.append(ChordToken(chord))


#: Token table in priority order. The chord pattern must stay last.
CHART_RULES: tuple[Rule, ...] = (
    literal("XyQ", "Empty space"),
    pattern(r"\*\w", "Section marker"),
    pattern(r"<(.*?)>", "Comment inside carets", _check_annotation),
    pattern(r"T(\d+)", "Time signature", _set_time_signature),
    literal("x", "Repeat previous measure in current measure", _repeat_last_measure),
    literal("Kcl", "Repeat previous measure and create new measure", _repeat_last_measure_and_add_new),
    literal("r|XyQ", "Repeat previous two measures", _repeat_last_two_measures),
    pattern(r"Y+", "Vertical spacers"),
    literal("n", "No chord (N.C.)", _push_no_chord),
    literal("p", "Pause slash"),
    literal("U", "Ending measure for player"),
    literal("S", "Segno", _set_segno),
    literal("Q", "Coda", _set_coda),
    literal("{", "Start repeat marker", _open_repeat),
    literal("}", "End repeat marker", _close_repeat),
    literal("LZ|", "Bar line", _new_measure),
    literal("|", "Bar line", _new_measure),
    literal("LZ", "Bar line", _new_measure),
    literal("[", "Double bar start", _new_measure),
    literal("]", "Double bar end", _resolve_endings),
    pattern(r"N(\d)", "Numbered ending", _numbered_ending),
    literal("Z", "Final bar line", _resolve_endings),
    pattern(r"[A-GW][+\-^\dhob#suadlt]*(/[A-G][#b]?)?", "Chord", _push_chord),
)


class ChartInterpreter:
    """
    Scans a chart string left to right, one rule match at a time.

    Algorithm overview
    ------------------
    1. Ask the rule engine for the first rule matching at the scan position.
    2. On a match, run the rule's handler against the per-call
       ``DecodeState``, move past the token and any following whitespace.
    3. With no match, step over a single character and retry; a lone
       unmatched character at the end stops the scan.
    4. Drop measures that never received a chord.

    The position advances on every step, so the scan always terminates and
    never raises on malformed input.
    """

    def __init__(self, rules: Sequence[Rule] = CHART_RULES) -> None:
        """
        Args:
            rules: Ordered rule table. Defaults to the full chart grammar.
        """
        self.rules = tuple(rules)

    def decode(self, raw: str) -> DecodedChart:
        """
        Decode a chart string.

        Args:
            raw: Encoded chart, e.g. "T44{C^7|A-7|D-7|G7}".

        Returns:
            DecodedChart holding the expanded measures, the detected time
            signature and ``raw`` unchanged.
        """
        state = DecodeState()
        pos, end = 0, len(raw)
        while pos < end:
            found = find_rule(raw, self.rules, pos)
            if found is None:
                if end - pos <= 1:
                    break
                logger.debug("Skipping unrecognised character %r", raw[pos])
                pos += 1
                continue

            rule, match = found
            if rule.handler is not None:
                rule.handler(state, match)
            pos += match.length
            while pos < end and raw[pos].isspace():
                pos += 1

        return state.finish(raw)


_DEFAULT_INTERPRETER = ChartInterpreter()


def decode(raw: str) -> DecodedChart:
    """Decode ``raw`` with the default chart grammar."""
    return _DEFAULT_INTERPRETER.decode(raw)
