"""Unit tests for the rule engine's prefix matching."""

import pytest

from chartreader.chart_interpreter import CHART_RULES
from chartreader.rule_engine import LiteralRule, RuleMatch, find_rule, literal, pattern


def _description(remainder: str) -> str | None:
    found = find_rule(remainder, CHART_RULES)
    return None if found is None else found[0].description


def test_literal_rule_matches_prefix() -> None:
    rule = literal("LZ|", "Bar line")
    assert rule.match("LZ|C") == RuleMatch(text="LZ|", length=3)


def test_literal_rule_ignores_token_later_in_input() -> None:
    rule = literal("|", "Bar line")
    assert rule.match("C|") is None


def test_literal_rule_rejects_empty_token() -> None:
    with pytest.raises(ValueError):
        LiteralRule(description="empty", token="")


def test_pattern_rule_is_anchored_at_start() -> None:
    rule = pattern(r"T(\d+)", "Time signature")
    assert rule.match("C T44") is None


def test_pattern_rule_captures_groups() -> None:
    rule = pattern(r"T(\d+)", "Time signature")
    found = rule.match("T34 C")
    assert found is not None
    assert found.text == "T34"
    assert found.length == 3
    assert found.groups == ("34",)


def test_pattern_rule_never_returns_empty_match() -> None:
    rule = pattern(r"Y*", "Spacers")
    assert rule.match("C") is None


def test_find_rule_returns_none_when_nothing_matches() -> None:
    assert find_rule("?", CHART_RULES) is None


def test_find_rule_first_rule_wins() -> None:
    rules = [literal("L", "short"), literal("LZ", "long")]
    found = find_rule("LZ", rules)
    assert found is not None
    assert found[0].description == "short"


def test_chart_rules_prefer_three_char_bar_line() -> None:
    found = find_rule("LZ|C", CHART_RULES)
    assert found is not None
    assert found[1].length == 3


def test_chart_rules_empty_space_before_repeat_two_measures() -> None:
    assert _description("XyQ|") == "Empty space"
    assert _description("r|XyQ") == "Repeat previous two measures"


def test_chart_rules_classify_markers() -> None:
    assert _description("*A") == "Section marker"
    assert _description("<D.C. al Fine>") == "Comment inside carets"
    assert _description("N1") == "Numbered ending"
    assert _description("Kcl") == "Repeat previous measure and create new measure"
    assert _description("YYY") == "Vertical spacers"


def test_chart_rules_chord_pattern_with_slash_bass() -> None:
    found = find_rule("C^7/Eb|", CHART_RULES)
    assert found is not None
    rule, match = found
    assert rule.description == "Chord"
    assert match.text == "C^7/Eb"


def test_chart_rules_chord_pattern_stops_at_unknown_symbol() -> None:
    found = find_rule("Bb-7b5x", CHART_RULES)
    assert found is not None
    assert found[1].text == "Bb-7b5"


def test_chart_rules_sus_and_alt_qualities() -> None:
    found = find_rule("G7sus", CHART_RULES)
    assert found is not None
    assert found[1].text == "G7sus"
    found = find_rule("E7alt", CHART_RULES)
    assert found is not None
    assert found[1].text == "E7alt"


def test_rules_match_at_scan_position() -> None:
    assert literal("|", "Bar line").match("C|F", 1) == RuleMatch(text="|", length=1)
    found = pattern(r"T(\d+)", "Time signature").match("C T34", 2)
    assert found == RuleMatch(text="T34", length=3, groups=("34",))


def test_find_rule_from_position() -> None:
    found = find_rule("C^7/E|", CHART_RULES, 5)
    assert found is not None
    assert found[0].description == "Bar line"


def test_patterns_only_accept_ascii_digits() -> None:
    rule = pattern(r"N(\d)", "Numbered ending")
    assert rule.match("N١") is None
    assert rule.match("N1") is not None
