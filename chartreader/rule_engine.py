"""RuleEngine: ordered prefix matching of chart tokens against a rule table."""

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

#: Signature of a rule handler: ``handler(state, match)``.
Handler = Callable[[Any, "RuleMatch"], None]


@dataclass(frozen=True)
class RuleMatch:
    """
    A successful rule match at the current scan position.

    Attributes:
        text:   The consumed token.
        length: Number of characters consumed (always >= 1).
        groups: Captured groups for pattern rules, empty for literal rules.
    """

    text: str
    length: int
    groups: tuple[str | None, ...] = ()


@dataclass(frozen=True)
class Rule(ABC):
    """
    One entry of a rule table.

    A rule answers a single question: does the input continue with this
    token at ``pos``? The optional handler is invoked by the caller, never by
    the rule itself.
    """

    description: str
    handler: Handler | None = field(default=None, compare=False)

    @abstractmethod
    def match(self, text: str, pos: int = 0) -> RuleMatch | None:
        """Return a RuleMatch when ``text`` holds this rule's token at ``pos``."""


@dataclass(frozen=True)
class LiteralRule(Rule):
    """Matches an exact substring at the scan position."""

    token: str = ""

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("LiteralRule requires a non-empty token.")

    def match(self, text: str, pos: int = 0) -> RuleMatch | None:
        if text.startswith(self.token, pos):
            return RuleMatch(text=self.token, length=len(self.token))
        return None


@dataclass(frozen=True)
class PatternRule(Rule):
    """Matches a regular expression anchored at the scan position."""

    pattern: re.Pattern[str] = field(default_factory=lambda: re.compile(""))

    def match(self, text: str, pos: int = 0) -> RuleMatch | None:
        found = self.pattern.match(text, pos)
        # An empty match would never consume input.
        if found is None or found.end() == pos:
            return None
        return RuleMatch(text=found.group(0), length=found.end() - pos, groups=found.groups())


def literal(token: str, description: str, handler: Handler | None = None) -> LiteralRule:
    return LiteralRule(description=description, handler=handler, token=token)


def pattern(regex: str, description: str, handler: Handler | None = None) -> PatternRule:
    # Chart glyphs are ASCII; \d and \w must not accept other scripts.
    return PatternRule(description=description, handler=handler, pattern=re.compile(regex, re.ASCII))


def find_rule(text: str, rules: Sequence[Rule], pos: int = 0) -> tuple[Rule, RuleMatch] | None:
    """
    Find the first rule, in table order, that matches ``text`` at ``pos``.

    Table order is a priority list: literal multi-character tokens must sit
    before the looser patterns that would otherwise swallow them.

    Args:
        text:  The chart string being scanned.
        rules: Ordered rule table.
        pos:   Scan position inside ``text``.

    Returns:
        ``(rule, match)`` for the winning rule, or ``None`` when nothing matches.
    """
    for rule in rules:
        found = rule.match(text, pos)
        if found is not None:
            return rule, found
    return None
