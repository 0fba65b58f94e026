"""
Declarative building blocks for the anomaly rule catalog.

A rule is data: a compiled pattern, an optional guard, a pure rewrite and a
diagnostic. Guards and rewrites receive the regex match and a RuleContext
bound to the buffer snapshot the match was found in.
"""

import re
from dataclasses import dataclass
from re import Match, Pattern
from typing import Callable, Optional, Tuple, Union

from ..config import RepairConfig
from ..lexical_context import LexicalContextTable, find_root_close
from ..repair_base import ContainerKind, EnclosingContext, RuleCategory

JSON_KEYWORDS = frozenset({"true", "false", "null"})

IDENT = r"[A-Za-z_$][A-Za-z0-9_$]*"
PACKAGE_IDENT = rf"{IDENT}(?:\.{IDENT})+"

# A complete string literal on one line, honoring escapes
STRING = r'"(?:[^"\\\n]|\\.)*"'
KEY = rf"{STRING}\s*:"

_BOUNDARY_CHARS = "}],{[\n\r"

_UNSET = object()


def is_keyword(word: str) -> bool:
    return word.lower() in JSON_KEYWORDS


class RuleContext:
    """
    Lexical context for one buffer snapshot, shared by every match of a rule.

    All offsets refer to ``buffer``; a rewritten buffer gets a new context.
    """

    __slots__ = ("buffer", "table", "config", "lookback", "_root_close")

    def __init__(self, buffer: str, table: LexicalContextTable, config: RepairConfig, lookback: int):
        self.buffer = buffer
        self.table = table
        self.config = config
        self.lookback = lookback
        self._root_close = _UNSET

    def inside_string(self, offset: int) -> bool:
        return self.table.inside_string(offset)

    def enclosing(self, offset: int) -> EnclosingContext:
        return self.table.enclosing(offset)

    def kind(self, offset: int) -> ContainerKind:
        return self.table.kind(offset)

    def before(self, offset: int) -> str:
        return self.buffer[max(0, offset - self.lookback):offset]

    def at_boundary(self, offset: int) -> bool:
        """
        True when the bounded lookback before ``offset`` ends in a structural
        delimiter, a newline, or is blank (buffer start).
        """
        text = self.before(offset).rstrip(" \t")
        if not text.strip(" \t"):
            return True
        return text[-1] in _BOUNDARY_CHARS

    def in_key_position(self, offset: int) -> bool:
        """True when the last non-whitespace character before ``offset`` is ``{`` or ``,``"""
        text = self.before(offset).rstrip()
        if not text:
            return offset <= self.lookback
        return text[-1] in "{,"

    @property
    def root_close(self) -> Optional[int]:
        if self._root_close is _UNSET:
            self._root_close = find_root_close(self.buffer)
        return self._root_close


Guard = Callable[[Match, RuleContext], bool]
Rewrite = Callable[[Match, RuleContext], Optional[str]]
DiagnosticTemplate = Union[str, Callable[[Match, str], str]]


@dataclass(frozen=True)
class AnomalyRule:
    """
    One corruption category: where it may match, whether it applies, and
    what to put in its place.

    ``rewrite`` returns the replacement for the whole match, or None to leave
    the span alone. With ``skip_in_string`` the rule never fires on a match
    that starts inside a string literal.
    """
    rule_id: str
    category: RuleCategory
    pattern: Union[str, Pattern]
    rewrite: Rewrite
    diagnostic: DiagnosticTemplate
    guard: Optional[Guard] = None
    skip_in_string: bool = True
    lookback: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))

    def describe(self, match: Match, replacement: str) -> str:
        if callable(self.diagnostic):
            return self.diagnostic(match, replacement)
        return self.diagnostic

    def evaluate(self, match: Match, ctx: RuleContext) -> Optional[str]:
        """Replacement for ``match``, or None when the rule declines"""
        if self.skip_in_string and ctx.inside_string(match.start()):
            return None
        if self.guard is not None and not self.guard(match, ctx):
            return None
        replacement = self.rewrite(match, ctx)
        if replacement is None or replacement == match.group(0):
            return None
        return replacement


@dataclass(frozen=True)
class RuleGroup:
    """Ordered rules applied together; ``converge`` groups re-run to a fixed point"""
    name: str
    rules: Tuple[AnomalyRule, ...]
    converge: bool = False


def removed(match: Match, ctx: RuleContext) -> str:
    """Rewrite that deletes the match"""
    return ""


def keep_groups(*names: str) -> Rewrite:
    """Rewrite that keeps only the named groups, in order"""
    def _rewrite(match: Match, ctx: RuleContext) -> str:
        return "".join(match.group(name) or "" for name in names)
    return _rewrite


def group_in(name: str, *kinds: ContainerKind) -> Guard:
    """Guard: the container enclosing the start of group ``name`` is one of ``kinds``"""
    def _guard(match: Match, ctx: RuleContext) -> bool:
        return ctx.kind(match.start(name)) in kinds
    return _guard


def outside_string(*names: str) -> Guard:
    """Guard: every named group that took part in the match starts outside a string"""
    def _guard(match: Match, ctx: RuleContext) -> bool:
        return not any(
            ctx.inside_string(match.start(name)) for name in names if match.start(name) >= 0
        )
    return _guard


def all_of(*guards: Guard) -> Guard:
    def _guard(match: Match, ctx: RuleContext) -> bool:
        return all(guard(match, ctx) for guard in guards)
    return _guard


def shorten(text: str, limit: int = 40) -> str:
    """Single-line excerpt for diagnostics"""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."
