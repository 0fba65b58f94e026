"""
Structural imbalance rules.

These run before anything else touches keys or values because they change
where containers end, and later rules anchor on those positions.
"""

import re
from re import Match

from ..lexical_context import expected_closer
from ..repair_base import ContainerKind, RuleCategory
from .rule_base import STRING, AnomalyRule, RuleContext

_CLOSER_TOKEN = re.compile(r"(\s*)([}\]])")
_CLOSER = re.compile(r"[}\]]")


def _opened_as_element(ctx: RuleContext, close_offset: int, level: int) -> bool:
    """The object closed at ``close_offset`` was opened right after ``[`` or ``,``"""
    opener = ctx.buffer.rfind("{", 0, close_offset)
    while opener >= 0 and (ctx.inside_string(opener) or ctx.table.depth(opener) != level):
        opener = ctx.buffer.rfind("{", 0, opener)
    if opener < 0:
        return False
    return ctx.before(opener).rstrip().endswith(("[", ","))


def _object_element_missing_brace(match: Match, ctx: RuleContext) -> bool:
    """
    The pair sits directly in an array, follows an object element, and the
    first closer at the array's level is ``}``.
    """
    start = match.start("pair")
    if ctx.kind(start) is not ContainerKind.ARRAY:
        return False
    level = ctx.table.depth(start)
    if ctx.kind(match.start()) is not ContainerKind.OBJECT or not _opened_as_element(ctx, match.start(), level):
        return False
    for closer in _CLOSER.finditer(ctx.buffer, match.end()):
        offset = closer.start()
        if ctx.inside_string(offset) or ctx.table.depth(offset) != level:
            continue
        return closer.group(0) == "}"
    return False


def _drop_unmatched_closers(match: Match, ctx: RuleContext):
    """Keep closers that still close something; drop the ones at depth 0"""
    base = match.start()
    kept = []
    for token in _CLOSER_TOKEN.finditer(match.group(0)):
        if ctx.table.depth(base + token.start(2)) > 0:
            kept.append(token.group(0))
    trailing = match.group(0)[len(match.group(0).rstrip()):]
    return "".join(kept) + trailing


def _closer_count(text: str) -> int:
    return sum(1 for ch in text if ch in "}]")


def _expected_closer(match: Match, ctx: RuleContext):
    return expected_closer(ctx.kind(match.start()))


DUPLICATE_TRAILING_CLOSERS = AnomalyRule(
    rule_id="duplicate_trailing_closers",
    category=RuleCategory.STRUCTURAL_IMBALANCE,
    pattern=r"[}\]](?:\s*[}\]])+\s*\Z",
    rewrite=_drop_unmatched_closers,
    diagnostic=lambda match, replacement: (
        f"Removed {_closer_count(match.group(0)) - _closer_count(replacement)} "
        f"duplicate closing delimiter(s) after the root value"
    ),
)

MISMATCHED_CLOSER = AnomalyRule(
    rule_id="mismatched_closer",
    category=RuleCategory.STRUCTURAL_IMBALANCE,
    pattern=r"[}\]]",
    rewrite=_expected_closer,
    diagnostic=lambda match, replacement: f"Replaced mismatched closer {match.group(0)} with {replacement}",
)

# An object element whose opening brace was lost: [{...}, "k": v}]
MISSING_ELEMENT_OPENING_BRACE = AnomalyRule(
    rule_id="missing_element_opening_brace",
    category=RuleCategory.STRUCTURAL_IMBALANCE,
    pattern=rf"(?P<lead>\}}\s*,\s*)(?P<pair>{STRING}\s*:)",
    rewrite=lambda match, ctx: f'{match.group("lead")}{{{match.group("pair")}',
    guard=_object_element_missing_brace,
    diagnostic=lambda match, _: (
        f"Restored missing opening brace before array element property {match.group('pair').rstrip(':').strip()}"
    ),
)

STRUCTURAL_RULES = (
    MISSING_ELEMENT_OPENING_BRACE,
    DUPLICATE_TRAILING_CLOSERS,
    MISMATCHED_CLOSER,
)
