"""
Rules for free text an LLM writes between structural tokens: truncation
notices ("there are more methods..."), commentary and code comments.
"""

import re
from re import Match

from ..repair_base import RuleCategory
from .rule_base import AnomalyRule, RuleContext, removed, shorten

# Closed vocabulary of "stopped early" phrases. Only text starting with one of
# these is ever deleted between tokens.
STOPPED_EARLY_PHRASES = (
    "there are more",
    "there are additional",
    "there is more",
    "there would be more",
    "but the response",
    "the response is getting",
    "getting too long",
    "i will stop",
    "i'll stop",
    "i am stopping",
    "stopping here",
    "for brevity",
    "truncated for",
    "remaining items omitted",
    "rest omitted",
    "and so on",
    "to be continued",
    "let me continue",
    "continuing with",
    "next, i will",
    "ai-generated content",
)

_PHRASE_ALTERNATION = "|".join(re.escape(phrase) for phrase in STOPPED_EARLY_PHRASES)


def _drop_notice(match: Match, ctx: RuleContext) -> str:
    return match.group("lead") + (match.group("trail") or match.group("gap") or " ")


def _comment_guard(match: Match, ctx: RuleContext) -> bool:
    return ctx.at_boundary(match.start()) or ctx.enclosing(match.start()).depth > 0


TRUNCATION_NOTICE = AnomalyRule(
    rule_id="truncation_notice",
    category=RuleCategory.EMBEDDED_PROSE,
    pattern=(
        r"(?P<lead>[}\]]\s*,?|,)"
        r"(?P<gap>\s*)"
        rf"(?P<prose>(?i:{_PHRASE_ALTERNATION})[^{{}}\[\]\"]*?)"
        r"(?P<trail>\s*)"
        r"(?=[{\[\"}\]]|\Z)"
    ),
    rewrite=_drop_notice,
    diagnostic=lambda match, _: f"Removed truncation notice: {shorten(match.group('prose'))}",
)

# Ellipsis standing in for omitted elements: [1, 2, ...]
ELLIPSIS_ELEMENT = AnomalyRule(
    rule_id="ellipsis_element",
    category=RuleCategory.EMBEDDED_PROSE,
    pattern=r"(?P<lead>,)\s*(?:\.\.\.|\u2026)(?:[ \t]*\([^()\n]*\))?(?P<trail>\s*)(?=[}\]])",
    rewrite=lambda match, ctx: match.group("trail"),
    diagnostic="Removed ellipsis standing in for omitted elements",
)

LINE_COMMENT = AnomalyRule(
    rule_id="line_comment",
    category=RuleCategory.EMBEDDED_PROSE,
    pattern=r"(?<![:\w])//[^\n]*",
    rewrite=removed,
    guard=_comment_guard,
    diagnostic=lambda match, _: f"Removed line comment: {shorten(match.group(0))}",
)

BLOCK_COMMENT = AnomalyRule(
    rule_id="block_comment",
    category=RuleCategory.EMBEDDED_PROSE,
    pattern=r"/\*[\s\S]*?\*/",
    rewrite=removed,
    guard=_comment_guard,
    diagnostic=lambda match, _: f"Removed block comment: {shorten(match.group(0))}",
)

PROSE_RULES = (
    TRUNCATION_NOTICE,
    ELLIPSIS_ELEMENT,
    LINE_COMMENT,
    BLOCK_COMMENT,
)
