"""
Final cleanup: stray commas left behind by earlier deletions, and closing a
document that was cut off mid-structure.
"""

from re import Match

from ..repair_base import RuleCategory
from .rule_base import KEY, AnomalyRule, RuleContext, keep_groups


def _close_string(match: Match, ctx: RuleContext):
    if not ctx.table.ends_in_string:
        return None
    tail = match.group("tail")
    # An odd run of backslashes leaves an escape pending
    if (len(tail) - len(tail.rstrip("\\"))) % 2:
        return match.group(0) + '\\"'
    return match.group(0) + '"'


def _close_structures(match: Match, ctx: RuleContext):
    if ctx.table.ends_in_string:
        return None
    return ctx.table.unclosed or None


DOUBLE_COMMA = AnomalyRule(
    rule_id="double_comma",
    category=RuleCategory.CLOSURE,
    pattern=r",(?:\s*,)+",
    rewrite=lambda match, ctx: ",",
    diagnostic="Collapsed repeated commas",
)

LEADING_COMMA = AnomalyRule(
    rule_id="leading_comma",
    category=RuleCategory.CLOSURE,
    pattern=r"(?P<open>[{\[])(?P<ws>\s*),",
    rewrite=keep_groups("open", "ws"),
    diagnostic="Removed comma directly after an opening delimiter",
)

TRAILING_COMMA = AnomalyRule(
    rule_id="trailing_comma",
    category=RuleCategory.CLOSURE,
    pattern=r",(?P<ws>\s*)(?P<close>[}\]]|\Z)",
    rewrite=keep_groups("ws", "close"),
    diagnostic=lambda match, _: f"Removed trailing comma before {match.group('close') or 'end of input'}",
)

DANGLING_PROPERTY = AnomalyRule(
    rule_id="dangling_property",
    category=RuleCategory.CLOSURE,
    pattern=rf"(?P<key>{KEY})\s*(?=[}}\]]|\Z)",
    rewrite=lambda match, ctx: match.group("key") + " null",
    guard=lambda match, ctx: not ctx.inside_string(match.end("key")),
    diagnostic=lambda match, _: f"Filled dangling property {match.group('key').rstrip(':').strip()} with null",
)

UNTERMINATED_STRING = AnomalyRule(
    rule_id="unterminated_string",
    category=RuleCategory.CLOSURE,
    pattern=r'"(?P<tail>[^"\n]*)\Z',
    rewrite=_close_string,
    diagnostic="Closed string value cut off at the end of the document",
)

TRUNCATED_STRUCTURE = AnomalyRule(
    rule_id="truncated_structure",
    category=RuleCategory.CLOSURE,
    pattern=r"\Z",
    rewrite=_close_structures,
    diagnostic=lambda match, replacement: f"Appended missing closing delimiter(s) {replacement}",
)

CLOSURE_RULES = (
    UNTERMINATED_STRING,
    DANGLING_PROPERTY,
    DOUBLE_COMMA,
    LEADING_COMMA,
    TRAILING_COMMA,
    TRUNCATED_STRUCTURE,
)
