"""
Rules for content wrapped around or injected into the JSON document:
markdown fences, leading prose, source code appended after the root value
and scratchpad lines an LLM leaves between properties.
"""

from re import Match

from ..repair_base import RuleCategory
from .rule_base import AnomalyRule, RuleContext, removed, shorten


def _truncate_after_root(match: Match, ctx: RuleContext):
    close = ctx.root_close
    if close is None:
        return None
    tail = ctx.buffer[close + 1:]
    # A comma right after the root close means the root closed too early
    if not tail.strip() or tail.lstrip().startswith(","):
        return None
    return ctx.buffer[:close + 1]


def _scratchpad_guard(match: Match, ctx: RuleContext) -> bool:
    return ctx.enclosing(match.start()).depth > 0 and ctx.at_boundary(match.start())


LEADING_CODE_FENCE = AnomalyRule(
    rule_id="leading_code_fence",
    category=RuleCategory.EMBEDDED_CONTENT,
    pattern=r"\A\s*```[A-Za-z0-9_+-]*[ \t]*\r?\n?",
    rewrite=removed,
    diagnostic="Removed opening markdown code fence",
)

TRAILING_CODE_FENCE = AnomalyRule(
    rule_id="trailing_code_fence",
    category=RuleCategory.EMBEDDED_CONTENT,
    pattern=r"\r?\n?[ \t]*```[ \t]*\s*\Z",
    rewrite=removed,
    diagnostic="Removed closing markdown code fence",
)

LEADING_PROSE = AnomalyRule(
    rule_id="leading_prose",
    category=RuleCategory.EMBEDDED_CONTENT,
    pattern=r'\A(?P<prose>[^{}\[\]"]+)(?P<root>[{\[])',
    rewrite=lambda match, ctx: match.group("root"),
    guard=lambda match, ctx: any(ch.isalpha() for ch in match.group("prose")),
    diagnostic=lambda match, _: f"Removed text before the JSON value: {shorten(match.group('prose'))}",
)

# Whole-buffer match: the rewrite locates the root's matching close with the
# bracket-stack scan and keeps everything up to it.
CONTENT_AFTER_ROOT = AnomalyRule(
    rule_id="content_after_root",
    category=RuleCategory.EMBEDDED_CONTENT,
    pattern=r"\A[\s\S]+",
    rewrite=_truncate_after_root,
    diagnostic=lambda match, replacement: (
        f"Truncated {len(match.group(0)) - len(replacement)} characters of "
        f"non-JSON content after the root value"
    ),
)

SCRATCHPAD_LINES = AnomalyRule(
    rule_id="scratchpad_lines",
    category=RuleCategory.EMBEDDED_CONTENT,
    pattern=r"(?m)^[ \t]*(?:extra|llm|ai)_[A-Za-z0-9_]*[ \t]*[:=][^\n{}\[\]]*(?:\n[ \t]+-[^\n{}\[\]]*)*\n?",
    rewrite=removed,
    guard=_scratchpad_guard,
    diagnostic=lambda match, _: f"Removed LLM scratchpad line: {shorten(match.group(0))}",
)

EMBEDDED_CONTENT_RULES = (
    LEADING_CODE_FENCE,
    TRAILING_CODE_FENCE,
    LEADING_PROSE,
    CONTENT_AFTER_ROOT,
    SCRATCHPAD_LINES,
)
