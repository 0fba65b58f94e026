"""
Stray tokens in front of a well-formed key or element: a lone word, a glued
letter, a list marker.
"""

from re import Match

from ..repair_base import ContainerKind, RuleCategory
from .rule_base import AnomalyRule, RuleContext, all_of, group_in, is_keyword, keep_groups

_KEY = r'"[A-Za-z_$][A-Za-z0-9_$\-]*"\s*:'


def _lead_at_boundary(match: Match, ctx: RuleContext) -> bool:
    # A newline lead only counts when the line before it ended structurally
    if match.group("lead") in "\r\n":
        return ctx.at_boundary(match.start("lead"))
    return True


def _stray_not_keyword(match: Match, ctx: RuleContext) -> bool:
    return not is_keyword(match.group("stray"))


STRAY_WORD_BEFORE_KEY = AnomalyRule(
    rule_id="stray_word_before_key",
    category=RuleCategory.STRAY_TOKEN,
    pattern=(
        r"(?P<lead>[{,\n])(?P<ws>[ \t]*)(?P<stray>[A-Za-z][A-Za-z0-9_\-]*)[ \t]+"
        rf"(?P<key>{_KEY})"
    ),
    rewrite=keep_groups("lead", "ws", "key"),
    guard=all_of(_lead_at_boundary, _stray_not_keyword, group_in("key", ContainerKind.OBJECT)),
    diagnostic=lambda match, _: f"Removed stray text before property: {match.group('stray')}",
)

STRAY_CHAR_GLUED_TO_KEY = AnomalyRule(
    rule_id="stray_char_glued_to_key",
    category=RuleCategory.STRAY_TOKEN,
    pattern=rf"(?P<lead>[{{,]\s*)(?P<stray>[A-Za-z])(?P<key>{_KEY})",
    rewrite=keep_groups("lead", "key"),
    guard=group_in("key", ContainerKind.OBJECT),
    diagnostic=lambda match, _: f"Removed stray character '{match.group('stray')}' before property name",
)

LIST_MARKER = AnomalyRule(
    rule_id="list_marker",
    category=RuleCategory.STRAY_TOKEN,
    pattern=(
        r"(?P<lead>[{\[,\n])(?P<ws>\s*)"
        r"(?P<marker>[\u2022\u2023\u2043\u2219\u25e6\u2192*]|-(?=[ \t]*\"))[ \t]*"
        r"(?=[\"{\[])"
    ),
    rewrite=keep_groups("lead", "ws"),
    guard=all_of(_lead_at_boundary, lambda match, ctx: ctx.enclosing(match.start("marker")).depth > 0),
    diagnostic=lambda match, _: f"Removed list marker '{match.group('marker')}'",
)

STRAY_TEXT_AFTER_CLOSER = AnomalyRule(
    rule_id="stray_text_after_closer",
    category=RuleCategory.STRAY_TOKEN,
    pattern=r"(?P<close>[}\]],)(?P<stray>[A-Za-z]{1,4})(?=[ \t]*\r?\n\s*[{\[\"])",
    rewrite=keep_groups("close"),
    guard=_stray_not_keyword,
    diagnostic=lambda match, _: f"Removed stray text '{match.group('stray')}' after closing delimiter",
)

STRAY_TOKEN_RULES = (
    STRAY_WORD_BEFORE_KEY,
    STRAY_CHAR_GLUED_TO_KEY,
    LIST_MARKER,
    STRAY_TEXT_AFTER_CLOSER,
)
