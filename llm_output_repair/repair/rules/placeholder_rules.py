"""Placeholder leftovers such as ``_SOME_TOKEN_`` standing where an element should be."""

from ..repair_base import RuleCategory
from .rule_base import KEY, AnomalyRule, keep_groups, outside_string

PLACEHOLDER_TOKEN = r"_[A-Z][A-Z0-9_]*_"

PLACEHOLDER_ELEMENT = AnomalyRule(
    rule_id="placeholder_element",
    category=RuleCategory.PLACEHOLDER,
    pattern=(
        rf"(?P<lead>[{{\[,])[ \t]*(?:\r?\n[ \t]*)?(?P<token>{PLACEHOLDER_TOKEN})"
        r"[ \t]*,?(?=\s*(?:[}\]\"{\[]|\Z))"
    ),
    rewrite=keep_groups("lead"),
    diagnostic=lambda match, _: f"Removed placeholder token {match.group('token')}",
)

PLACEHOLDER_VALUE = AnomalyRule(
    rule_id="placeholder_value",
    category=RuleCategory.PLACEHOLDER,
    pattern=rf"(?P<key>{KEY}[ \t]*)(?P<token>{PLACEHOLDER_TOKEN})(?=\s*[,}}\]])",
    rewrite=lambda match, ctx: match.group("key") + "null",
    guard=outside_string("token"),
    diagnostic=lambda match, _: f"Replaced placeholder value {match.group('token')} with null",
)

PLACEHOLDER_RULES = (
    PLACEHOLDER_ELEMENT,
    PLACEHOLDER_VALUE,
)
