"""Character-level normalization: smart quotes and control characters."""

from re import Match

from ..repair_base import RuleCategory
from .rule_base import AnomalyRule, RuleContext, removed

_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t", "\b": "\\b", "\f": "\\f"}


def _escape_control_characters(match: Match, ctx: RuleContext):
    body = match.group("body")
    if not any(ord(ch) < 0x20 for ch in body):
        return None
    escaped = "".join(
        _CONTROL_ESCAPES.get(ch, f"\\u{ord(ch):04x}") if ord(ch) < 0x20 else ch
        for ch in body
    )
    return f'"{escaped}"'


SMART_DOUBLE_QUOTE = AnomalyRule(
    rule_id="smart_double_quote",
    category=RuleCategory.CHARACTER_NORMALIZATION,
    pattern=r"[\u201c\u201d\u201e\u201f\u2033]",
    rewrite=lambda match, ctx: '"',
    diagnostic=lambda match, _: f"Replaced typographic quote {match.group(0)} with a straight double quote",
)

STRAY_CONTROL_CHARACTERS = AnomalyRule(
    rule_id="stray_control_characters",
    category=RuleCategory.CHARACTER_NORMALIZATION,
    pattern=r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ufeff]+",
    rewrite=removed,
    diagnostic=lambda match, _: f"Removed {len(match.group(0))} control character(s) between tokens",
)

# A complete string token that is followed by something structural; raw
# control characters inside it are escaped.
UNESCAPED_CONTROL_IN_STRING = AnomalyRule(
    rule_id="unescaped_control_in_string",
    category=RuleCategory.CHARACTER_NORMALIZATION,
    pattern=r'"(?P<body>(?:[^"\\]|\\.)*)"(?=\s*(?:[,:}\]]|\Z))',
    rewrite=_escape_control_characters,
    diagnostic="Escaped raw control characters inside a string value",
)

CHARACTER_RULES = (
    SMART_DOUBLE_QUOTE,
    STRAY_CONTROL_CHARACTERS,
    UNESCAPED_CONTROL_IN_STRING,
)
