"""
Non-ASCII corruption next to identifier-like values.

Glyphs are stripped only when they touch a package-like or identifier-like
token; strings that read as prose are never touched.
"""

import re
from re import Match

from ..repair_base import RuleCategory
from .rule_base import AnomalyRule, RuleContext, IDENT, PACKAGE_IDENT

_GLYPHS = r"[^\x00-\x7f\s\"\u201c\u201d]+"
_IDENTIFIER_VALUE = rf'"(?:{IDENT}(?:[.:/\-]{IDENT})*)"'

_CONTROL_ESCAPE = re.compile(r"\\u00[01][0-9A-Fa-f]")
_IDENT_ONLY = re.compile(rf"\A{IDENT}(?:\.{IDENT})*\Z")


def _strip_glyphs_inside(match: Match, ctx: RuleContext):
    if not (match.group("pre") or match.group("post")):
        return None
    return f'"{match.group("ident")}"'


def _strip_control_escapes(match: Match, ctx: RuleContext):
    body = match.group("body")
    cleaned = _CONTROL_ESCAPE.sub("", body)
    if cleaned == body or not _IDENT_ONLY.match(cleaned):
        return None
    return f'"{cleaned}"'


GLYPH_INSIDE_PACKAGE_VALUE = AnomalyRule(
    rule_id="glyph_inside_package_value",
    category=RuleCategory.NON_ASCII,
    pattern=rf'"(?P<pre>{_GLYPHS})?(?P<ident>{PACKAGE_IDENT})(?P<post>{_GLYPHS})?"',
    rewrite=_strip_glyphs_inside,
    diagnostic=lambda match, _: f"Removed stray glyphs from identifier value: {match.group('ident')}",
)

GLYPH_AFTER_VALUE = AnomalyRule(
    rule_id="glyph_after_value",
    category=RuleCategory.NON_ASCII,
    pattern=rf"(?P<value>{_IDENTIFIER_VALUE})(?P<glyphs>{_GLYPHS})(?=\s*[,}}\]:])",
    rewrite=lambda match, ctx: match.group("value"),
    diagnostic=lambda match, _: f"Removed stray glyphs after value {match.group('value')}",
)

GLYPH_BEFORE_VALUE = AnomalyRule(
    rule_id="glyph_before_value",
    category=RuleCategory.NON_ASCII,
    pattern=rf"(?P<lead>[\[,:]\s*)(?P<glyphs>{_GLYPHS})(?P<value>{_IDENTIFIER_VALUE})",
    rewrite=lambda match, ctx: match.group("lead") + match.group("value"),
    diagnostic=lambda match, _: f"Removed stray glyphs before value {match.group('value')}",
)

CONTROL_ESCAPE_IN_IDENTIFIER = AnomalyRule(
    rule_id="control_escape_in_identifier",
    category=RuleCategory.NON_ASCII,
    pattern=r'"(?P<body>(?:[A-Za-z0-9_$.]|\\u00[01][0-9A-Fa-f])+)"',
    rewrite=_strip_control_escapes,
    diagnostic=lambda match, replacement: f"Removed escaped control characters from identifier {replacement}",
)

NON_ASCII_RULES = (
    GLYPH_INSIDE_PACKAGE_VALUE,
    GLYPH_AFTER_VALUE,
    GLYPH_BEFORE_VALUE,
    CONTROL_ESCAPE_IN_IDENTIFIER,
)
