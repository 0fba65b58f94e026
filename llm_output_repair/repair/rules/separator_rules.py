"""
Missing ``:`` and ``,`` separators, decided from the enclosing container.

The same characters mean different things by context: ``"a" "b"`` is a key
missing its colon inside an object but two elements missing a comma inside
an array.
"""

from re import Match

from ..repair_base import ContainerKind, RuleCategory
from .rule_base import STRING, AnomalyRule, RuleContext, all_of, group_in

_KEY = r'"[A-Za-z_$][A-Za-z0-9_$\-]*"\s*:'


def _in_key_position(name: str):
    def _guard(match: Match, ctx: RuleContext) -> bool:
        return ctx.in_key_position(match.start(name))
    return _guard


def _line_break_guard(match: Match, ctx: RuleContext) -> bool:
    """The break sits outside any string, in the container the next token needs"""
    ws_start = match.start("ws")
    if ctx.inside_string(ws_start):
        return False
    expected = ContainerKind.OBJECT if match.group("key") else ContainerKind.ARRAY
    return ctx.kind(ws_start) == expected


def _insert_comma(match: Match, ctx: RuleContext) -> str:
    return f'{match.group("end")},{match.group("ws")}{match.group("next")}'


MISSING_COLON = AnomalyRule(
    rule_id="missing_colon",
    category=RuleCategory.SEPARATOR,
    pattern=r'(?P<key>"[A-Za-z_$][A-Za-z0-9_$\-]*")(?P<ws>[ \t]+)(?P<value>"|\{|\[|-?\d|true\b|false\b|null\b)',
    rewrite=lambda match, ctx: f'{match.group("key")}:{match.group("ws")}{match.group("value")}',
    guard=all_of(group_in("key", ContainerKind.OBJECT), _in_key_position("key")),
    diagnostic=lambda match, _: f"Inserted missing colon after property {match.group('key')}",
)

MISSING_COMMA_BETWEEN_STRINGS = AnomalyRule(
    rule_id="missing_comma_between_strings",
    category=RuleCategory.SEPARATOR,
    pattern=rf"(?P<end>{STRING})(?P<ws>\s+)(?=\")",
    rewrite=lambda match, ctx: f'{match.group("end")},{match.group("ws")}',
    guard=group_in("end", ContainerKind.ARRAY),
    diagnostic=lambda match, _: f"Inserted missing comma after array element {match.group('end')}",
)

MISSING_COMMA_AT_LINE_BREAK = AnomalyRule(
    rule_id="missing_comma_at_line_break",
    category=RuleCategory.SEPARATOR,
    pattern=(
        r"(?P<end>[\"}\]]|\d|\btrue|\bfalse|\bnull)"
        r"(?P<ws>[ \t]*\r?\n\s*)"
        rf"(?P<next>(?P<key>{_KEY})|[{{\[\"]|-?\d|true\b|false\b|null\b)"
    ),
    rewrite=_insert_comma,
    guard=_line_break_guard,
    skip_in_string=False,
    diagnostic="Inserted missing comma between elements on separate lines",
)

MISSING_COMMA_AFTER_CONTAINER = AnomalyRule(
    rule_id="missing_comma_after_container",
    category=RuleCategory.SEPARATOR,
    pattern=rf"(?P<end>[}}\]])(?P<ws>[ \t]*)(?P<next>{_KEY})",
    rewrite=_insert_comma,
    guard=group_in("next", ContainerKind.OBJECT),
    diagnostic="Inserted missing comma between a closed container and the next property",
)

MISSING_COMMA_BETWEEN_OBJECTS = AnomalyRule(
    rule_id="missing_comma_between_objects",
    category=RuleCategory.SEPARATOR,
    pattern=r"(?P<end>\})(?P<ws>[ \t]*)(?P<next>\{)",
    rewrite=_insert_comma,
    guard=group_in("next", ContainerKind.ARRAY),
    diagnostic="Inserted missing comma between adjacent objects in an array",
)

SEPARATOR_RULES = (
    MISSING_COLON,
    MISSING_COMMA_BETWEEN_STRINGS,
    MISSING_COMMA_AT_LINE_BREAK,
    MISSING_COMMA_AFTER_CONTAINER,
    MISSING_COMMA_BETWEEN_OBJECTS,
)
