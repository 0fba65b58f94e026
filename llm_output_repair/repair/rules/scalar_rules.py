"""
Corrupted scalar values: marker-wrapped numbers, assignment operators,
foreign literals, concatenation chains and values missing their quotes.

Values are only coerced into a valid token; their content is never changed.
A concatenation chain keeps its literal text and drops the identifiers.
"""

import re
from re import Match

from ..repair_base import RuleCategory
from .rule_base import KEY, STRING, AnomalyRule, RuleContext, JSON_KEYWORDS, all_of, keep_groups, outside_string

_VALUE_END = r"(?=\s*[,}\]])"
_CHAIN_END = r"(?=\s*[,}\]\n])"

# Identifier, member access or call in a concatenation chain: BASE_PATH, cfg.dir, path()
_CHAIN_IDENT = r"[A-Za-z_][A-Za-z0-9_.()]*"
_CHAIN_OPERAND = re.compile(rf"{STRING}|{_CHAIN_IDENT}")

_FOREIGN_LITERALS = {"True": "true", "False": "false", "None": "null", "undefined": "null"}

# Never quoted by UNQUOTED_STRING_VALUE
_BARE_TOKENS = JSON_KEYWORDS | set(_FOREIGN_LITERALS) | {"NaN", "Infinity"}


def _replace_literal(match: Match, ctx: RuleContext) -> str:
    return match.group("lead") + _FOREIGN_LITERALS[match.group("literal")]


def _quote_word(match: Match, ctx: RuleContext) -> str:
    return f'{match.group("key")}"{match.group("word")}"'


def _not_bare_token(match: Match, ctx: RuleContext) -> bool:
    return match.group("word") not in _BARE_TOKENS


def _collapse_literal_chain(match: Match, ctx: RuleContext) -> str:
    """Merge an all-literal chain; keep only the first literal once an identifier appears"""
    operands = _CHAIN_OPERAND.findall(match.group("chain"))
    if all(operand.startswith('"') for operand in operands):
        merged = "".join(operand[1:-1] for operand in operands)
        return f'{match.group("lead")}"{merged}"'
    return match.group("lead") + operands[0]

CORRUPTED_NUMERIC_MARKER = AnomalyRule(
    rule_id="corrupted_numeric_marker",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<key>{KEY})[ \t]*_[A-Z][A-Z_]*`?(?P<number>-?\d+(?:\.\d+)?){_VALUE_END}",
    rewrite=lambda match, ctx: f'{match.group("key")} {match.group("number")}',
    guard=outside_string("number"),
    diagnostic=lambda match, _: f"Stripped corruption marker from numeric value: {match.group('number')}",
)

UNDERSCORE_PREFIXED_NUMBER = AnomalyRule(
    rule_id="underscore_prefixed_number",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<lead>:[ \t]*)_(?P<number>\d+(?:\.\d+)?){_VALUE_END}",
    rewrite=keep_groups("lead", "number"),
    diagnostic=lambda match, _: f"Removed underscore prefix from numeric value: _{match.group('number')}",
)

ASSIGNMENT_OPERATOR = AnomalyRule(
    rule_id="assignment_operator",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf'(?P<key>{STRING}[ \t]*):(?P<operator>=|-(?=\s+["\w]))',
    rewrite=lambda match, ctx: match.group("key") + ":",
    guard=outside_string("operator"),
    diagnostic=lambda match, _: f"Replaced assignment operator after property {match.group('key').strip()}",
)

IDENTIFIER_ONLY_CONCATENATION = AnomalyRule(
    rule_id="identifier_only_concatenation",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<key>{KEY}[ \t]*)(?P<chain>{_CHAIN_IDENT}(?:\s*\+\s*{_CHAIN_IDENT})+){_CHAIN_END}",
    rewrite=lambda match, ctx: match.group("key") + '""',
    guard=outside_string("chain"),
    diagnostic=lambda match, _: f"Replaced identifier concatenation {match.group('chain')} with an empty string",
)

IDENTIFIER_LED_CONCATENATION = AnomalyRule(
    rule_id="identifier_led_concatenation",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<key>{KEY}[ \t]*)(?P<chain>(?:{_CHAIN_IDENT}\s*\+\s*)+)(?P<literal>{STRING})",
    rewrite=keep_groups("key", "literal"),
    guard=outside_string("chain"),
    diagnostic=lambda match, _: f"Dropped identifiers before string literal {match.group('literal')}",
)

LITERAL_CONCATENATION = AnomalyRule(
    rule_id="literal_concatenation",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=(
        rf"(?P<lead>[:\[,][ \t]*)"
        rf"(?P<chain>{STRING}(?:\s*\+\s*(?:{STRING}|{_CHAIN_IDENT}))+){_CHAIN_END}"
    ),
    rewrite=_collapse_literal_chain,
    diagnostic=lambda match, replacement: (
        f"Collapsed concatenation chain to {replacement[len(match.group('lead')):]}"
    ),
)

FOREIGN_LITERAL = AnomalyRule(
    rule_id="foreign_literal",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<lead>[:\[,]\s*)(?P<literal>True|False|None|undefined)\b{_VALUE_END}",
    rewrite=_replace_literal,
    diagnostic=lambda match, replacement: (
        f"Converted literal {match.group('literal')} to {_FOREIGN_LITERALS[match.group('literal')]}"
    ),
)

SINGLE_QUOTED_VALUE = AnomalyRule(
    rule_id="single_quoted_value",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<lead>[:\[,]\s*)'(?P<body>[^'\"\\\n]*)'{_VALUE_END}",
    rewrite=lambda match, ctx: f'{match.group("lead")}"{match.group("body")}"',
    diagnostic="Converted single-quoted value to a JSON string",
)

MISSING_OPENING_VALUE_QUOTE = AnomalyRule(
    rule_id="missing_opening_value_quote",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf'(?P<key>{KEY}[ \t]*)(?P<word>[A-Za-z_][A-Za-z0-9_.\-]*)"(?=\s*[,}}\]\n])',
    rewrite=_quote_word,
    guard=all_of(_not_bare_token, outside_string("word")),
    diagnostic=lambda match, _: f"Fixed missing opening quote on value: {match.group('word')}\"",
)

UNQUOTED_STRING_VALUE = AnomalyRule(
    rule_id="unquoted_string_value",
    category=RuleCategory.CORRUPTED_SCALAR,
    pattern=rf"(?P<key>{KEY}[ \t]*)(?P<word>[A-Za-z_][A-Za-z0-9_.\-]*){_VALUE_END}",
    rewrite=_quote_word,
    guard=all_of(_not_bare_token, outside_string("word")),
    diagnostic=lambda match, _: f"Added quotes around unquoted value: {match.group('word')}",
)

SCALAR_RULES = (
    CORRUPTED_NUMERIC_MARKER,
    UNDERSCORE_PREFIXED_NUMBER,
    ASSIGNMENT_OPERATOR,
    IDENTIFIER_ONLY_CONCATENATION,
    IDENTIFIER_LED_CONCATENATION,
    LITERAL_CONCATENATION,
    FOREIGN_LITERAL,
    SINGLE_QUOTED_VALUE,
    MISSING_OPENING_VALUE_QUOTE,
    UNQUOTED_STRING_VALUE,
)
