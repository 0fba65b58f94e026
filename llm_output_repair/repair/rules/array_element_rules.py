"""
Array element rules.

Arrays cannot hold key/value pairs, so a ``"k": "v"`` pattern found directly
inside an array is flattened to its value; the same text inside an object is
left alone.
"""

from ..repair_base import ContainerKind, RuleCategory
from .rule_base import STRING, AnomalyRule, all_of, group_in, is_keyword, keep_groups

_SCALAR = rf"{STRING}|-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?|true|false|null"

KEY_VALUE_PAIR_IN_ARRAY = AnomalyRule(
    rule_id="key_value_pair_in_array",
    category=RuleCategory.ARRAY_ELEMENT,
    pattern=rf"(?P<lead>[\[,]\s*)(?P<key>{STRING})\s*:\s*(?P<value>{_SCALAR})(?=\s*[,\]])",
    rewrite=keep_groups("lead", "value"),
    guard=group_in("key", ContainerKind.ARRAY),
    diagnostic=lambda match, _: f"Flattened property {match.group('key')} inside an array to its value",
)

STRAY_PREFIX_ON_ELEMENT = AnomalyRule(
    rule_id="stray_prefix_on_element",
    category=RuleCategory.ARRAY_ELEMENT,
    pattern=rf"(?P<lead>[\[,]\s*)(?P<stray>[A-Za-z]{{1,12}})(?P<value>{STRING})(?=\s*[,\]])",
    rewrite=keep_groups("lead", "value"),
    guard=all_of(
        group_in("stray", ContainerKind.ARRAY),
        lambda match, ctx: not is_keyword(match.group("stray")),
    ),
    diagnostic=lambda match, _: f"Removed stray prefix '{match.group('stray')}' before array element",
)

STRAY_CHAR_BEFORE_OBJECT = AnomalyRule(
    rule_id="stray_char_before_object",
    category=RuleCategory.ARRAY_ELEMENT,
    pattern=r"(?P<lead>[\[,]\s*)(?P<stray>[A-Za-z])\s*(?=\{)",
    rewrite=keep_groups("lead"),
    guard=group_in("stray", ContainerKind.ARRAY),
    diagnostic=lambda match, _: f"Removed stray character '{match.group('stray')}' before array object",
)

MISSING_OPENING_ELEMENT_QUOTE = AnomalyRule(
    rule_id="missing_opening_element_quote",
    category=RuleCategory.ARRAY_ELEMENT,
    pattern=r'(?P<lead>[\[,]\s*)(?P<word>[A-Za-z_$][A-Za-z0-9_$.\-]*)"(?=\s*[,\]])',
    rewrite=lambda match, ctx: f'{match.group("lead")}"{match.group("word")}"',
    guard=all_of(
        group_in("word", ContainerKind.ARRAY),
        lambda match, ctx: not is_keyword(match.group("word")),
    ),
    diagnostic=lambda match, _: f"Fixed missing opening quote on array element: {match.group('word')}\"",
)

ARRAY_ELEMENT_RULES = (
    STRAY_PREFIX_ON_ELEMENT,
    STRAY_CHAR_BEFORE_OBJECT,
    MISSING_OPENING_ELEMENT_QUOTE,
    KEY_VALUE_PAIR_IN_ARRAY,
)
