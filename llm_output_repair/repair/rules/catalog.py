"""
The anomaly rule catalog: every rule group in the order the engine applies
them.

Groups that move container boundaries or cut whole spans (structural
imbalance, embedded content) run before the fine-grained key and value
groups, which anchor on those boundaries. Closure runs last.
"""

from typing import Iterable, Iterator, Tuple

from ...core.exceptions import RuleDefinitionError
from .array_element_rules import ARRAY_ELEMENT_RULES
from .character_rules import CHARACTER_RULES
from .closure_rules import CLOSURE_RULES
from .embedded_content_rules import EMBEDDED_CONTENT_RULES
from .key_name_rules import KEY_NAME_RULES
from .non_ascii_rules import NON_ASCII_RULES
from .placeholder_rules import PLACEHOLDER_RULES
from .prose_rules import PROSE_RULES
from .rule_base import AnomalyRule, RuleGroup
from .scalar_rules import SCALAR_RULES
from .separator_rules import SEPARATOR_RULES
from .stray_token_rules import STRAY_TOKEN_RULES
from .structural_rules import STRUCTURAL_RULES


def iter_rules(catalog: Iterable[RuleGroup]) -> Iterator[AnomalyRule]:
    for group in catalog:
        yield from group.rules


def validate_catalog(catalog: Tuple[RuleGroup, ...]) -> Tuple[RuleGroup, ...]:
    """
    Reject catalogs with duplicate group names, rule ids or patterns.

    Raises:
        RuleDefinitionError: on the first duplicate found
    """
    group_names = set()
    rule_ids = {}
    patterns = {}

    for group in catalog:
        if group.name in group_names:
            raise RuleDefinitionError(f"Duplicate rule group: {group.name}", {"group": group.name})
        group_names.add(group.name)

        for rule in group.rules:
            if rule.rule_id in rule_ids:
                raise RuleDefinitionError(
                    f"Duplicate rule id: {rule.rule_id}",
                    {"rule_id": rule.rule_id, "groups": [rule_ids[rule.rule_id], group.name]},
                )
            rule_ids[rule.rule_id] = group.name

            key = (rule.pattern.pattern, rule.pattern.flags)
            if key in patterns:
                raise RuleDefinitionError(
                    f"Rule {rule.rule_id} duplicates the pattern of {patterns[key]}",
                    {"rule_id": rule.rule_id, "duplicate_of": patterns[key]},
                )
            patterns[key] = rule.rule_id

    return catalog


RULE_CATALOG: Tuple[RuleGroup, ...] = validate_catalog((
    RuleGroup("character_normalization", CHARACTER_RULES),
    RuleGroup("structural_imbalance", STRUCTURAL_RULES),
    RuleGroup("embedded_content", EMBEDDED_CONTENT_RULES),
    RuleGroup("embedded_prose", PROSE_RULES),
    RuleGroup("placeholders", PLACEHOLDER_RULES, converge=True),
    RuleGroup("stray_tokens", STRAY_TOKEN_RULES, converge=True),
    RuleGroup("key_names", KEY_NAME_RULES, converge=True),
    RuleGroup("scalars", SCALAR_RULES),
    RuleGroup("non_ascii", NON_ASCII_RULES),
    RuleGroup("separators", SEPARATOR_RULES, converge=True),
    RuleGroup("array_elements", ARRAY_ELEMENT_RULES, converge=True),
    RuleGroup("closure", CLOSURE_RULES),
))
