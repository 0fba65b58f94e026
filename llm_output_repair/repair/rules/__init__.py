"""Anomaly rule catalog."""

from .catalog import RULE_CATALOG, iter_rules, validate_catalog
from .rule_base import AnomalyRule, RuleContext, RuleGroup

__all__ = [
    'RULE_CATALOG',
    'AnomalyRule',
    'RuleContext',
    'RuleGroup',
    'iter_rules',
    'validate_catalog',
]
