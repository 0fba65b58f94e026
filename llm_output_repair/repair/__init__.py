"""Repair module for malformed LLM JSON output."""

from .config import (
    RepairConfig,
    RepairProfile,
    DEFAULT_KEY_FRAGMENTS,
    get_repair_config,
    get_key_fragment_map,
    register_key_fragment,
    load_repair_config_from_env,
    load_repair_config,
)
from .diagnostics import DiagnosticsRecorder
from .engine import RepairEngine, apply_group, apply_rule, get_repair_engine, repair_json
from .lexical_context import LexicalContextTable, enclosing_context, find_root_close, is_inside_string
from .preflight import find_corruption_signatures, should_repair, try_parse
from .repair_base import ContainerKind, Diagnostic, EnclosingContext, RepairResult, RuleCategory

__all__ = [
    'RepairConfig',
    'RepairProfile',
    'DEFAULT_KEY_FRAGMENTS',
    'get_repair_config',
    'get_key_fragment_map',
    'register_key_fragment',
    'load_repair_config_from_env',
    'load_repair_config',
    'DiagnosticsRecorder',
    'RepairEngine',
    'apply_group',
    'apply_rule',
    'get_repair_engine',
    'repair_json',
    'LexicalContextTable',
    'enclosing_context',
    'find_root_close',
    'is_inside_string',
    'find_corruption_signatures',
    'should_repair',
    'try_parse',
    'ContainerKind',
    'Diagnostic',
    'EnclosingContext',
    'RepairResult',
    'RuleCategory',
]
