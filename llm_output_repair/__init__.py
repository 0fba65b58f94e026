"""Best-effort repair of malformed JSON produced by large language models."""

from .repair import RepairConfig, RepairEngine, RepairResult, repair_json, should_repair

__version__ = "0.1.0"

__all__ = [
    'RepairConfig',
    'RepairEngine',
    'RepairResult',
    'repair_json',
    'should_repair',
]
