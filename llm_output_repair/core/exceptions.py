"""
Exception types for the repair engine.

Only RuleDefinitionError ever leaves the package, and only while the rule
catalog is being assembled. Everything raised during a repair call is absorbed
at the RepairEngine.repair boundary.
"""

from typing import Optional, Any, Dict


class RepairEngineError(Exception):
    """Base exception for repair engine failures"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class RuleDefinitionError(RepairEngineError):
    """Raised when the rule catalog is malformed (duplicate ids or patterns)"""


class RuleExecutionError(RepairEngineError):
    """Raised when a single rule fails while rewriting a buffer"""
    def __init__(self, rule_id: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.rule_id = rule_id
        merged = {"rule_id": rule_id}
        merged.update(details or {})
        super().__init__(f"Rule '{rule_id}' failed: {message}", merged)
