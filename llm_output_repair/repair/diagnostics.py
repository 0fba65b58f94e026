"""
Diagnostics Recorder

Bounded, ordered log of the fixes applied during one repair call.
"""

import logging
from typing import List, Optional, Tuple

from .repair_base import Diagnostic

logger = logging.getLogger(__name__)

DEFAULT_MAX_DIAGNOSTICS = 10


class DiagnosticsRecorder:
    """
    Collects diagnostics for a single repair invocation.

    Past ``max_entries`` further fixes are counted but not stored, so the
    recorder stays small on pathological input.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_DIAGNOSTICS):
        self.max_entries = max(0, max_entries)
        self._records: List[Diagnostic] = []
        self.fix_count = 0

    def record(self, rule_id: str, message: str) -> bool:
        """Register one applied fix. Returns False if it was past the cap."""
        self.fix_count += 1
        if len(self._records) >= self.max_entries:
            return False
        self._records.append(Diagnostic(rule_id=rule_id, message=message))
        return True

    @property
    def dropped_count(self) -> int:
        return self.fix_count - len(self._records)

    @property
    def is_full(self) -> bool:
        return len(self._records) >= self.max_entries

    def records(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._records)

    def messages(self) -> Optional[Tuple[str, ...]]:
        """Recorded messages, or None when nothing was recorded"""
        if not self._records:
            return None
        return tuple(record.message for record in self._records)

    def __len__(self) -> int:
        return len(self._records)
