"""
Repair Engine

Folds the rule catalog over a working buffer:

    buffer = reduce(apply_group, catalog, original)

Every rule evaluation sees one buffer snapshot and the lexical context table
built for it. Converging groups repeat until the buffer stops changing or the
pass cap is reached, and the whole catalog is re-run the same way.
"""

import logging
from functools import reduce
from typing import Optional, Tuple

from ..core.config import settings
from ..core.exceptions import RuleExecutionError
from .config import RepairConfig, load_repair_config_from_env
from .diagnostics import DiagnosticsRecorder
from .lexical_context import LexicalContextTable
from .preflight import should_repair
from .repair_base import RepairResult
from .rules.catalog import RULE_CATALOG
from .rules.rule_base import AnomalyRule, RuleContext, RuleGroup

logger = logging.getLogger(__name__)


class ContextCache:
    """Keeps the context table for the latest buffer snapshot"""

    __slots__ = ("_buffer", "_table")

    def __init__(self):
        self._buffer: Optional[str] = None
        self._table: Optional[LexicalContextTable] = None

    def table_for(self, buffer: str) -> LexicalContextTable:
        if self._table is None or buffer is not self._buffer:
            self._buffer = buffer
            self._table = LexicalContextTable(buffer)
        return self._table


def apply_rule(
    rule: AnomalyRule,
    buffer: str,
    recorder: DiagnosticsRecorder,
    config: RepairConfig,
    cache: Optional[ContextCache] = None,
) -> str:
    """
    Apply one rule to ``buffer`` and return the rewritten buffer.

    Matches are found and guarded against the incoming snapshot; accepted
    rewrites are spliced in one pass. The same buffer object comes back when
    nothing changed.
    """
    ctx = None
    pieces = []
    last = 0

    try:
        for match in rule.pattern.finditer(buffer):
            if ctx is None:
                table = (cache or ContextCache()).table_for(buffer)
                ctx = RuleContext(buffer, table, config, rule.lookback or config.context_lookback)

            replacement = rule.evaluate(match, ctx)
            if replacement is None:
                continue

            pieces.append(buffer[last:match.start()])
            pieces.append(replacement)
            last = match.end()
            recorder.record(rule.rule_id, rule.describe(match, replacement))
    except RuleExecutionError:
        raise
    except Exception as e:
        raise RuleExecutionError(rule.rule_id, f"{type(e).__name__}: {e}", {"category": rule.category.value}) from e

    if not pieces:
        return buffer
    pieces.append(buffer[last:])
    return "".join(pieces)


def apply_group(
    group: RuleGroup,
    buffer: str,
    recorder: DiagnosticsRecorder,
    config: RepairConfig,
    cache: Optional[ContextCache] = None,
) -> str:
    """Apply every rule of ``group`` in order, repeating converging groups to a fixed point"""
    cache = cache or ContextCache()
    original = buffer
    passes = 0

    while True:
        passes += 1
        start = buffer
        buffer = reduce(
            lambda current, rule: apply_rule(rule, current, recorder, config, cache),
            group.rules,
            buffer,
        )
        if not group.converge or buffer == start:
            break
        if passes >= config.max_passes:
            logger.debug(f"Rule group '{group.name}' hit the pass cap ({config.max_passes})")
            break

    if buffer is not original:
        logger.debug(
            f"Rule group '{group.name}' rewrote the buffer in {passes} pass(es) "
            f"({len(original)} -> {len(buffer)} chars)"
        )
    return buffer


class RepairEngine:
    """
    Applies the anomaly rule catalog to raw LLM output.

    The catalog is shared and read-only; every ``repair`` call owns its
    buffer, context cache and diagnostics recorder, so one engine can serve
    concurrent callers.
    """

    def __init__(self, config: Optional[RepairConfig] = None, catalog: Tuple[RuleGroup, ...] = RULE_CATALOG):
        self.config = config or load_repair_config_from_env()
        self.catalog = catalog
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def repair(self, text: str) -> RepairResult:
        """
        Repair ``text`` on a best-effort basis. Never raises.

        Returns:
            RepairResult with the repaired content; ``changed`` is True only
            when the content differs from the input
        """
        try:
            return self._repair(text)
        except Exception as e:
            self.logger.warning(f"JSON repair skipped after internal error: {type(e).__name__}: {e}")
            return RepairResult.unchanged(
                text,
                diagnostics=(f"Repair skipped after internal error: {type(e).__name__}: {e}",),
            )

    def _repair(self, text: str) -> RepairResult:
        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")

        if self.config.preflight_enabled and not should_repair(text, self.config):
            self.logger.debug("Input already parses cleanly; repair skipped")
            return RepairResult.unchanged(text)

        recorder = DiagnosticsRecorder(self.config.max_diagnostics)
        cache = ContextCache()

        # Whole-catalog passes until a fixed point, so repairing the output
        # again finds nothing left to do
        repaired = text
        for round_number in range(1, self.config.max_passes + 1):
            start = repaired
            repaired = reduce(
                lambda current, group: apply_group(group, current, recorder, self.config, cache),
                self.catalog,
                repaired,
            )
            if repaired == start:
                break
            self.logger.debug(f"Catalog pass {round_number} rewrote the buffer ({len(start)} -> {len(repaired)} chars)")

        changed = repaired != text
        if not changed:
            return RepairResult.unchanged(text)

        if self.config.log_diagnostics:
            self.logger.info(
                f"Repaired LLM output: {recorder.fix_count} fix(es), "
                f"{recorder.dropped_count} past the diagnostics cap"
            )

        return RepairResult(
            content=repaired,
            changed=True,
            diagnostics=recorder.messages(),
            records=recorder.records(),
        )


_default_engine: Optional[RepairEngine] = None


def get_repair_engine() -> RepairEngine:
    """Shared engine built from environment configuration"""
    global _default_engine
    if _default_engine is None:
        _default_engine = RepairEngine()
    return _default_engine


def repair_json(text: str, config: Optional[RepairConfig] = None) -> RepairResult:
    """
    Repair raw LLM output with the default catalog.

    Args:
        text: Raw LLM response text
        config: Optional configuration; environment configuration when None

    Returns:
        RepairResult
    """
    if not settings.repair_enabled:
        return RepairResult.unchanged(text)
    engine = RepairEngine(config) if config is not None else get_repair_engine()
    return engine.repair(text)
