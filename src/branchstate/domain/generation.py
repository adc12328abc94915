"""Planner -> writer -> reconciler loop with one bounded retry budget.

The planner and writer are caller-supplied callables; this module only sequences
them, times each stage and feeds reconciliation diagnostics back as failure
reasons. An attempt succeeds only when reconciliation reports no diagnostics.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from branchstate.config.generation import get_generation_config
from branchstate.domain.reconciliation import reconcile

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from branchstate.config.generation import GenerationConfig
    from branchstate.domain.model import DiagnosticCode, PagePlan, PreviousState, WriterOutput
    from branchstate.domain.reconciliation import (
        Diagnostic,
        DiagnosticSink,
        ReconciliationResult,
    )

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationFailureReason:
    """Diagnostic condensed for the next planner/writer attempt."""

    code: DiagnosticCode
    field: str
    message: str

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> ReconciliationFailureReason:
        return cls(code=diagnostic.code, field=diagnostic.field, message=diagnostic.message)


class PlanPage(Protocol):
    def __call__(self, failure_reasons: Sequence[ReconciliationFailureReason]) -> PagePlan: ...


class WritePage(Protocol):
    def __call__(
        self,
        plan: PagePlan,
        failure_reasons: Sequence[ReconciliationFailureReason],
    ) -> WriterOutput: ...


class StateReconciliationError(RuntimeError):
    """Raised when every attempt still produced reconciliation diagnostics."""

    code = "RECONCILIATION_FAILED"

    def __init__(self, message: str, *, diagnostics: Sequence[Diagnostic] = ()) -> None:
        super().__init__(message)
        self.diagnostics = tuple(diagnostics)


@dataclass(slots=True)
class GenerationMetrics:
    """Accumulated stage timings and retry bookkeeping, in milliseconds."""

    planner_duration_ms: float = 0.0
    writer_duration_ms: float = 0.0
    reconciler_duration_ms: float = 0.0
    reconciler_issue_count: int = 0
    reconciler_retried: bool = False
    attempts: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class GenerationOutcome:
    plan: PagePlan
    writer_output: WriterOutput
    reconciliation: ReconciliationResult
    metrics: GenerationMetrics


def _timed[T](call: Callable[[], T]) -> tuple[T, float]:
    started = time.perf_counter()
    value = call()
    return value, (time.perf_counter() - started) * 1000


def generate_with_reconciliation_retry(
    plan_page: PlanPage,
    write_page: WritePage,
    previous_state: PreviousState,
    *,
    config: GenerationConfig | None = None,
    sink: DiagnosticSink | None = None,
) -> GenerationOutcome:
    """Run planner, writer and reconciliation until a clean result or the budget runs out."""

    resolved_config = config if config is not None else get_generation_config()
    metrics = GenerationMetrics()
    failure_reasons: tuple[ReconciliationFailureReason, ...] = ()
    last_result: ReconciliationResult | None = None

    for attempt in range(1, resolved_config.max_attempts + 1):
        metrics.attempts = attempt
        log.info("Generation attempt %s/%s started", attempt, resolved_config.max_attempts)

        try:
            plan, duration = _timed(lambda: plan_page(failure_reasons))
        except Exception:
            log.exception("Planner stage failed on attempt %s", attempt)
            raise
        metrics.planner_duration_ms += duration

        try:
            writer_output, duration = _timed(lambda: write_page(plan, failure_reasons))
        except Exception:
            log.exception("Writer stage failed on attempt %s", attempt)
            raise
        metrics.writer_duration_ms += duration

        result, duration = _timed(
            lambda: reconcile(plan, writer_output, previous_state, sink=sink)
        )
        metrics.reconciler_duration_ms += duration

        if not result.has_diagnostics:
            log.info(
                "Generation completed after %s attempt(s): planner=%.1fms writer=%.1fms "
                "reconciler=%.1fms",
                attempt,
                metrics.planner_duration_ms,
                metrics.writer_duration_ms,
                metrics.reconciler_duration_ms,
            )
            return GenerationOutcome(
                plan=plan,
                writer_output=writer_output,
                reconciliation=result,
                metrics=metrics,
            )

        last_result = result
        metrics.reconciler_issue_count += len(result.reconciliation_diagnostics)
        metrics.reconciler_retried = True
        failure_reasons = tuple(
            ReconciliationFailureReason.from_diagnostic(diagnostic)
            for diagnostic in result.reconciliation_diagnostics
        )
        log.warning(
            "State reconciliation reported %s diagnostic(s) on attempt %s",
            len(failure_reasons),
            attempt,
        )

    diagnostics = last_result.reconciliation_diagnostics if last_result is not None else ()
    log.error(
        "Generation failed after %s attempt(s) with %s reconciliation issue(s)",
        metrics.attempts,
        metrics.reconciler_issue_count,
    )
    raise StateReconciliationError(
        "State reconciliation failed after retry",
        diagnostics=diagnostics,
    )
