"""State reconciliation between a page plan and the previous story state.

Layered flow, run per category in a fixed order:
1) expand replace intents into one removal plus one addition
2) validate removal/resolution IDs against the previous state
3) normalize and deduplicate additions
4) gate textual additions on narrative evidence
5) filter threads for immediate hazards and near-duplicates
6) deduplicate canon facts against known canon and the batch

``reconcile`` returns the validated delta; ``apply_reconciliation`` turns it into
the next snapshot.
"""

from __future__ import annotations

from .apply import MalformedStateIdError, apply_reconciliation
from .contracts import (
    Diagnostic,
    DiagnosticLog,
    DiagnosticSink,
    LoggingDiagnosticSink,
    ReconciliationResult,
)
from .engine import reconcile
from .threads import DEFAULT_THREAD_POLICY, ThreadDedupPolicy

__all__ = [
    "DEFAULT_THREAD_POLICY",
    "Diagnostic",
    "DiagnosticLog",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "MalformedStateIdError",
    "ReconciliationResult",
    "ThreadDedupPolicy",
    "apply_reconciliation",
    "reconcile",
]
