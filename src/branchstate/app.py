"""Application orchestration entry points."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, cast

from branchstate.adapters.payloads import (
    parse_page_plan,
    parse_previous_state,
    parse_writer_output,
)
from branchstate.domain.reconciliation import (
    LoggingDiagnosticSink,
    apply_reconciliation,
    reconcile,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from branchstate.domain.model import PreviousState
    from branchstate.domain.reconciliation import ReconciliationResult


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AdvanceResult:
    reconciliation: ReconciliationResult
    next_state: PreviousState


def _load_json(path: Path) -> Mapping[str, object]:
    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object in {path}")  # noqa: TRY004
    return cast(dict[str, object], payload)


def reconcile_page_files(
    plan_path: Path,
    writer_path: Path,
    state_path: Path,
) -> ReconciliationResult:
    """Reconcile a planner/writer pair stored as JSON against a stored state."""

    log.info(
        "Starting reconciliation: plan=%s, writer=%s, state=%s",
        plan_path,
        writer_path,
        state_path,
    )
    plan = parse_page_plan(_load_json(plan_path))
    writer_output = parse_writer_output(_load_json(writer_path))
    previous_state = parse_previous_state(_load_json(state_path))

    result = reconcile(plan, writer_output, previous_state, sink=LoggingDiagnosticSink(log))

    log.info(
        "Finished reconciliation: location=%r, threats=+%s/-%s, constraints=+%s/-%s, "
        "threads=+%s/-%s, inventory=+%s/-%s, health=+%s/-%s, diagnostics=%s",
        result.current_location,
        len(result.threats_added),
        len(result.threats_removed),
        len(result.constraints_added),
        len(result.constraints_removed),
        len(result.threads_added),
        len(result.threads_resolved),
        len(result.inventory_added),
        len(result.inventory_removed),
        len(result.health_added),
        len(result.health_removed),
        len(result.reconciliation_diagnostics),
    )
    return result


def advance_page_files(
    plan_path: Path,
    writer_path: Path,
    state_path: Path,
) -> AdvanceResult:
    """Reconcile stored payloads and build the child state snapshot."""

    result = reconcile_page_files(plan_path, writer_path, state_path)
    previous_state = parse_previous_state(_load_json(state_path))
    next_state = apply_reconciliation(previous_state, result)
    log.info(
        "Advanced state: threats=%s, threads=%s, inventory=%s, canon_facts=%s",
        len(next_state.threats),
        len(next_state.threads),
        len(next_state.inventory),
        len(next_state.canon_facts),
    )
    return AdvanceResult(reconciliation=result, next_state=next_state)
