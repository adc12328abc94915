"""Cross-reference validation for remove/resolve IDs.

Each removable category is validated against its own ID namespace only. An ID that
belongs to another category (for example a thread ID submitted as a threat
removal) is reported as unknown like any other stranger; repairing misplaced IDs
is not this stage's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from branchstate.domain.model import DiagnosticCode

from .normalize import normalize_id_list

if TYPE_CHECKING:
    from collections.abc import Iterable, Set

    from .contracts import DiagnosticLog


@dataclass(frozen=True, slots=True)
class IdPartition:
    valid: tuple[str, ...]
    invalid: tuple[str, ...]


def partition_ids(candidates: Iterable[object], known_ids: Set[str]) -> IdPartition:
    """Split candidate IDs into known and unknown, keeping plan order."""

    valid: list[str] = []
    invalid: list[str] = []
    for state_id in normalize_id_list(candidates):
        (valid if state_id in known_ids else invalid).append(state_id)
    return IdPartition(valid=tuple(valid), invalid=tuple(invalid))


def validate_remove_ids(
    candidates: Iterable[object],
    known_ids: Set[str],
    *,
    field: str,
    diagnostics: DiagnosticLog,
) -> tuple[str, ...]:
    """Return the known IDs; report one ``UNKNOWN_STATE_ID`` per unknown ID."""

    partition = partition_ids(candidates, known_ids)
    for state_id in partition.invalid:
        diagnostics.emit(
            DiagnosticCode.UNKNOWN_STATE_ID,
            field=field,
            message=f'Unknown state ID "{state_id}" in {field}.',
        )
    return partition.valid
