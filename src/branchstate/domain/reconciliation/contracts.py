"""Shared reconciliation contract components.

This module intentionally holds only:
- the diagnostic record and the sink protocol used to observe it
- the result dataclass handed to the page builder
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from branchstate.domain.model import CharacterStateAdd, DiagnosticCode, ThreadAdd


@dataclass(frozen=True, slots=True, kw_only=True)
class Diagnostic:
    """Machine-readable observation about one dropped or ignored intent."""

    code: DiagnosticCode
    field: str
    message: str
    anchor: str | None = None


class DiagnosticSink(Protocol):
    """Receives each diagnostic as it is emitted."""

    def __call__(self, diagnostic: Diagnostic) -> None: ...


@dataclass(slots=True)
class LoggingDiagnosticSink:
    """Forward diagnostics to a caller-provided logger."""

    logger: logging.Logger
    level: int = logging.WARNING

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.logger.log(
            self.level,
            "Reconciliation diagnostic code=%s field=%s: %s",
            diagnostic.code,
            diagnostic.field,
            diagnostic.message,
        )


@dataclass(slots=True)
class DiagnosticLog:
    """Append-only, order-preserving diagnostic buffer for one reconciliation call."""

    sink: DiagnosticSink | None = None
    _entries: list[Diagnostic] = field(default_factory=list["Diagnostic"], repr=False)

    def emit(
        self,
        code: DiagnosticCode,
        *,
        field: str,
        message: str,
        anchor: str | None = None,
    ) -> None:
        diagnostic = Diagnostic(code=code, field=field, message=message, anchor=anchor)
        self._entries.append(diagnostic)
        if self.sink is not None:
            self.sink(diagnostic)

    @property
    def entries(self) -> tuple[Diagnostic, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationResult:
    """Validated delta for one page plus the diagnostics explaining every drop.

    Removed/resolved entries are bare IDs taken from the previous state; added
    entries are normalized, ID-less text or typed objects.
    """

    current_location: str
    threats_added: tuple[str, ...] = ()
    threats_removed: tuple[str, ...] = ()
    constraints_added: tuple[str, ...] = ()
    constraints_removed: tuple[str, ...] = ()
    threads_added: tuple[ThreadAdd, ...] = ()
    threads_resolved: tuple[str, ...] = ()
    inventory_added: tuple[str, ...] = ()
    inventory_removed: tuple[str, ...] = ()
    health_added: tuple[str, ...] = ()
    health_removed: tuple[str, ...] = ()
    character_state_changes_added: tuple[CharacterStateAdd, ...] = ()
    character_state_changes_removed: tuple[str, ...] = ()
    new_canon_facts: tuple[str, ...] = ()
    new_character_canon_facts: dict[str, tuple[str, ...]] = field(
        default_factory=dict["str", "tuple[str, ...]"]
    )
    reconciliation_diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def has_diagnostics(self) -> bool:
        return bool(self.reconciliation_diagnostics)
