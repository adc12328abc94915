"""Orchestrator for the state reconciliation subsystem.

``reconcile`` is a pure function of its inputs: it reads the page plan, the writer
output and the previous state, allocates fresh output structures and never mutates
anything it was given. Categories run in a fixed order (threats, constraints,
threads, inventory, health, character state, canon, location) and diagnostics are
concatenated in that same order, so identical inputs always yield identical,
directly comparable results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from branchstate.domain.model import StateCategory

from .canon import normalize_character_facts, normalize_world_facts
from .contracts import DiagnosticLog, ReconciliationResult
from .evidence import NarrativeEvidence, gate_additions
from .identifiers import validate_remove_ids
from .normalize import (
    normalize_character_state_adds,
    normalize_text_intents,
    normalize_thread_adds,
)
from .replace import (
    expand_character_state_replacements,
    expand_text_replacements,
    expand_thread_replacements,
)
from .threads import DEFAULT_THREAD_POLICY, filter_thread_adds

if TYPE_CHECKING:
    from branchstate.domain.model import (
        CharacterStateAdd,
        CharacterStateIntents,
        PagePlan,
        PreviousState,
        TextIntents,
        ThreadAdd,
        ThreadIntents,
        WriterOutput,
    )

    from .contracts import DiagnosticSink
    from .threads import ThreadDedupPolicy


@dataclass(frozen=True, slots=True)
class _OutputFields:
    added: str
    removed: str


_OUTPUT_FIELDS: Final[dict[StateCategory, _OutputFields]] = {
    StateCategory.THREATS: _OutputFields("threatsAdded", "threatsRemoved"),
    StateCategory.CONSTRAINTS: _OutputFields("constraintsAdded", "constraintsRemoved"),
    StateCategory.THREADS: _OutputFields("threadsAdded", "threadsResolved"),
    StateCategory.INVENTORY: _OutputFields("inventoryAdded", "inventoryRemoved"),
    StateCategory.HEALTH: _OutputFields("healthAdded", "healthRemoved"),
    StateCategory.CHARACTER_STATE: _OutputFields(
        "characterStateChangesAdded",
        "characterStateChangesRemoved",
    ),
}


@dataclass(frozen=True, slots=True)
class _CategoryDelta[TAdd]:
    added: tuple[TAdd, ...]
    removed: tuple[str, ...]


def _reconcile_text_category(
    intents: TextIntents,
    category: StateCategory,
    *,
    previous_state: PreviousState,
    evidence: NarrativeEvidence,
    diagnostics: DiagnosticLog,
) -> _CategoryDelta[str]:
    fields = _OUTPUT_FIELDS[category]
    expansion = expand_text_replacements(
        intents.replace,
        field_prefix=f"stateIntents.{category}",
        diagnostics=diagnostics,
    )
    removed = validate_remove_ids(
        [*intents.remove_ids, *expansion.remove_ids],
        previous_state.ids_for(category),
        field=fields.removed,
        diagnostics=diagnostics,
    )
    candidates = normalize_text_intents([*intents.add, *expansion.add])
    added = gate_additions(candidates, evidence, field=fields.added, diagnostics=diagnostics)
    return _CategoryDelta(added=added, removed=removed)


def _reconcile_threads(
    intents: ThreadIntents,
    *,
    previous_state: PreviousState,
    policy: ThreadDedupPolicy,
    diagnostics: DiagnosticLog,
) -> _CategoryDelta[ThreadAdd]:
    fields = _OUTPUT_FIELDS[StateCategory.THREADS]
    expansion = expand_thread_replacements(intents.replace, diagnostics=diagnostics)
    resolved = validate_remove_ids(
        [*intents.resolve_ids, *expansion.remove_ids],
        previous_state.ids_for(StateCategory.THREADS),
        field=fields.removed,
        diagnostics=diagnostics,
    )
    candidates = normalize_thread_adds([*intents.add, *expansion.add])
    added = filter_thread_adds(
        candidates,
        previous_state.threads,
        frozenset(resolved),
        policy=policy,
        diagnostics=diagnostics,
    )
    return _CategoryDelta(added=added, removed=resolved)


def _reconcile_character_state(
    intents: CharacterStateIntents,
    *,
    previous_state: PreviousState,
    diagnostics: DiagnosticLog,
) -> _CategoryDelta[CharacterStateAdd]:
    fields = _OUTPUT_FIELDS[StateCategory.CHARACTER_STATE]
    expansion = expand_character_state_replacements(intents.replace, diagnostics=diagnostics)
    removed = validate_remove_ids(
        [*intents.remove_ids, *expansion.remove_ids],
        previous_state.ids_for(StateCategory.CHARACTER_STATE),
        field=fields.removed,
        diagnostics=diagnostics,
    )
    added = normalize_character_state_adds([*intents.add, *expansion.add])
    return _CategoryDelta(added=tuple(added), removed=removed)


def _resolve_location(requested: object, previous_location: str) -> str:
    if isinstance(requested, str) and requested.strip():
        return requested.strip()
    return previous_location


def reconcile(
    plan: PagePlan,
    writer_output: WriterOutput,
    previous_state: PreviousState,
    *,
    sink: DiagnosticSink | None = None,
    thread_policy: ThreadDedupPolicy = DEFAULT_THREAD_POLICY,
) -> ReconciliationResult:
    """Validate ``plan``'s state intents against ``previous_state``.

    Every anomaly becomes a diagnostic plus a drop of the offending item; this
    function does not raise for malformed data inside a well-typed plan. ``sink``
    observes each diagnostic as it is emitted.
    """

    intents = plan.state_intents
    diagnostics = DiagnosticLog(sink=sink)
    evidence = NarrativeEvidence.from_writer_output(writer_output)

    def text_category(category_intents: TextIntents, category: StateCategory) -> _CategoryDelta[str]:
        return _reconcile_text_category(
            category_intents,
            category,
            previous_state=previous_state,
            evidence=evidence,
            diagnostics=diagnostics,
        )

    threats = text_category(intents.threats, StateCategory.THREATS)
    constraints = text_category(intents.constraints, StateCategory.CONSTRAINTS)
    threads = _reconcile_threads(
        intents.threads,
        previous_state=previous_state,
        policy=thread_policy,
        diagnostics=diagnostics,
    )
    inventory = text_category(intents.inventory, StateCategory.INVENTORY)
    health = text_category(intents.health, StateCategory.HEALTH)
    character_state = _reconcile_character_state(
        intents.character_state,
        previous_state=previous_state,
        diagnostics=diagnostics,
    )
    new_canon_facts = normalize_world_facts(
        intents.canon.world_add,
        known_facts=previous_state.canon_facts,
        diagnostics=diagnostics,
    )
    new_character_canon_facts = normalize_character_facts(
        intents.canon.character_add,
        known_facts=previous_state.character_canon_facts,
        diagnostics=diagnostics,
    )

    return ReconciliationResult(
        current_location=_resolve_location(
            intents.current_location, previous_state.current_location
        ),
        threats_added=threats.added,
        threats_removed=threats.removed,
        constraints_added=constraints.added,
        constraints_removed=constraints.removed,
        threads_added=threads.added,
        threads_resolved=threads.removed,
        inventory_added=inventory.added,
        inventory_removed=inventory.removed,
        health_added=health.added,
        health_removed=health.removed,
        character_state_changes_added=character_state.added,
        character_state_changes_removed=character_state.removed,
        new_canon_facts=new_canon_facts,
        new_character_canon_facts=new_character_canon_facts,
        reconciliation_diagnostics=diagnostics.entries,
    )
