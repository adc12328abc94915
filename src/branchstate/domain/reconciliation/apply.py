"""Page builder: materialize the next state snapshot from a reconciliation result.

Responsibilities of this stage:
- drop removed/resolved entries by ID
- append additions under freshly allocated, category-prefixed IDs
- merge canon facts into the snapshot's canon
- never mutate the parent snapshot

ID allocation continues from the highest number already present in a category, so
``th-3`` followed by one new threat yields ``th-4`` even when ``th-1`` was removed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from branchstate.domain.model import (
    STATE_ID_PREFIXES,
    KeyedEntry,
    PreviousState,
    StateCategory,
    ThreadEntry,
)

from .normalize import comparison_key

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from branchstate.domain.model import CharacterStateAdd, ThreadAdd

    from .contracts import ReconciliationResult

log = logging.getLogger(__name__)


class MalformedStateIdError(ValueError):
    """Raised when a persisted ID does not follow ``<prefix><number>``."""

    def __init__(self, state_id: str, category: StateCategory) -> None:
        self.state_id = state_id
        self.category = category
        super().__init__(
            f'State ID "{state_id}" in {category} does not match '
            f'"{STATE_ID_PREFIXES[category]}<number>"'
        )


@dataclass(slots=True)
class _IdAllocator:
    prefix: str
    next_number: int

    def allocate(self) -> str:
        state_id = f"{self.prefix}{self.next_number}"
        self.next_number += 1
        return state_id


def _allocator_for(category: StateCategory, entries: Iterable[KeyedEntry]) -> _IdAllocator:
    prefix = STATE_ID_PREFIXES[category]
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for entry in entries:
        match = pattern.match(entry.id)
        if match is None:
            raise MalformedStateIdError(entry.id, category)
        highest = max(highest, int(match.group(1)))
    return _IdAllocator(prefix=prefix, next_number=highest + 1)


def _without_ids[TEntry: KeyedEntry](
    entries: Sequence[TEntry],
    removed_ids: Sequence[str],
    category: StateCategory,
) -> list[TEntry]:
    known_ids = {entry.id for entry in entries}
    for state_id in removed_ids:
        if state_id not in known_ids:
            log.warning("Removal of %s in %s matched no entry", state_id, category)
    removed = set(removed_ids)
    return [entry for entry in entries if entry.id not in removed]


def _next_text_entries(
    previous: PreviousState,
    category: StateCategory,
    *,
    added: Sequence[str],
    removed: Sequence[str],
) -> tuple[KeyedEntry, ...]:
    entries = previous.entries_for(category)
    allocator = _allocator_for(category, entries)
    kept = _without_ids(entries, removed, category)
    kept.extend(KeyedEntry(id=allocator.allocate(), text=text) for text in added)
    return tuple(kept)


def _next_threads(
    previous: PreviousState,
    *,
    added: Sequence[ThreadAdd],
    resolved: Sequence[str],
) -> tuple[ThreadEntry, ...]:
    allocator = _allocator_for(StateCategory.THREADS, previous.threads)
    kept = _without_ids(previous.threads, resolved, StateCategory.THREADS)
    kept.extend(
        ThreadEntry(
            id=allocator.allocate(),
            text=thread.text,
            thread_type=thread.thread_type,
            urgency=thread.urgency,
        )
        for thread in added
    )
    return tuple(kept)


def _next_character_state(
    previous: PreviousState,
    *,
    added: Sequence[CharacterStateAdd],
    removed: Sequence[str],
) -> tuple[KeyedEntry, ...]:
    category = StateCategory.CHARACTER_STATE
    allocator = _allocator_for(category, previous.character_state)
    kept = _without_ids(previous.character_state, removed, category)
    for change in added:
        kept.extend(
            KeyedEntry(id=allocator.allocate(), text=f"{change.character_name}: {state}")
            for state in change.states
        )
    return tuple(kept)


def merge_canon_facts(existing: Iterable[str], additions: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    merged: list[str] = []
    for fact in (*existing, *additions):
        key = comparison_key(fact)
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(fact)
    return tuple(merged)


def merge_character_canon_facts(
    existing: Mapping[str, Iterable[str]],
    additions: Mapping[str, Iterable[str]],
) -> dict[str, tuple[str, ...]]:
    """Merge per-character canon; names group case-insensitively, first casing wins."""

    names: dict[str, str] = {}
    facts: dict[str, tuple[str, ...]] = {}
    for source in (existing, additions):
        for name, character_facts in source.items():
            key = comparison_key(name)
            if not key:
                continue
            names.setdefault(key, name)
            facts[key] = merge_canon_facts(facts.get(key, ()), character_facts)
    return {names[key]: values for key, values in facts.items() if values}


def apply_reconciliation(previous: PreviousState, result: ReconciliationResult) -> PreviousState:
    """Build the child snapshot of ``previous`` after applying ``result``."""

    next_state = PreviousState(
        current_location=result.current_location,
        threats=_next_text_entries(
            previous,
            StateCategory.THREATS,
            added=result.threats_added,
            removed=result.threats_removed,
        ),
        constraints=_next_text_entries(
            previous,
            StateCategory.CONSTRAINTS,
            added=result.constraints_added,
            removed=result.constraints_removed,
        ),
        threads=_next_threads(
            previous,
            added=result.threads_added,
            resolved=result.threads_resolved,
        ),
        inventory=_next_text_entries(
            previous,
            StateCategory.INVENTORY,
            added=result.inventory_added,
            removed=result.inventory_removed,
        ),
        health=_next_text_entries(
            previous,
            StateCategory.HEALTH,
            added=result.health_added,
            removed=result.health_removed,
        ),
        character_state=_next_character_state(
            previous,
            added=result.character_state_changes_added,
            removed=result.character_state_changes_removed,
        ),
        canon_facts=merge_canon_facts(previous.canon_facts, result.new_canon_facts),
        character_canon_facts=merge_character_canon_facts(
            previous.character_canon_facts,
            result.new_character_canon_facts,
        ),
    )
    log.debug(
        "Applied reconciliation: threats=%s constraints=%s threads=%s inventory=%s "
        "health=%s character_state=%s",
        len(next_state.threats),
        len(next_state.constraints),
        len(next_state.threads),
        len(next_state.inventory),
        len(next_state.health),
        len(next_state.character_state),
    )
    return next_state
