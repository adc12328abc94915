"""Persisted active-state snapshot handed to reconciliation.

IDs are assigned by the persistence layer before a snapshot reaches the engine;
nothing in this module creates or rewrites them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import StateCategory, ThreadType, Urgency


@dataclass(frozen=True, slots=True, kw_only=True)
class KeyedEntry:
    """One addressable unit of threat/constraint/inventory/health/character state."""

    id: str
    text: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ThreadEntry(KeyedEntry):
    """Open narrative hook with its structural metadata."""

    thread_type: ThreadType
    urgency: Urgency


@dataclass(frozen=True, slots=True, kw_only=True)
class PreviousState:
    """Read-only snapshot of one story page's accumulated state."""

    current_location: str = ""
    threats: tuple[KeyedEntry, ...] = ()
    constraints: tuple[KeyedEntry, ...] = ()
    threads: tuple[ThreadEntry, ...] = ()
    inventory: tuple[KeyedEntry, ...] = ()
    health: tuple[KeyedEntry, ...] = ()
    character_state: tuple[KeyedEntry, ...] = ()
    canon_facts: tuple[str, ...] = ()
    character_canon_facts: dict[str, tuple[str, ...]] = field(
        default_factory=dict["str", "tuple[str, ...]"]
    )

    def entries_for(self, category: StateCategory) -> tuple[KeyedEntry, ...]:
        match category:
            case StateCategory.THREATS:
                return self.threats
            case StateCategory.CONSTRAINTS:
                return self.constraints
            case StateCategory.THREADS:
                return self.threads
            case StateCategory.INVENTORY:
                return self.inventory
            case StateCategory.HEALTH:
                return self.health
            case StateCategory.CHARACTER_STATE:
                return self.character_state

    def ids_for(self, category: StateCategory) -> frozenset[str]:
        return frozenset(entry.id for entry in self.entries_for(category))
