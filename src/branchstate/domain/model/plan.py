"""Planner and writer stage outputs as consumed by reconciliation.

Instances are built by adapters from already schema-validated payloads. String
sequences are typed loosely on purpose: the engine filters ``None`` and non-string
junk as "empty after normalization" instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import ThreadType, Urgency

type LooseText = str | None


@dataclass(frozen=True, slots=True, kw_only=True)
class TextIntentReplace:
    """Remove one entry and add its successor in a single instruction."""

    remove_id: LooseText = None
    add_text: LooseText = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TextIntents:
    """Mutations for threats, constraints, inventory and health."""

    add: tuple[LooseText, ...] = ()
    remove_ids: tuple[LooseText, ...] = ()
    replace: tuple[TextIntentReplace, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class ThreadAdd:
    text: str
    thread_type: ThreadType
    urgency: Urgency


@dataclass(frozen=True, slots=True, kw_only=True)
class ThreadIntentReplace:
    resolve_id: LooseText = None
    add: ThreadAdd | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ThreadIntents:
    add: tuple[ThreadAdd, ...] = ()
    resolve_ids: tuple[LooseText, ...] = ()
    replace: tuple[ThreadIntentReplace, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CharacterStateAdd:
    character_name: LooseText
    states: tuple[LooseText, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CharacterStateIntentReplace:
    remove_id: LooseText = None
    add: CharacterStateAdd | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class CharacterStateIntents:
    add: tuple[CharacterStateAdd, ...] = ()
    remove_ids: tuple[LooseText, ...] = ()
    replace: tuple[CharacterStateIntentReplace, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CharacterCanonAdd:
    character_name: LooseText
    facts: tuple[LooseText, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class CanonIntents:
    world_add: tuple[LooseText, ...] = ()
    character_add: tuple[CharacterCanonAdd, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class StateIntents:
    """Proposed mutations across every state category.

    An empty ``current_location`` means "no change".
    """

    current_location: LooseText = ""
    threats: TextIntents = field(default_factory=TextIntents)
    constraints: TextIntents = field(default_factory=TextIntents)
    threads: ThreadIntents = field(default_factory=ThreadIntents)
    inventory: TextIntents = field(default_factory=TextIntents)
    health: TextIntents = field(default_factory=TextIntents)
    character_state: CharacterStateIntents = field(default_factory=CharacterStateIntents)
    canon: CanonIntents = field(default_factory=CanonIntents)


@dataclass(frozen=True, slots=True, kw_only=True)
class PagePlan:
    """Scene planner output. Only ``state_intents`` feeds reconciliation."""

    state_intents: StateIntents = field(default_factory=StateIntents)
    scene_intent: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class WriterOutput:
    """Prose writer output used as narrative evidence."""

    narrative: str = ""
    scene_summary: str = ""
