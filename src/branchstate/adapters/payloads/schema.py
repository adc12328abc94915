"""Pydantic models describing planner, writer and state payloads.

Payloads use camelCase keys. Structural problems (wrong container types, unknown
thread types or urgencies, entries without IDs) fail validation here; blank or
junk entries inside string lists are passed through untouched so that the
reconciliation engine can filter them as empty.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import BaseModel, ConfigDict, Field, model_validator

from branchstate.domain.model import DiagnosticCode, ThreadType, Urgency


class PayloadBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_null_keys(cls, value: object) -> object:
        # null containers and scalars fall back to field defaults
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            return {key: item for key, item in mapping_value.items() if item is not None}
        return value


# Planner payloads


class TextReplacePayload(PayloadBaseModel):
    remove_id: Any = Field(default=None, alias="removeId")
    add_text: Any = Field(default=None, alias="addText")


class TextIntentsPayload(PayloadBaseModel):
    add: list[Any] = Field(default_factory=list)
    remove_ids: list[Any] = Field(default_factory=list, alias="removeIds")
    replace: list[TextReplacePayload] = Field(default_factory=list)


class ThreadAddPayload(PayloadBaseModel):
    text: Any = ""
    thread_type: ThreadType = Field(alias="threadType")
    urgency: Urgency


class ThreadReplacePayload(PayloadBaseModel):
    resolve_id: Any = Field(default=None, alias="resolveId")
    add: ThreadAddPayload | None = None


class ThreadIntentsPayload(PayloadBaseModel):
    add: list[ThreadAddPayload] = Field(default_factory=list)
    resolve_ids: list[Any] = Field(default_factory=list, alias="resolveIds")
    replace: list[ThreadReplacePayload] = Field(default_factory=list)


class CharacterStateAddPayload(PayloadBaseModel):
    character_name: Any = Field(default=None, alias="characterName")
    states: list[Any] = Field(default_factory=list)


class CharacterStateReplacePayload(PayloadBaseModel):
    remove_id: Any = Field(default=None, alias="removeId")
    add: CharacterStateAddPayload | None = None


class CharacterStateIntentsPayload(PayloadBaseModel):
    add: list[CharacterStateAddPayload] = Field(default_factory=list)
    remove_ids: list[Any] = Field(default_factory=list, alias="removeIds")
    replace: list[CharacterStateReplacePayload] = Field(default_factory=list)


class CharacterCanonAddPayload(PayloadBaseModel):
    character_name: Any = Field(default=None, alias="characterName")
    facts: list[Any] = Field(default_factory=list)


class CanonIntentsPayload(PayloadBaseModel):
    world_add: list[Any] = Field(default_factory=list, alias="worldAdd")
    character_add: list[CharacterCanonAddPayload] = Field(
        default_factory=list, alias="characterAdd"
    )


class StateIntentsPayload(PayloadBaseModel):
    current_location: Any = Field(default="", alias="currentLocation")
    threats: TextIntentsPayload = Field(default_factory=TextIntentsPayload)
    constraints: TextIntentsPayload = Field(default_factory=TextIntentsPayload)
    threads: ThreadIntentsPayload = Field(default_factory=ThreadIntentsPayload)
    inventory: TextIntentsPayload = Field(default_factory=TextIntentsPayload)
    health: TextIntentsPayload = Field(default_factory=TextIntentsPayload)
    character_state: CharacterStateIntentsPayload = Field(
        default_factory=CharacterStateIntentsPayload, alias="characterState"
    )
    canon: CanonIntentsPayload = Field(default_factory=CanonIntentsPayload)


class PagePlanPayload(PayloadBaseModel):
    state_intents: StateIntentsPayload = Field(
        default_factory=StateIntentsPayload, alias="stateIntents"
    )
    scene_intent: str = Field(default="", alias="sceneIntent")


# Writer payload


class WriterOutputPayload(PayloadBaseModel):
    narrative: str = ""
    scene_summary: str = Field(default="", alias="sceneSummary")


# Persisted state payloads


class KeyedEntryPayload(PayloadBaseModel):
    id: str
    text: str


class ThreadEntryPayload(KeyedEntryPayload):
    thread_type: ThreadType = Field(alias="threadType")
    urgency: Urgency


class PreviousStatePayload(PayloadBaseModel):
    current_location: str = Field(default="", alias="currentLocation")
    threats: list[KeyedEntryPayload] = Field(default_factory=list)
    constraints: list[KeyedEntryPayload] = Field(default_factory=list)
    threads: list[ThreadEntryPayload] = Field(default_factory=list)
    inventory: list[KeyedEntryPayload] = Field(default_factory=list)
    health: list[KeyedEntryPayload] = Field(default_factory=list)
    character_state: list[KeyedEntryPayload] = Field(
        default_factory=list, alias="characterState"
    )
    canon_facts: list[str] = Field(default_factory=list, alias="canonFacts")
    character_canon_facts: dict[str, list[str]] = Field(
        default_factory=dict, alias="characterCanonFacts"
    )


# Reconciliation output


class ThreadAddOutput(PayloadBaseModel):
    text: str
    thread_type: ThreadType = Field(alias="threadType")
    urgency: Urgency


class CharacterStateAddOutput(PayloadBaseModel):
    character_name: str = Field(alias="characterName")
    states: list[str]


class DiagnosticOutput(PayloadBaseModel):
    code: DiagnosticCode
    field: str
    message: str
    anchor: str | None = None


class ReconciliationResultOutput(PayloadBaseModel):
    current_location: str = Field(alias="currentLocation")
    threats_added: list[str] = Field(alias="threatsAdded")
    threats_removed: list[str] = Field(alias="threatsRemoved")
    constraints_added: list[str] = Field(alias="constraintsAdded")
    constraints_removed: list[str] = Field(alias="constraintsRemoved")
    threads_added: list[ThreadAddOutput] = Field(alias="threadsAdded")
    threads_resolved: list[str] = Field(alias="threadsResolved")
    inventory_added: list[str] = Field(alias="inventoryAdded")
    inventory_removed: list[str] = Field(alias="inventoryRemoved")
    health_added: list[str] = Field(alias="healthAdded")
    health_removed: list[str] = Field(alias="healthRemoved")
    character_state_changes_added: list[CharacterStateAddOutput] = Field(
        alias="characterStateChangesAdded"
    )
    character_state_changes_removed: list[str] = Field(alias="characterStateChangesRemoved")
    new_canon_facts: list[str] = Field(alias="newCanonFacts")
    new_character_canon_facts: dict[str, list[str]] = Field(alias="newCharacterCanonFacts")
    reconciliation_diagnostics: list[DiagnosticOutput] = Field(
        alias="reconciliationDiagnostics"
    )


type PayloadInput[TModel: BaseModel] = TModel | Mapping[str, object]
