"""Translate JSON payloads into domain objects and results back into JSON."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from branchstate.domain.model import (
    CanonIntents,
    CharacterCanonAdd,
    CharacterStateAdd,
    CharacterStateIntentReplace,
    CharacterStateIntents,
    KeyedEntry,
    PagePlan,
    PreviousState,
    StateIntents,
    TextIntentReplace,
    TextIntents,
    ThreadAdd,
    ThreadEntry,
    ThreadIntentReplace,
    ThreadIntents,
    WriterOutput,
)

from .schema import (
    CharacterStateAddOutput,
    CharacterStateAddPayload,
    DiagnosticOutput,
    KeyedEntryPayload,
    PagePlanPayload,
    PreviousStatePayload,
    ReconciliationResultOutput,
    TextIntentsPayload,
    ThreadAddOutput,
    ThreadAddPayload,
    ThreadEntryPayload,
    WriterOutputPayload,
)

if TYPE_CHECKING:
    from branchstate.domain.reconciliation import ReconciliationResult

    from .schema import PayloadInput

log = getLogger(__name__)


class PayloadValidationError(ValueError):
    """Raised when a payload does not match its schema."""

    def __init__(self, payload_name: str, error: ValidationError) -> None:
        self.payload_name = payload_name
        self.errors = error.errors()
        super().__init__(f"Invalid {payload_name} payload: {error}")


def _validate[TModel: BaseModel](
    model: type[TModel],
    payload: PayloadInput[TModel],
    payload_name: str,
) -> TModel:
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        log.warning("Rejected %s payload with %s error(s)", payload_name, exc.error_count())
        raise PayloadValidationError(payload_name, exc) from exc


# Inbound


def _text_intents(payload: TextIntentsPayload) -> TextIntents:
    return TextIntents(
        add=tuple(payload.add),
        remove_ids=tuple(payload.remove_ids),
        replace=tuple(
            TextIntentReplace(remove_id=entry.remove_id, add_text=entry.add_text)
            for entry in payload.replace
        ),
    )


def _thread_add(payload: ThreadAddPayload) -> ThreadAdd:
    text = payload.text if isinstance(payload.text, str) else ""
    return ThreadAdd(text=text, thread_type=payload.thread_type, urgency=payload.urgency)


def _character_state_add(payload: CharacterStateAddPayload) -> CharacterStateAdd:
    return CharacterStateAdd(character_name=payload.character_name, states=tuple(payload.states))


def parse_page_plan(payload: PayloadInput[PagePlanPayload]) -> PagePlan:
    validated = _validate(PagePlanPayload, payload, "page plan")
    intents = validated.state_intents
    return PagePlan(
        scene_intent=validated.scene_intent,
        state_intents=StateIntents(
            current_location=intents.current_location,
            threats=_text_intents(intents.threats),
            constraints=_text_intents(intents.constraints),
            threads=ThreadIntents(
                add=tuple(_thread_add(entry) for entry in intents.threads.add),
                resolve_ids=tuple(intents.threads.resolve_ids),
                replace=tuple(
                    ThreadIntentReplace(
                        resolve_id=entry.resolve_id,
                        add=_thread_add(entry.add) if entry.add is not None else None,
                    )
                    for entry in intents.threads.replace
                ),
            ),
            inventory=_text_intents(intents.inventory),
            health=_text_intents(intents.health),
            character_state=CharacterStateIntents(
                add=tuple(_character_state_add(entry) for entry in intents.character_state.add),
                remove_ids=tuple(intents.character_state.remove_ids),
                replace=tuple(
                    CharacterStateIntentReplace(
                        remove_id=entry.remove_id,
                        add=_character_state_add(entry.add) if entry.add is not None else None,
                    )
                    for entry in intents.character_state.replace
                ),
            ),
            canon=CanonIntents(
                world_add=tuple(intents.canon.world_add),
                character_add=tuple(
                    CharacterCanonAdd(character_name=entry.character_name, facts=tuple(entry.facts))
                    for entry in intents.canon.character_add
                ),
            ),
        ),
    )


def parse_writer_output(payload: PayloadInput[WriterOutputPayload]) -> WriterOutput:
    validated = _validate(WriterOutputPayload, payload, "writer output")
    return WriterOutput(narrative=validated.narrative, scene_summary=validated.scene_summary)


def _keyed_entries(entries: list[KeyedEntryPayload]) -> tuple[KeyedEntry, ...]:
    return tuple(KeyedEntry(id=entry.id, text=entry.text) for entry in entries)


def _thread_entries(entries: list[ThreadEntryPayload]) -> tuple[ThreadEntry, ...]:
    return tuple(
        ThreadEntry(
            id=entry.id,
            text=entry.text,
            thread_type=entry.thread_type,
            urgency=entry.urgency,
        )
        for entry in entries
    )


def parse_previous_state(payload: PayloadInput[PreviousStatePayload]) -> PreviousState:
    validated = _validate(PreviousStatePayload, payload, "previous state")
    return PreviousState(
        current_location=validated.current_location,
        threats=_keyed_entries(validated.threats),
        constraints=_keyed_entries(validated.constraints),
        threads=_thread_entries(validated.threads),
        inventory=_keyed_entries(validated.inventory),
        health=_keyed_entries(validated.health),
        character_state=_keyed_entries(validated.character_state),
        canon_facts=tuple(validated.canon_facts),
        character_canon_facts={
            name: tuple(facts) for name, facts in validated.character_canon_facts.items()
        },
    )


# Outbound


def serialize_result(result: ReconciliationResult) -> dict[str, object]:
    """Return the camelCase JSON form of ``result``; diagnostics omit a missing anchor."""

    output = ReconciliationResultOutput(
        current_location=result.current_location,
        threats_added=list(result.threats_added),
        threats_removed=list(result.threats_removed),
        constraints_added=list(result.constraints_added),
        constraints_removed=list(result.constraints_removed),
        threads_added=[
            ThreadAddOutput(text=thread.text, thread_type=thread.thread_type, urgency=thread.urgency)
            for thread in result.threads_added
        ],
        threads_resolved=list(result.threads_resolved),
        inventory_added=list(result.inventory_added),
        inventory_removed=list(result.inventory_removed),
        health_added=list(result.health_added),
        health_removed=list(result.health_removed),
        character_state_changes_added=[
            CharacterStateAddOutput(
                character_name=str(change.character_name),
                states=[str(state) for state in change.states],
            )
            for change in result.character_state_changes_added
        ],
        character_state_changes_removed=list(result.character_state_changes_removed),
        new_canon_facts=list(result.new_canon_facts),
        new_character_canon_facts={
            name: list(facts) for name, facts in result.new_character_canon_facts.items()
        },
        reconciliation_diagnostics=[
            DiagnosticOutput(
                code=diagnostic.code,
                field=diagnostic.field,
                message=diagnostic.message,
                anchor=diagnostic.anchor,
            )
            for diagnostic in result.reconciliation_diagnostics
        ],
    )
    return output.model_dump(mode="json", by_alias=True, exclude_none=True)


def serialize_state(state: PreviousState) -> dict[str, object]:
    payload = PreviousStatePayload(
        current_location=state.current_location,
        threats=[KeyedEntryPayload(id=entry.id, text=entry.text) for entry in state.threats],
        constraints=[
            KeyedEntryPayload(id=entry.id, text=entry.text) for entry in state.constraints
        ],
        threads=[
            ThreadEntryPayload(
                id=entry.id,
                text=entry.text,
                thread_type=entry.thread_type,
                urgency=entry.urgency,
            )
            for entry in state.threads
        ],
        inventory=[KeyedEntryPayload(id=entry.id, text=entry.text) for entry in state.inventory],
        health=[KeyedEntryPayload(id=entry.id, text=entry.text) for entry in state.health],
        character_state=[
            KeyedEntryPayload(id=entry.id, text=entry.text) for entry in state.character_state
        ],
        canon_facts=list(state.canon_facts),
        character_canon_facts={
            name: list(facts) for name, facts in state.character_canon_facts.items()
        },
    )
    return payload.model_dump(mode="json", by_alias=True)
