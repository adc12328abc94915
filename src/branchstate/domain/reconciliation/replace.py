"""Expansion of "replace" intents into one removal plus one addition.

A replace is sugar: once expanded, its halves travel through the ordinary
normalization, ID validation and evidence stages. A replace missing either half
is reported as ``MALFORMED_REPLACE_PAYLOAD`` and neither half is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from branchstate.domain.model import CharacterStateAdd, DiagnosticCode, ThreadAdd

from .normalize import normalize_id, normalize_intent_text, normalize_states

if TYPE_CHECKING:
    from collections.abc import Sequence

    from branchstate.domain.model import (
        CharacterStateIntentReplace,
        TextIntentReplace,
        ThreadIntentReplace,
    )

    from .contracts import DiagnosticLog


@dataclass(frozen=True, slots=True)
class ReplaceExpansion[TAdd]:
    """Well-formed replace halves, in replace order."""

    add: tuple[TAdd, ...] = ()
    remove_ids: tuple[str, ...] = ()


def _report_malformed(field_prefix: str, index: int, diagnostics: DiagnosticLog) -> None:
    field = f"{field_prefix}.replace[{index}]"
    diagnostics.emit(
        DiagnosticCode.MALFORMED_REPLACE_PAYLOAD,
        field=field,
        message=f"Malformed replace payload at {field}.",
    )


def expand_text_replacements(
    replacements: Sequence[TextIntentReplace],
    *,
    field_prefix: str,
    diagnostics: DiagnosticLog,
) -> ReplaceExpansion[str]:
    add: list[str] = []
    remove_ids: list[str] = []
    for index, entry in enumerate(replacements):
        remove_id = normalize_id(entry.remove_id)
        add_text = normalize_intent_text(entry.add_text)
        if not remove_id or not add_text:
            _report_malformed(field_prefix, index, diagnostics)
            continue
        remove_ids.append(remove_id)
        add.append(add_text)
    return ReplaceExpansion(add=tuple(add), remove_ids=tuple(remove_ids))


def expand_thread_replacements(
    replacements: Sequence[ThreadIntentReplace],
    *,
    diagnostics: DiagnosticLog,
) -> ReplaceExpansion[ThreadAdd]:
    add: list[ThreadAdd] = []
    resolve_ids: list[str] = []
    for index, entry in enumerate(replacements):
        resolve_id = normalize_id(entry.resolve_id)
        text = normalize_intent_text(entry.add.text) if entry.add is not None else ""
        if not resolve_id or entry.add is None or not text:
            _report_malformed("stateIntents.threads", index, diagnostics)
            continue
        resolve_ids.append(resolve_id)
        add.append(
            ThreadAdd(text=text, thread_type=entry.add.thread_type, urgency=entry.add.urgency)
        )
    return ReplaceExpansion(add=tuple(add), remove_ids=tuple(resolve_ids))


def expand_character_state_replacements(
    replacements: Sequence[CharacterStateIntentReplace],
    *,
    diagnostics: DiagnosticLog,
) -> ReplaceExpansion[CharacterStateAdd]:
    add: list[CharacterStateAdd] = []
    remove_ids: list[str] = []
    for index, entry in enumerate(replacements):
        remove_id = normalize_id(entry.remove_id)
        character_name = ""
        states: list[str] = []
        if entry.add is not None:
            character_name = normalize_intent_text(entry.add.character_name)
            states = normalize_states(entry.add.states)
        if not remove_id or not character_name or not states:
            _report_malformed("stateIntents.characterState", index, diagnostics)
            continue
        remove_ids.append(remove_id)
        add.append(CharacterStateAdd(character_name=character_name, states=tuple(states)))
    return ReplaceExpansion(add=tuple(add), remove_ids=tuple(remove_ids))
