"""Text normalization stage for reconciliation.

Responsibilities of this stage:
- trim and collapse whitespace in free-text intents
- derive case-folded comparison keys
- drop empty entries and collapse duplicates to the first occurrence
- avoid any lookup against the previous state

Non-string values (``None``, numbers, nested junk) normalize to the empty string
and are filtered like blank text.
"""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING

from branchstate.domain.model import CharacterStateAdd, ThreadAdd

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable


_NON_WORD = re.compile(r"[\W_]+")


def normalize_intent_text(value: object) -> str:
    """Trim and collapse internal whitespace; non-strings become ``""``."""

    if not isinstance(value, str):
        return ""
    return " ".join(value.split())


def comparison_key(value: object) -> str:
    """Case-folded key used for duplicate checks."""

    return normalize_intent_text(value).casefold()


def normalize_id(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def normalize_evidence_text(value: object) -> str:
    """Lowercase word stream with punctuation and hyphens turned into spaces.

    ``"IRON-GATE breach kit"`` becomes ``"iron gate breach kit"``.
    """

    if not isinstance(value, str):
        return ""
    text = unicodedata.normalize("NFKC", value).casefold()
    return " ".join(_NON_WORD.sub(" ", text).split())


def dedupe_by_key[T](values: Iterable[T], key: Callable[[T], Hashable]) -> list[T]:
    """Drop values with an empty or already-seen key, preserving first-seen order."""

    seen: set[Hashable] = set()
    result: list[T] = []
    for value in values:
        value_key = key(value)
        if not value_key or value_key in seen:
            continue
        seen.add(value_key)
        result.append(value)
    return result


def normalize_text_intents(values: Iterable[object]) -> list[str]:
    """Normalize one category's additions and collapse case-insensitive duplicates."""

    normalized = (normalize_intent_text(value) for value in values)
    return dedupe_by_key((value for value in normalized if value), comparison_key)


def normalize_id_list(values: Iterable[object]) -> list[str]:
    normalized = (normalize_id(value) for value in values)
    return dedupe_by_key((value for value in normalized if value), lambda value: value)


def normalize_thread_adds(additions: Iterable[ThreadAdd]) -> list[ThreadAdd]:
    """Normalize thread text and drop exact repeats of text, type and urgency.

    A thread is identified by its text together with its ``thread_type``: the same
    wording filed as a QUEST and as a MYSTERY is two distinct threads and both may
    reach ``threads_added``. Same-type repeats that differ only in urgency are left
    for the similarity filter, which rejects them as near duplicates.
    """

    normalized = (
        ThreadAdd(
            text=normalize_intent_text(addition.text),
            thread_type=addition.thread_type,
            urgency=addition.urgency,
        )
        for addition in additions
    )
    return dedupe_by_key(
        (addition for addition in normalized if addition.text),
        lambda addition: (comparison_key(addition.text), addition.thread_type, addition.urgency),
    )


def normalize_states(states: Iterable[object]) -> list[str]:
    return normalize_text_intents(states)


def normalize_character_state_adds(
    additions: Iterable[CharacterStateAdd],
) -> list[CharacterStateAdd]:
    """Group state additions per character, keeping the first-seen name casing.

    Characters without any surviving state are omitted.
    """

    names: dict[str, str] = {}
    states_by_character: dict[str, list[str]] = {}

    for addition in additions:
        character_name = normalize_intent_text(addition.character_name)
        if not character_name:
            continue
        character_key = comparison_key(character_name)
        existing = states_by_character.get(character_key, [])
        merged = dedupe_by_key([*existing, *normalize_states(addition.states)], comparison_key)
        if not merged:
            continue
        names.setdefault(character_key, character_name)
        states_by_character[character_key] = merged

    return [
        CharacterStateAdd(character_name=names[key], states=tuple(states))
        for key, states in states_by_character.items()
    ]
