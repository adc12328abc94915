"""Canon fact deduplication for world-level and per-character facts.

A fact is rejected with ``DUPLICATE_CANON_FACT`` when its case-insensitive,
whitespace-collapsed form is already known for its scope (global canon, or that
character's canon) or appeared earlier in the same batch. Character names group
case-insensitively; the first-seen casing, preferring an already-known name, is the
output key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from branchstate.domain.model import DiagnosticCode

from .normalize import comparison_key, normalize_intent_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from branchstate.domain.model import CharacterCanonAdd

    from .contracts import DiagnosticLog


@dataclass(slots=True)
class _CharacterBucket:
    name: str
    seen: set[str]
    facts: list[str] = field(default_factory=list["str"])


def normalize_world_facts(
    values: Sequence[object],
    *,
    known_facts: Iterable[str] = (),
    diagnostics: DiagnosticLog,
) -> tuple[str, ...]:
    known = {comparison_key(fact) for fact in known_facts}
    seen: set[str] = set()
    result: list[str] = []

    for index, value in enumerate(values):
        normalized = normalize_intent_text(value)
        if not normalized:
            continue
        key = normalized.casefold()
        field_path = f"stateIntents.canon.worldAdd[{index}]"
        if key in known:
            diagnostics.emit(
                DiagnosticCode.DUPLICATE_CANON_FACT,
                field=field_path,
                message=f'Canon fact already established: "{normalized}".',
            )
            continue
        if key in seen:
            diagnostics.emit(
                DiagnosticCode.DUPLICATE_CANON_FACT,
                field=field_path,
                message=f'Duplicate canon fact after normalization: "{normalized}".',
            )
            continue
        seen.add(key)
        result.append(normalized)

    return tuple(result)


def normalize_character_facts(
    entries: Sequence[CharacterCanonAdd],
    *,
    known_facts: Mapping[str, Iterable[str]] | None = None,
    diagnostics: DiagnosticLog,
) -> dict[str, tuple[str, ...]]:
    """Return surviving facts keyed by character; characters left empty are omitted."""

    known_names: dict[str, str] = {}
    known_keys: dict[str, set[str]] = {}
    for name, facts in (known_facts or {}).items():
        name_key = comparison_key(name)
        if not name_key:
            continue
        known_names.setdefault(name_key, normalize_intent_text(name))
        known_keys.setdefault(name_key, set()).update(comparison_key(fact) for fact in facts)

    buckets: dict[str, _CharacterBucket] = {}
    for character_index, entry in enumerate(entries):
        character_name = normalize_intent_text(entry.character_name)
        if not character_name:
            continue
        name_key = character_name.casefold()
        bucket = buckets.get(name_key)
        if bucket is None:
            bucket = _CharacterBucket(
                name=known_names.get(name_key, character_name),
                seen=set(known_keys.get(name_key, ())),
            )
            buckets[name_key] = bucket
        known_for_character = known_keys.get(name_key, set())

        for fact_index, fact in enumerate(entry.facts):
            normalized = normalize_intent_text(fact)
            if not normalized:
                continue
            key = normalized.casefold()
            if key in bucket.seen:
                if key in known_for_character:
                    message = (
                        f'Canon fact for character "{bucket.name}" already established: '
                        f'"{normalized}".'
                    )
                else:
                    message = (
                        f'Duplicate canon fact for character "{bucket.name}" after '
                        f'normalization: "{normalized}".'
                    )
                diagnostics.emit(
                    DiagnosticCode.DUPLICATE_CANON_FACT,
                    field=f"stateIntents.canon.characterAdd[{character_index}].facts[{fact_index}]",
                    message=message,
                )
                continue
            bucket.seen.add(key)
            bucket.facts.append(normalized)

    return {bucket.name: tuple(bucket.facts) for bucket in buckets.values() if bucket.facts}
