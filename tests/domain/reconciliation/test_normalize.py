from __future__ import annotations

from branchstate.domain.model import CharacterStateAdd, ThreadType, Urgency
from branchstate.domain.reconciliation.normalize import (
    comparison_key,
    dedupe_by_key,
    normalize_character_state_adds,
    normalize_evidence_text,
    normalize_id_list,
    normalize_intent_text,
    normalize_text_intents,
    normalize_thread_adds,
)
from tests.support.builders import thread_add


def test_normalize_intent_text_collapses_whitespace() -> None:
    assert normalize_intent_text("  Patrol   pressure \t rising\n") == "Patrol pressure rising"


def test_normalize_intent_text_treats_non_strings_as_empty() -> None:
    assert normalize_intent_text(None) == ""
    assert normalize_intent_text(42) == ""
    assert normalize_intent_text(["nested"]) == ""


def test_comparison_key_is_case_insensitive() -> None:
    assert comparison_key("  Iron GATES ") == comparison_key("iron gates")


def test_normalize_text_intents_keeps_first_seen_casing() -> None:
    result = normalize_text_intents(
        ["  Patrol   pressure  rising  ", "patrol pressure rising", "", None, "   "]
    )

    assert result == ["Patrol pressure rising"]


def test_normalize_text_intents_preserves_plan_order() -> None:
    result = normalize_text_intents(["Rope", "lantern", "ROPE", "Chalk"])

    assert result == ["Rope", "lantern", "Chalk"]


def test_normalize_id_list_trims_and_dedupes() -> None:
    assert normalize_id_list([" th-1 ", "th-1", None, "", "th-2"]) == ["th-1", "th-2"]


def test_normalize_evidence_text_strips_punctuation_and_case() -> None:
    assert normalize_evidence_text("IRON-GATE breach kit!") == "iron gate breach kit"
    assert normalize_evidence_text("snake_case,  words") == "snake case words"
    assert normalize_evidence_text(None) == ""


def test_dedupe_by_key_skips_empty_keys() -> None:
    result = dedupe_by_key(["a", "", "b", "a"], lambda value: value)

    assert result == ["a", "b"]


def test_normalize_thread_adds_dedupes_on_text_type_and_urgency() -> None:
    result = normalize_thread_adds(
        [
            thread_add("  Find a   hidden route "),
            thread_add("find a hidden route"),
            thread_add("Find a hidden route", urgency=Urgency.LOW),
            thread_add("Find a hidden route", thread_type=ThreadType.MYSTERY),
            thread_add("   "),
        ]
    )

    assert result == [
        thread_add("Find a hidden route"),
        thread_add("Find a hidden route", urgency=Urgency.LOW),
        thread_add("Find a hidden route", thread_type=ThreadType.MYSTERY),
    ]


def test_normalize_character_state_adds_groups_by_character() -> None:
    result = normalize_character_state_adds(
        [
            CharacterStateAdd(character_name=" Mara ", states=("  Focused  under pressure  ",)),
            CharacterStateAdd(character_name="mara", states=("focused under pressure", "Limping")),
            CharacterStateAdd(character_name="Tomas", states=("   ", None)),
            CharacterStateAdd(character_name="   ", states=("Lost",)),
        ]
    )

    assert result == [
        CharacterStateAdd(character_name="Mara", states=("Focused under pressure", "Limping")),
    ]
