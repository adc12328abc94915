from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from branchstate.domain.model import DiagnosticCode, ThreadEntry, ThreadType, Urgency
from branchstate.domain.reconciliation.threads import (
    THREAD_JACCARD_THRESHOLDS,
    ThreadDedupPolicy,
    filter_thread_adds,
    is_immediate_hazard_text,
    jaccard_similarity,
    similarity_tokens,
)
from tests.support.builders import THRESHOLD_PREVIOUS_TOKENS, thread_add

if TYPE_CHECKING:
    from branchstate.domain.reconciliation import DiagnosticLog


def _thread(
    state_id: str,
    text: str,
    thread_type: ThreadType = ThreadType.QUEST,
) -> ThreadEntry:
    return ThreadEntry(id=state_id, text=text, thread_type=thread_type, urgency=Urgency.HIGH)


def test_similarity_tokens_drop_stop_phrases_and_short_tokens() -> None:
    tokens = similarity_tokens("Decode hidden ledger cipher at this point, currently! A")

    assert tokens == frozenset({"decode", "hidden", "ledger", "cipher"})


def test_jaccard_similarity_handles_empty_sets() -> None:
    assert jaccard_similarity(frozenset(), frozenset({"a"})) == 0.0
    assert jaccard_similarity(frozenset({"ab", "cd"}), frozenset({"ab"})) == 0.5


@pytest.mark.parametrize(
    ("thread_type", "below_overlap", "duplicate_overlap"),
    [
        (ThreadType.RELATIONSHIP, 6, 7),
        (ThreadType.MORAL, 6, 7),
        (ThreadType.MYSTERY, 7, 8),
        (ThreadType.INFORMATION, 7, 8),
        (ThreadType.QUEST, 7, 8),
        (ThreadType.RESOURCE, 7, 8),
        (ThreadType.DANGER, 7, 8),
    ],
)
def test_thread_threshold_boundaries(
    thread_type: ThreadType,
    below_overlap: int,
    duplicate_overlap: int,
    diagnostics: DiagnosticLog,
) -> None:
    previous = (_thread("td-threshold", " ".join(THRESHOLD_PREVIOUS_TOKENS), thread_type),)
    below_text = " ".join(THRESHOLD_PREVIOUS_TOKENS[:below_overlap])
    duplicate_text = " ".join(THRESHOLD_PREVIOUS_TOKENS[:duplicate_overlap])

    accepted = filter_thread_adds(
        [thread_add(below_text, thread_type)],
        previous,
        frozenset(),
        diagnostics=diagnostics,
    )
    assert accepted == (thread_add(below_text, thread_type),)
    assert len(diagnostics) == 0

    rejected = filter_thread_adds(
        [thread_add(duplicate_text, thread_type)],
        previous,
        frozenset(),
        diagnostics=diagnostics,
    )
    assert rejected == ()
    assert [entry.code for entry in diagnostics.entries] == [
        DiagnosticCode.THREAD_DUPLICATE_LIKE_ADD
    ]
    assert diagnostics.entries[0].message == (
        f'Thread add "{duplicate_text}" is near-duplicate of existing thread '
        f'"td-threshold" ("{" ".join(THRESHOLD_PREVIOUS_TOKENS)}").'
    )


def test_every_thread_type_has_a_threshold() -> None:
    assert set(THREAD_JACCARD_THRESHOLDS) == set(ThreadType)


def test_resolved_previous_thread_does_not_block_refinement(diagnostics: DiagnosticLog) -> None:
    previous = (_thread("td-1", "Reach the archive safely"),)

    blocked = filter_thread_adds(
        [thread_add("Safely reach the archive")],
        previous,
        frozenset(),
        diagnostics=diagnostics,
    )
    refined = filter_thread_adds(
        [thread_add("Safely reach the archive")],
        previous,
        frozenset({"td-1"}),
        diagnostics=diagnostics,
    )

    assert blocked == ()
    assert refined == (thread_add("Safely reach the archive"),)
    assert len(diagnostics) == 1


def test_similarity_is_scoped_to_thread_type(diagnostics: DiagnosticLog) -> None:
    previous = (_thread("td-1", "Reach the archive safely", ThreadType.QUEST),)

    accepted = filter_thread_adds(
        [thread_add("Safely reach the archive", ThreadType.MYSTERY)],
        previous,
        frozenset(),
        diagnostics=diagnostics,
    )

    assert accepted == (thread_add("Safely reach the archive", ThreadType.MYSTERY),)
    assert len(diagnostics) == 0


def test_within_batch_duplicates_keep_first(diagnostics: DiagnosticLog) -> None:
    accepted = filter_thread_adds(
        [
            thread_add("Decode the cipher ledger", ThreadType.INFORMATION, Urgency.MEDIUM),
            thread_add("Decode cipher ledger", ThreadType.INFORMATION, Urgency.MEDIUM),
        ],
        (),
        frozenset(),
        diagnostics=diagnostics,
    )

    assert accepted == (
        thread_add("Decode the cipher ledger", ThreadType.INFORMATION, Urgency.MEDIUM),
    )
    assert [entry.message for entry in diagnostics.entries] == [
        'Thread add "Decode cipher ledger" is near-duplicate of another added thread '
        '"Decode the cipher ledger".'
    ]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("The roof is collapsing right now", True),
        ("Smoke fills the hall at once", True),
        ("Fire is spreading through the docks", True),
        ("Guards are attacking the gate", True),
        ("The rival gang may return next week", False),
        ("A flood could reach the lower district", False),
    ],
)
def test_is_immediate_hazard_text(text: str, *, expected: bool) -> None:
    assert is_immediate_hazard_text(text) is expected


def test_hazard_rejection_applies_only_to_danger_threads(diagnostics: DiagnosticLog) -> None:
    accepted = filter_thread_adds(
        [
            thread_add("The roof is collapsing right now", ThreadType.DANGER),
            thread_add("Escape before the roof is collapsing", ThreadType.QUEST),
        ],
        (),
        frozenset(),
        diagnostics=diagnostics,
    )

    assert accepted == (thread_add("Escape before the roof is collapsing", ThreadType.QUEST),)
    assert [(entry.code, entry.field, entry.message) for entry in diagnostics.entries] == [
        (
            DiagnosticCode.THREAD_DANGER_IMMEDIATE_HAZARD,
            "threadsAdded",
            'DANGER thread "The roof is collapsing right now" describes an immediate scene '
            "hazard and must be tracked as a threat/constraint instead.",
        )
    ]


def test_custom_policy_overrides_threshold(diagnostics: DiagnosticLog) -> None:
    previous = (_thread("td-1", "decode hidden ledger cipher", ThreadType.MYSTERY),)
    strict = ThreadDedupPolicy(thresholds={ThreadType.MYSTERY: 0.2})

    accepted = filter_thread_adds(
        [thread_add("decode hidden ledger", ThreadType.MYSTERY)],
        previous,
        frozenset(),
        policy=ThreadDedupPolicy(thresholds={ThreadType.MYSTERY: 0.9}),
        diagnostics=diagnostics,
    )
    rejected = filter_thread_adds(
        [thread_add("decode ledger", ThreadType.MYSTERY)],
        previous,
        frozenset(),
        policy=strict,
        diagnostics=diagnostics,
    )

    assert accepted == (thread_add("decode hidden ledger", ThreadType.MYSTERY),)
    assert rejected == ()
    assert strict.threshold_for(ThreadType.QUEST) == THREAD_JACCARD_THRESHOLDS[ThreadType.QUEST]
