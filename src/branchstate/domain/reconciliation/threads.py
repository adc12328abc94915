"""Near-duplicate and immediate-hazard filtering for proposed threads.

Rules run in this order over normalized candidates:
1) reject DANGER threads describing a hazard that unfolds within the page
2) reject candidates too similar to a still-open previous thread of the same type
3) reject candidates too similar to an earlier surviving candidate of the same type

Similarity is the Jaccard index over case-folded word tokens (two characters or
longer) after filler stop-phrases are removed. Thresholds are per ``ThreadType``:
relationship/moral hooks are judged "the same thread" with less overlap than
mystery/information hooks, which in turn need less than quest/resource/danger.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from branchstate.domain.model import DiagnosticCode, ThreadType

from .normalize import normalize_evidence_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence, Set

    from branchstate.domain.model import ThreadAdd, ThreadEntry

    from .contracts import DiagnosticLog


THREADS_ADDED_FIELD: Final = "threadsAdded"

THREAD_JACCARD_THRESHOLDS: Final[Mapping[ThreadType, float]] = {
    ThreadType.RELATIONSHIP: 0.58,
    ThreadType.MORAL: 0.58,
    ThreadType.MYSTERY: 0.62,
    ThreadType.INFORMATION: 0.62,
    ThreadType.QUEST: 0.66,
    ThreadType.RESOURCE: 0.66,
    ThreadType.DANGER: 0.66,
}

THREAD_STOP_PHRASES: Final[tuple[str, ...]] = (
    "currently",
    "right now",
    "at this point",
    "for now",
)

IMMEDIATE_HAZARD_MARKERS: Final[tuple[str, ...]] = (
    "right now",
    "currently",
    "immediately",
    "this scene",
    "this moment",
    "at once",
)

IMMEDIATE_HAZARD_VERBS: Final[tuple[str, ...]] = (
    "burning",
    "collapsing",
    "flooding",
    "exploding",
    "attacking",
    "choking",
    "spreading",
)

MIN_SIMILARITY_TOKEN_LENGTH: Final = 2

_STOP_PHRASE_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(phrase) for phrase in THREAD_STOP_PHRASES) + r")\b"
)
_HAZARD_MARKER_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(marker) for marker in IMMEDIATE_HAZARD_MARKERS) + r")\b"
)
_HAZARD_PROGRESSIVE_PATTERN = re.compile(
    r"\b(?:is|are)\b.*\b(?:" + "|".join(IMMEDIATE_HAZARD_VERBS) + r")\b"
)


@dataclass(frozen=True, slots=True, kw_only=True)
class ThreadDedupPolicy:
    """Similarity thresholds applied per thread type."""

    thresholds: Mapping[ThreadType, float] = field(
        default_factory=lambda: dict(THREAD_JACCARD_THRESHOLDS)
    )

    def threshold_for(self, thread_type: ThreadType) -> float:
        return self.thresholds.get(thread_type, THREAD_JACCARD_THRESHOLDS[thread_type])


DEFAULT_THREAD_POLICY: Final = ThreadDedupPolicy()


def similarity_tokens(text: str) -> frozenset[str]:
    normalized = _STOP_PHRASE_PATTERN.sub(" ", normalize_evidence_text(text))
    return frozenset(
        token for token in normalized.split() if len(token) >= MIN_SIMILARITY_TOKEN_LENGTH
    )


def jaccard_similarity(left: Set[str], right: Set[str]) -> float:
    if not left or not right:
        return 0.0
    intersection = len(left & right)
    union = len(left) + len(right) - intersection
    return intersection / union if union else 0.0


def is_immediate_hazard_text(text: str) -> bool:
    """Whether ``text`` reads as a danger unfolding right now rather than a hook."""

    normalized = normalize_evidence_text(text)
    if not normalized:
        return False
    if _HAZARD_MARKER_PATTERN.search(normalized):
        return True
    return _HAZARD_PROGRESSIVE_PATTERN.search(normalized) is not None


def reject_immediate_hazards(
    candidates: Iterable[ThreadAdd],
    *,
    diagnostics: DiagnosticLog,
) -> list[ThreadAdd]:
    accepted: list[ThreadAdd] = []
    for candidate in candidates:
        if candidate.thread_type is ThreadType.DANGER and is_immediate_hazard_text(
            candidate.text
        ):
            diagnostics.emit(
                DiagnosticCode.THREAD_DANGER_IMMEDIATE_HAZARD,
                field=THREADS_ADDED_FIELD,
                message=(
                    f'DANGER thread "{candidate.text}" describes an immediate scene hazard '
                    "and must be tracked as a threat/constraint instead."
                ),
            )
            continue
        accepted.append(candidate)
    return accepted


def _is_similar(
    candidate: ThreadAdd,
    candidate_tokens: frozenset[str],
    other_text: str,
    other_type: ThreadType,
    policy: ThreadDedupPolicy,
) -> bool:
    if other_type is not candidate.thread_type:
        return False
    similarity = jaccard_similarity(candidate_tokens, similarity_tokens(other_text))
    return similarity >= policy.threshold_for(candidate.thread_type)


def dedupe_against_open_threads(
    candidates: Iterable[ThreadAdd],
    previous_threads: Sequence[ThreadEntry],
    resolved_ids: Set[str],
    *,
    policy: ThreadDedupPolicy,
    diagnostics: DiagnosticLog,
) -> list[ThreadAdd]:
    """Drop candidates restating a previous thread that stays open after this page."""

    open_threads = [thread for thread in previous_threads if thread.id not in resolved_ids]
    accepted: list[ThreadAdd] = []
    for candidate in candidates:
        candidate_tokens = similarity_tokens(candidate.text)
        duplicate_of = next(
            (
                thread
                for thread in open_threads
                if _is_similar(candidate, candidate_tokens, thread.text, thread.thread_type, policy)
            ),
            None,
        )
        if duplicate_of is not None:
            diagnostics.emit(
                DiagnosticCode.THREAD_DUPLICATE_LIKE_ADD,
                field=THREADS_ADDED_FIELD,
                message=(
                    f'Thread add "{candidate.text}" is near-duplicate of existing thread '
                    f'"{duplicate_of.id}" ("{duplicate_of.text}").'
                ),
            )
            continue
        accepted.append(candidate)
    return accepted


def dedupe_within_batch(
    candidates: Iterable[ThreadAdd],
    *,
    policy: ThreadDedupPolicy,
    diagnostics: DiagnosticLog,
) -> list[ThreadAdd]:
    accepted: list[ThreadAdd] = []
    for candidate in candidates:
        candidate_tokens = similarity_tokens(candidate.text)
        duplicate_of = next(
            (
                existing
                for existing in accepted
                if _is_similar(
                    candidate, candidate_tokens, existing.text, existing.thread_type, policy
                )
            ),
            None,
        )
        if duplicate_of is not None:
            diagnostics.emit(
                DiagnosticCode.THREAD_DUPLICATE_LIKE_ADD,
                field=THREADS_ADDED_FIELD,
                message=(
                    f'Thread add "{candidate.text}" is near-duplicate of another added '
                    f'thread "{duplicate_of.text}".'
                ),
            )
            continue
        accepted.append(candidate)
    return accepted


def filter_thread_adds(
    candidates: Sequence[ThreadAdd],
    previous_threads: Sequence[ThreadEntry],
    resolved_ids: Set[str],
    *,
    policy: ThreadDedupPolicy = DEFAULT_THREAD_POLICY,
    diagnostics: DiagnosticLog,
) -> tuple[ThreadAdd, ...]:
    """Run hazard rejection, then previous-state and same-batch dedup."""

    after_hazards = reject_immediate_hazards(candidates, diagnostics=diagnostics)
    after_previous = dedupe_against_open_threads(
        after_hazards,
        previous_threads,
        resolved_ids,
        policy=policy,
        diagnostics=diagnostics,
    )
    return tuple(dedupe_within_batch(after_previous, policy=policy, diagnostics=diagnostics))
