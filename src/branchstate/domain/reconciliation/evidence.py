"""Narrative evidence gate for textual state additions.

Planner and writer run independently and can drift. Each addition is reduced to a
single anchor, its first distinguishing token, and survives only when that anchor
shows up in the writer's narrative or scene summary; otherwise it is dropped with
``MISSING_NARRATIVE_EVIDENCE`` naming the anchor.

Matching is a plain substring test on the punctuation-free, case-folded text of
both sides, so ``"IRON-GATE breach kit"`` is supported by prose mentioning
``"iron gate"`` and ``"gate"`` is found inside ``"floodgate"``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from branchstate.domain.model import DiagnosticCode

from .normalize import dedupe_by_key, normalize_evidence_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from branchstate.domain.model import WriterOutput

    from .contracts import DiagnosticLog


MIN_ANCHOR_LENGTH: Final = 3

EVIDENCE_STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "but",
        "by",
        "for",
        "from",
        "has",
        "have",
        "in",
        "is",
        "it",
        "its",
        "of",
        "on",
        "or",
        "that",
        "the",
        "their",
        "to",
        "was",
        "were",
        "with",
    }
)


@dataclass(frozen=True, slots=True)
class NarrativeEvidence:
    """Searchable form of the writer's prose and summary."""

    haystack: str

    @classmethod
    def from_writer_output(cls, writer_output: WriterOutput) -> NarrativeEvidence:
        parts = (
            normalize_evidence_text(writer_output.narrative),
            normalize_evidence_text(writer_output.scene_summary),
        )
        return cls(haystack=" " + " | ".join(part for part in parts if part) + " ")

    def mentions(self, anchor: str) -> bool:
        return bool(anchor) and anchor in self.haystack


@dataclass(frozen=True, slots=True)
class EvidenceCheck:
    anchor: str
    supported: bool


def anchor_candidates(text: str) -> tuple[str, ...]:
    """Distinguishing tokens of ``text`` in order; the whole text if none qualify."""

    normalized = normalize_evidence_text(text)
    tokens = [
        token
        for token in normalized.split()
        if len(token) >= MIN_ANCHOR_LENGTH and token not in EVIDENCE_STOP_WORDS
    ]
    candidates = dedupe_by_key(tokens, lambda token: token)
    if candidates:
        return tuple(candidates)
    return (normalized,) if normalized else ()


def check_evidence(text: str, evidence: NarrativeEvidence) -> EvidenceCheck:
    candidates = anchor_candidates(text)
    if not candidates:
        return EvidenceCheck(anchor="", supported=False)
    # only the leading candidate is the anchor; later tokens never vouch for it
    anchor = candidates[0]
    return EvidenceCheck(anchor=anchor, supported=evidence.mentions(anchor))


def gate_additions(
    additions: Iterable[str],
    evidence: NarrativeEvidence,
    *,
    field: str,
    diagnostics: DiagnosticLog,
) -> tuple[str, ...]:
    """Keep additions backed by the narrative; report and drop the rest."""

    accepted: list[str] = []
    for addition in additions:
        check = check_evidence(addition, evidence)
        if check.supported:
            accepted.append(addition)
            continue
        diagnostics.emit(
            DiagnosticCode.MISSING_NARRATIVE_EVIDENCE,
            field=field,
            anchor=check.anchor,
            message=f'No narrative evidence found for {field} anchor "{check.anchor}".',
        )
    return tuple(accepted)
