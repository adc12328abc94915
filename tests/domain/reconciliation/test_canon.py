from __future__ import annotations

from typing import TYPE_CHECKING

from branchstate.domain.model import CharacterCanonAdd, DiagnosticCode
from branchstate.domain.reconciliation.canon import (
    normalize_character_facts,
    normalize_world_facts,
)

if TYPE_CHECKING:
    from branchstate.domain.reconciliation import DiagnosticLog


def test_world_facts_keep_first_seen_and_report_duplicates(diagnostics: DiagnosticLog) -> None:
    facts = normalize_world_facts(
        ["  Iron   gates remain sealed ", "iron gates remain sealed", "   ", None],
        diagnostics=diagnostics,
    )

    assert facts == ("Iron gates remain sealed",)
    assert [(entry.code, entry.field, entry.message) for entry in diagnostics.entries] == [
        (
            DiagnosticCode.DUPLICATE_CANON_FACT,
            "stateIntents.canon.worldAdd[1]",
            'Duplicate canon fact after normalization: "iron gates remain sealed".',
        )
    ]


def test_world_facts_reject_already_established_canon(diagnostics: DiagnosticLog) -> None:
    facts = normalize_world_facts(
        ["The river district floods every spring", "Bells ring at dusk"],
        known_facts=("the river DISTRICT floods every spring",),
        diagnostics=diagnostics,
    )

    assert facts == ("Bells ring at dusk",)
    assert [entry.message for entry in diagnostics.entries] == [
        'Canon fact already established: "The river district floods every spring".'
    ]


def test_character_facts_group_names_case_insensitively(diagnostics: DiagnosticLog) -> None:
    facts = normalize_character_facts(
        [
            CharacterCanonAdd(
                character_name="Mara",
                facts=("Keeps a hidden ledger", "  keeps   a hidden ledger "),
            ),
            CharacterCanonAdd(
                character_name=" mara ",
                facts=("Distrusts city watch", "distrusts   city   watch"),
            ),
        ],
        diagnostics=diagnostics,
    )

    assert facts == {"Mara": ("Keeps a hidden ledger", "Distrusts city watch")}
    assert [(entry.field, entry.message) for entry in diagnostics.entries] == [
        (
            "stateIntents.canon.characterAdd[0].facts[1]",
            'Duplicate canon fact for character "Mara" after normalization: '
            '"keeps a hidden ledger".',
        ),
        (
            "stateIntents.canon.characterAdd[1].facts[1]",
            'Duplicate canon fact for character "Mara" after normalization: '
            '"distrusts city watch".',
        ),
    ]


def test_character_facts_prefer_known_name_and_skip_known_facts(
    diagnostics: DiagnosticLog,
) -> None:
    facts = normalize_character_facts(
        [
            CharacterCanonAdd(
                character_name="MARA",
                facts=("grew up near the docks", "Owes Tomas a favor"),
            ),
            CharacterCanonAdd(character_name="Tomas", facts=("   ",)),
        ],
        known_facts={"Mara": ("Grew up near the docks",)},
        diagnostics=diagnostics,
    )

    assert facts == {"Mara": ("Owes Tomas a favor",)}
    assert [entry.message for entry in diagnostics.entries] == [
        'Canon fact for character "Mara" already established: "grew up near the docks".'
    ]
