from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from branchstate.adapters.payloads import PayloadValidationError
from branchstate.app import advance_page_files, reconcile_page_files
from branchstate.domain.model import KeyedEntry
from tests.support.builders import plan_payload, previous_state_payload, writer_payload

if TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, payload: object) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _payload_files(tmp_path: Path, plan: dict[str, object]) -> tuple[Path, Path, Path]:
    return (
        _write(tmp_path / "plan.json", plan),
        _write(tmp_path / "writer.json", writer_payload()),
        _write(tmp_path / "state.json", previous_state_payload()),
    )


def test_reconcile_page_files_returns_domain_result(tmp_path: Path) -> None:
    paths = _payload_files(
        tmp_path,
        plan_payload(threats={"add": ["Patrols double"], "removeIds": ["th-1", "th-404"]}),
    )

    result = reconcile_page_files(*paths)

    assert result.threats_added == ("Patrols double",)
    assert result.threats_removed == ("th-1",)
    assert len(result.reconciliation_diagnostics) == 1


def test_reconcile_page_files_logs_diagnostics(
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    paths = _payload_files(tmp_path, plan_payload(threats={"removeIds": ["th-404"]}))

    with caplog.at_level("WARNING", logger="branchstate.app"):
        reconcile_page_files(*paths)

    assert "UNKNOWN_STATE_ID" in caplog.text


def test_advance_page_files_builds_next_state(tmp_path: Path) -> None:
    paths = _payload_files(
        tmp_path,
        plan_payload(
            threats={"add": ["Patrols double"], "removeIds": ["th-1"]},
            canon={"worldAdd": ["Bells ring at dusk"]},
        ),
    )

    advanced = advance_page_files(*paths)

    assert advanced.next_state.threats == (KeyedEntry(id="th-2", text="Patrols double"),)
    assert advanced.next_state.canon_facts == (
        "The river district floods every spring",
        "Bells ring at dusk",
    )


def test_reconcile_page_files_rejects_non_object_payload(tmp_path: Path) -> None:
    plan_path, writer_path, state_path = _payload_files(tmp_path, plan_payload())
    _write(plan_path, ["not", "an", "object"])

    with pytest.raises(ValueError, match="Expected a JSON object"):
        reconcile_page_files(plan_path, writer_path, state_path)


def test_reconcile_page_files_rejects_invalid_state(tmp_path: Path) -> None:
    plan_path, writer_path, state_path = _payload_files(tmp_path, plan_payload())
    _write(state_path, {"threads": [{"id": "td-1", "text": "x", "threadType": "NOPE"}]})

    with pytest.raises(PayloadValidationError):
        reconcile_page_files(plan_path, writer_path, state_path)
