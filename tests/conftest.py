from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from branchstate.domain.reconciliation import DiagnosticLog
from tests.support.builders import make_previous_state, make_writer_output

if TYPE_CHECKING:
    from branchstate.domain.model import PreviousState, WriterOutput


@pytest.fixture
def previous_state() -> PreviousState:
    return make_previous_state()


@pytest.fixture
def writer_output() -> WriterOutput:
    return make_writer_output()


@pytest.fixture
def diagnostics() -> DiagnosticLog:
    return DiagnosticLog()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "BRANCHSTATE_LOG_LEVEL",
        "BRANCHSTATE_MAX_RECONCILIATION_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
