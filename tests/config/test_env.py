from __future__ import annotations

import pytest

from branchstate.config import ConfigurationError, optional_positive_int


def test_optional_positive_int_uses_default_when_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_INT", raising=False)

    assert optional_positive_int("EXAMPLE_INT", default=4) == 4


def test_optional_positive_int_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "   ")

    assert optional_positive_int("EXAMPLE_INT", default=4) == 4


def test_optional_positive_int_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", " 5 ")

    assert optional_positive_int("EXAMPLE_INT", default=4) == 5


@pytest.mark.parametrize("raw", ["zero", "0", "-3"])
def test_optional_positive_int_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch,
    raw: str,
) -> None:
    monkeypatch.setenv("EXAMPLE_INT", raw)

    with pytest.raises(ConfigurationError):
        optional_positive_int("EXAMPLE_INT", default=4)
