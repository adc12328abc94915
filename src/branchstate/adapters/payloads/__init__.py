"""Public interface for the JSON payload adapter."""

from __future__ import annotations

from .schema import PagePlanPayload, PreviousStatePayload, WriterOutputPayload
from .translator import (
    PayloadValidationError,
    parse_page_plan,
    parse_previous_state,
    parse_writer_output,
    serialize_result,
    serialize_state,
)

__all__ = [
    "PagePlanPayload",
    "PayloadValidationError",
    "PreviousStatePayload",
    "WriterOutputPayload",
    "parse_page_plan",
    "parse_previous_state",
    "parse_writer_output",
    "serialize_result",
    "serialize_state",
]
