"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class ThreadType(StrEnum):
    MYSTERY = "MYSTERY"
    QUEST = "QUEST"
    RELATIONSHIP = "RELATIONSHIP"
    DANGER = "DANGER"
    INFORMATION = "INFORMATION"
    RESOURCE = "RESOURCE"
    MORAL = "MORAL"


class Urgency(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class StateCategory(StrEnum):
    """Addressable, ID-keyed categories of the active state."""

    THREATS = "threats"
    CONSTRAINTS = "constraints"
    THREADS = "threads"
    INVENTORY = "inventory"
    HEALTH = "health"
    CHARACTER_STATE = "characterState"


class DiagnosticCode(StrEnum):
    """Closed vocabulary of reconciliation diagnostics."""

    UNKNOWN_STATE_ID = "UNKNOWN_STATE_ID"
    THREAD_DUPLICATE_LIKE_ADD = "THREAD_DUPLICATE_LIKE_ADD"
    THREAD_DANGER_IMMEDIATE_HAZARD = "THREAD_DANGER_IMMEDIATE_HAZARD"
    DUPLICATE_CANON_FACT = "DUPLICATE_CANON_FACT"
    MISSING_NARRATIVE_EVIDENCE = "MISSING_NARRATIVE_EVIDENCE"
    MALFORMED_REPLACE_PAYLOAD = "MALFORMED_REPLACE_PAYLOAD"


STATE_ID_PREFIXES: Final[dict[StateCategory, str]] = {
    StateCategory.THREATS: "th-",
    StateCategory.CONSTRAINTS: "cn-",
    StateCategory.THREADS: "td-",
    StateCategory.INVENTORY: "inv-",
    StateCategory.HEALTH: "hp-",
    StateCategory.CHARACTER_STATE: "cs-",
}
