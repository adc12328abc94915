"""Domain model package for story state and page-plan intents."""

from __future__ import annotations

from .enums import STATE_ID_PREFIXES, DiagnosticCode, StateCategory, ThreadType, Urgency
from .plan import (
    CanonIntents,
    CharacterCanonAdd,
    CharacterStateAdd,
    CharacterStateIntentReplace,
    CharacterStateIntents,
    PagePlan,
    StateIntents,
    TextIntentReplace,
    TextIntents,
    ThreadAdd,
    ThreadIntentReplace,
    ThreadIntents,
    WriterOutput,
)
from .state import KeyedEntry, PreviousState, ThreadEntry

__all__ = [
    "STATE_ID_PREFIXES",
    "CanonIntents",
    "CharacterCanonAdd",
    "CharacterStateAdd",
    "CharacterStateIntentReplace",
    "CharacterStateIntents",
    "DiagnosticCode",
    "KeyedEntry",
    "PagePlan",
    "PreviousState",
    "StateCategory",
    "StateIntents",
    "TextIntentReplace",
    "TextIntents",
    "ThreadAdd",
    "ThreadEntry",
    "ThreadIntentReplace",
    "ThreadIntents",
    "ThreadType",
    "Urgency",
    "WriterOutput",
]
