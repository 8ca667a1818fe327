"""Lunch services package - session handling around the Forkable API."""

from lunchbot.services.session_orchestrator import (
    LunchOutcome,
    LunchSessionOrchestrator,
    SessionStage,
)

__all__ = ["LunchOutcome", "LunchSessionOrchestrator", "SessionStage"]
