"""Game session engine and state management."""

from core.game.state import Outcome, Phase
from core.game.engine import BlackjackSession, SessionSnapshot, SessionView

__all__ = [
    "Outcome",
    "Phase",
    "BlackjackSession",
    "SessionSnapshot",
    "SessionView",
]
