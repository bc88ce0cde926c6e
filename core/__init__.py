"""Core blackjack engine - 100% transport-agnostic."""

from core.cards import Card, Rank, Suit, draw, full_deck
from core.hand import Hand, hand_value

__all__ = [
    "Card",
    "Rank",
    "Suit",
    "draw",
    "full_deck",
    "Hand",
    "hand_value",
]
