"""Dealer drawing policy."""

from random import Random
from typing import Sequence

from core.cards import Card, draw
from core.hand import Hand

DEALER_STANDS_ON = 17


def dealer_should_draw(hand: Hand, stands_on: int = DEALER_STANDS_ON) -> bool:
    """The dealer draws while the hand is worth less than ``stands_on``."""
    return hand.value < stands_on


def play_dealer(
    hand: Hand,
    deck: Sequence[Card],
    rng: Random | None = None,
    stands_on: int = DEALER_STANDS_ON,
) -> list[Card]:
    """
    Draw for the dealer until the hit-until-17 rule is satisfied.

    Cards are appended to ``hand`` in place.

    Returns:
        The remaining deck after the dealer's draws

    Raises:
        DeckExhaustedError: If the deck runs out before the dealer stands
    """
    remaining = list(deck)
    while dealer_should_draw(hand, stands_on):
        drawn, remaining = draw(remaining, 1, rng)
        hand.add_card(drawn[0])
    return remaining
