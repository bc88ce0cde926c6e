"""Card representation and the deck manager."""

from dataclasses import dataclass
from enum import Enum, auto
from random import Random, SystemRandom
from typing import Sequence

from core.errors import DeckExhaustedError

DECK_SIZE = 52

_system_rng = SystemRandom()


class Suit(Enum):
    """Card suits."""

    SPADES = auto()
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.SPADES: "♠",
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks with blackjack values."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if self == Rank.ACE:
            return "A"
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the provisional point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        return min(self.value, 10)

    @property
    def is_ace(self) -> bool:
        return self == Rank.ACE


_RANK_STRINGS = {str(rank): rank for rank in Rank}
_RANK_STRINGS["T"] = Rank.TEN

_SUIT_STRINGS = {str(suit): suit for suit in Suit}
_SUIT_STRINGS.update(
    {"S": Suit.SPADES, "H": Suit.HEARTS, "D": Suit.DIAMONDS, "C": Suit.CLUBS}
)


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the provisional blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        return self.rank.is_ace

    def to_dict(self) -> dict[str, str]:
        """Wire form: ``{"rank": "K", "suit": "♥"}``."""
        return {"rank": str(self.rank), "suit": str(self.suit)}

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like 'A♠', 'KH', '10d'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str, suit_str = s[:-1], s[-1]
        if rank_str not in _RANK_STRINGS:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_STRINGS:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(_RANK_STRINGS[rank_str], _SUIT_STRINGS[suit_str])


def full_deck() -> list[Card]:
    """Return the standard 52-card set, in suit then rank order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def draw(
    deck: Sequence[Card],
    count: int,
    rng: Random | None = None,
) -> tuple[list[Card], list[Card]]:
    """
    Draw ``count`` distinct cards uniformly at random without replacement.

    The input deck is never modified; the caller commits the returned
    remaining deck.

    Args:
        deck: Cards still available
        count: Number of cards to draw
        rng: Random source (defaults to the OS entropy pool)

    Returns:
        Tuple of (drawn cards, remaining deck)

    Raises:
        DeckExhaustedError: If count exceeds the cards in the deck
    """
    if count < 0:
        raise ValueError(f"Cannot draw a negative number of cards: {count}")
    if count > len(deck):
        raise DeckExhaustedError(requested=count, remaining=len(deck))

    rng = rng or _system_rng
    picked = rng.sample(range(len(deck)), count)
    picked_set = set(picked)

    drawn = [deck[i] for i in picked]
    remaining = [card for i, card in enumerate(deck) if i not in picked_set]
    return drawn, remaining
