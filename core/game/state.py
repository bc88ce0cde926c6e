"""Session phases and hand outcomes."""

from enum import Enum, auto


class Phase(Enum):
    """
    Session state machine states.

    Flow: AWAITING_START → IN_PROGRESS → RESOLVED → IN_PROGRESS → ...
    """

    # No hand dealt yet for this player
    AWAITING_START = auto()

    # Player may hit or stand
    IN_PROGRESS = auto()

    # Hand settled, only a new start is accepted
    RESOLVED = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


class Outcome(Enum):
    """How a hand was settled."""

    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()
    DEALER_BUSTS = auto()
    DEALER_BLACKJACK = auto()
    PLAYER_WINS = auto()
    PLAYER_LOSES = auto()
    DRAW = auto()

    @property
    def message(self) -> str:
        """Player-facing message for this outcome."""
        return {
            Outcome.PLAYER_BLACKJACK: "Black Jack! Player wins!",
            Outcome.PLAYER_BUSTS: "Bust! Player loses!",
            Outcome.DEALER_BUSTS: "Dealer bust! Player wins!",
            Outcome.DEALER_BLACKJACK: "Dealer Black Jack! Player loses!",
            Outcome.PLAYER_WINS: "Player wins!",
            Outcome.PLAYER_LOSES: "Player loses!",
            Outcome.DRAW: "Draw!",
        }[self]

    @property
    def direction(self) -> int:
        """1 if the player wins, -1 if the dealer wins, 0 for a draw."""
        if self in (Outcome.PLAYER_BLACKJACK, Outcome.DEALER_BUSTS, Outcome.PLAYER_WINS):
            return 1
        if self == Outcome.DRAW:
            return 0
        return -1
