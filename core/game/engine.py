"""Per-player blackjack session with state machine."""

from dataclasses import dataclass
from random import Random
from typing import Callable

from transitions import Machine

from core.cards import Card, draw, full_deck
from core.errors import InvalidActionError
from core.game.dealer import DEALER_STANDS_ON, play_dealer
from core.game.state import Outcome, Phase
from core.hand import Hand

WIN_POINTS = 100


@dataclass(frozen=True)
class SessionView:
    """What a player is allowed to see of their session."""

    player_cards: tuple[Card, ...]
    dealer_cards: tuple[Card | None, ...]  # None marks the hidden hole card
    message: str
    score: int
    phase: Phase
    player_value: int
    dealer_value: int | None


@dataclass(frozen=True)
class SessionSnapshot:
    """Complete copy of a session's mutable state."""

    machine_state: str
    player_cards: tuple[Card, ...]
    dealer_cards: tuple[Card, ...]
    deck: tuple[Card, ...]
    message: str
    score: int
    outcome: Outcome | None


class BlackjackSession:
    """
    One player's blackjack session.

    Holds the only trusted copy of the hand: both hands, the remaining
    deck, the phase and the running score. All randomness comes from
    ``rng``; everything else is deterministic.
    """

    STATES = [p.name.lower() for p in Phase]

    TRANSITIONS = [
        {"trigger": "deal", "source": "*", "dest": "in_progress"},
        {"trigger": "settle", "source": "in_progress", "dest": "resolved"},
    ]

    def __init__(
        self,
        rng: Random | None = None,
        deck_factory: Callable[[], list[Card]] = full_deck,
        win_points: int = WIN_POINTS,
        dealer_stands_on: int = DEALER_STANDS_ON,
    ) -> None:
        """
        Initialize an empty session awaiting its first hand.

        Args:
            rng: Random number generator used for every draw
            deck_factory: Builds the full deck at the start of each hand
            win_points: Score change for a won or lost hand
            dealer_stands_on: Dealer draws while below this value
        """
        self._rng = rng
        self._deck_factory = deck_factory
        self._win_points = win_points
        self._dealer_stands_on = dealer_stands_on

        self.player_hand = Hand()
        self.dealer_hand = Hand()
        self.deck: list[Card] = []
        self.message = ""
        self.score = 0
        self.outcome: Outcome | None = None

        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="awaiting_start",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def phase(self) -> Phase:
        """Get current phase as enum."""
        return Phase[self._machine_state.upper()]  # type: ignore

    @property
    def is_revealed(self) -> bool:
        """The dealer's hole card is shown once the hand is settled."""
        return self.phase == Phase.RESOLVED

    def start(self, score: int) -> Outcome | None:
        """
        Begin a new hand from a full deck.

        Deals two cards to the player, then two to the dealer. A natural
        21 for the player settles the hand immediately.

        Args:
            score: Running score carried over from the score store

        Returns:
            The outcome if the hand settled on the deal, otherwise None
        """
        deck = self._deck_factory()
        player_cards, deck = draw(deck, 2, self._rng)
        dealer_cards, deck = draw(deck, 2, self._rng)

        self.player_hand = Hand(player_cards)
        self.dealer_hand = Hand(dealer_cards)
        self.deck = deck
        self.message = ""
        self.outcome = None
        self.score = score
        self.deal()

        if self.player_hand.is_blackjack:
            self._resolve(Outcome.PLAYER_BLACKJACK)
        return self.outcome

    def hit(self) -> Outcome | None:
        """
        Draw one card for the player.

        Returns:
            The outcome if the card settled the hand (21 or bust), otherwise None

        Raises:
            InvalidActionError: If no hand is in progress
        """
        self._require_in_progress("hit")

        drawn, self.deck = draw(self.deck, 1, self._rng)
        self.player_hand.add_card(drawn[0])

        if self.player_hand.is_busted:
            self._resolve(Outcome.PLAYER_BUSTS)
        elif self.player_hand.value == 21:
            self._resolve(Outcome.PLAYER_BLACKJACK)
        return self.outcome

    def stand(self) -> Outcome:
        """
        End the player's turn, play the dealer out and settle the hand.

        Raises:
            InvalidActionError: If no hand is in progress
        """
        self._require_in_progress("stand")

        self.deck = play_dealer(
            self.dealer_hand, self.deck, self._rng, self._dealer_stands_on
        )
        self._resolve(self._stand_outcome())
        return self.outcome  # type: ignore[return-value]

    def _stand_outcome(self) -> Outcome:
        if self.dealer_hand.is_busted:
            return Outcome.DEALER_BUSTS

        dealer_value = self.dealer_hand.value
        if dealer_value == 21:
            return Outcome.DEALER_BLACKJACK

        player_value = self.player_hand.value
        if player_value > dealer_value:
            return Outcome.PLAYER_WINS
        if player_value < dealer_value:
            return Outcome.PLAYER_LOSES
        return Outcome.DRAW

    def _require_in_progress(self, action: str) -> None:
        if self.phase != Phase.IN_PROGRESS:
            raise InvalidActionError(action, f"cannot {action} while {self.phase}")

    def _resolve(self, outcome: Outcome) -> None:
        self.outcome = outcome
        self.message = outcome.message
        self.score += outcome.direction * self._win_points
        self.settle()

    def view(self) -> SessionView:
        """Build the player's view, masking the hole card until settled."""
        if self.is_revealed:
            dealer_cards: tuple[Card | None, ...] = tuple(self.dealer_hand.cards)
            dealer_value: int | None = self.dealer_hand.value
        else:
            dealer_cards = tuple(self.dealer_hand.cards[:1]) + tuple(
                None for _ in self.dealer_hand.cards[1:]
            )
            dealer_value = None

        return SessionView(
            player_cards=tuple(self.player_hand.cards),
            dealer_cards=dealer_cards,
            message=self.message,
            score=self.score,
            phase=self.phase,
            player_value=self.player_hand.value,
            dealer_value=dealer_value,
        )

    def snapshot(self) -> SessionSnapshot:
        """Capture the session state so it can be restored later."""
        return SessionSnapshot(
            machine_state=self._machine_state,  # type: ignore
            player_cards=tuple(self.player_hand.cards),
            dealer_cards=tuple(self.dealer_hand.cards),
            deck=tuple(self.deck),
            message=self.message,
            score=self.score,
            outcome=self.outcome,
        )

    def restore(self, snapshot: SessionSnapshot) -> None:
        """Put the session back exactly as it was when ``snapshot`` was taken."""
        self._machine_state = snapshot.machine_state
        self.player_hand = Hand(list(snapshot.player_cards))
        self.dealer_hand = Hand(list(snapshot.dealer_cards))
        self.deck = list(snapshot.deck)
        self.message = snapshot.message
        self.score = snapshot.score
        self.outcome = snapshot.outcome
