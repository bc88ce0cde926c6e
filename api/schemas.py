"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from core.cards import Card
from core.game import SessionView


class CamelModel(BaseModel):
    """Model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CardResponse(BaseModel):
    """Card representation."""

    rank: str
    suit: str

    @classmethod
    def from_card(cls, card: Card | None) -> "CardResponse":
        """Build from a card; None becomes the face-down placeholder."""
        if card is None:
            return cls(rank="?", suit="?")
        return cls(**card.to_dict())


class SessionRequest(BaseModel):
    """Body of ``POST /session``; which fields matter depends on ``action``."""

    action: str
    address: str | None = None
    message: str | None = None
    signature: str | None = None


class SessionResponse(CamelModel):
    """The player's view of their session."""

    player_hand: list[CardResponse]
    dealer_hand: list[CardResponse]
    message: str
    score: int
    phase: str
    player_value: int
    dealer_value: int | None = None

    @classmethod
    def from_view(cls, view: SessionView) -> "SessionResponse":
        return cls(
            player_hand=[CardResponse.from_card(c) for c in view.player_cards],
            dealer_hand=[CardResponse.from_card(c) for c in view.dealer_cards],
            message=view.message,
            score=view.score,
            phase=view.phase.name,
            player_value=view.player_value,
            dealer_value=view.dealer_value,
        )


class AuthResponse(CamelModel):
    """Successful signature authentication."""

    message: str
    token: str
    expires_at: int  # Unix timestamp in seconds


class ChallengeResponse(CamelModel):
    """Challenge text for the wallet to sign."""

    address: str
    message: str
