"""Exception taxonomy for the blackjack session service."""


class BlackjackError(Exception):
    """Base class for all service errors."""


class ValidationError(BlackjackError):
    """Raised when a request is missing fields or carries invalid values."""


class InvalidActionError(ValidationError):
    """Raised when an action is unknown or not allowed in the current phase."""

    def __init__(self, action: str, reason: str = "invalid action") -> None:
        super().__init__(f"{reason}: {action}")
        self.action = action


class DeckExhaustedError(BlackjackError):
    """Raised when more cards are requested than the deck holds."""

    def __init__(self, requested: int, remaining: int) -> None:
        super().__init__(
            f"Cannot draw {requested} card(s) from a deck of {remaining}"
        )
        self.requested = requested
        self.remaining = remaining


class PersistenceError(BlackjackError):
    """Raised when the score store cannot be read or written."""

    def __init__(self, message: str = "failed to persist score") -> None:
        super().__init__(message)
        self.message = message


class AuthError(BlackjackError):
    """Base class for authentication and authorization failures."""

    default_message = "unauthorized"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSignature(AuthError):
    """The wallet signature does not recover to the claimed address."""

    default_message = "invalid signature"


class MissingToken(AuthError):
    """No bearer token accompanied the request."""

    default_message = "No token provided"


class ExpiredToken(AuthError):
    """The bearer token is past its expiry."""

    default_message = "Token expired"


class InvalidToken(AuthError):
    """The bearer token was tampered with or cannot be decoded."""

    default_message = "Invalid token"


class AddressMismatch(AuthError):
    """The token was issued to a different address than the one claimed."""

    default_message = "Invalid token"
