"""Session API endpoints: start/reset, auth, hit and stand."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query

from api.schemas import (
    AuthResponse,
    ChallengeResponse,
    SessionRequest,
    SessionResponse,
)
from api.session import SessionController, get_authenticator, get_session_controller
from core.auth import Authenticator, normalize_address
from core.errors import InvalidActionError, ValidationError

router = APIRouter()

MUTATING_ACTIONS = ("hit", "stand")


def _bearer_token(header: str | None) -> str | None:
    """Extract the credential from a ``Bearer <token>`` header value."""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.get("")
async def start_session(
    controller: Annotated[SessionController, Depends(get_session_controller)],
    address: Annotated[str | None, Query()] = None,
) -> SessionResponse:
    """
    Start or reset the hand for ``address``.

    Unauthenticated: anyone can read the score for any address, only
    hit and stand require a token.
    """
    if not address:
        raise ValidationError("No address provided")
    view = await controller.start(address)
    return SessionResponse.from_view(view)


@router.get("/challenge")
async def get_challenge(
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    address: Annotated[str | None, Query()] = None,
) -> ChallengeResponse:
    """Get a fresh message for the wallet to sign."""
    address = normalize_address(address)
    return ChallengeResponse(
        address=address,
        message=authenticator.issue_challenge(address),
    )


@router.post("")
async def session_action(
    request: SessionRequest,
    controller: Annotated[SessionController, Depends(get_session_controller)],
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
    authorization: Annotated[str | None, Header()] = None,
    legacy_bearer: Annotated[str | None, Header(alias="Bearer")] = None,
) -> AuthResponse | SessionResponse:
    """Authenticate, or execute a player action."""
    if request.action == "auth":
        token = authenticator.authenticate(
            request.address or "",
            request.message or "",
            request.signature or "",
        )
        return AuthResponse(
            message="valid signature",
            token=token.token,
            expires_at=int(token.expires_at.timestamp()),
        )

    if request.action not in MUTATING_ACTIONS:
        raise InvalidActionError(request.action)
    if not request.address:
        raise ValidationError("No address provided")

    authenticator.authorize(
        _bearer_token(authorization) or _bearer_token(legacy_bearer),
        request.address,
    )

    if request.action == "hit":
        view = await controller.hit(request.address)
    else:
        view = await controller.stand(request.address)
    return SessionResponse.from_view(view)
