"""Wallet signature authentication and bearer tokens."""

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys.exceptions import BadSignature as BadKeySignature
from eth_keys.exceptions import ValidationError as KeyValidationError
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from core.errors import (
    AddressMismatch,
    ExpiredToken,
    InvalidSignature,
    InvalidToken,
    MissingToken,
    ValidationError,
)

logger = logging.getLogger(__name__)

TOKEN_TTL = 3600  # One hour, in seconds

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(address: str | None) -> str:
    """
    Validate a wallet address and return its lower-cased form.

    Raises:
        ValidationError: If the address is missing or not 20 hex bytes
    """
    if not address:
        raise ValidationError("No address provided")
    address = address.strip()
    if not _ADDRESS_RE.match(address):
        raise ValidationError(f"Invalid address: {address}")
    return address.lower()


@dataclass(frozen=True)
class AuthToken:
    """A decoded bearer token."""

    address: str
    issued_at: datetime
    expires_at: datetime
    token: str

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now > self.expires_at


def recover_signer(message: str, signature: str) -> str:
    """Recover the address that produced a personal-sign signature."""
    return Account.recover_message(encode_defunct(text=message), signature=signature)


class Authenticator:
    """Verify wallet signatures and issue/validate short-lived bearer tokens."""

    def __init__(
        self,
        secret_key: str,
        ttl: int = TOKEN_TTL,
        salt: str = "blackjack-auth",
    ) -> None:
        """
        Initialize the authenticator.

        Args:
            secret_key: Key used to sign bearer tokens
            ttl: Token lifetime in seconds
            salt: Namespace for the token serializer
        """
        self._ttl = ttl
        self._serializer = URLSafeTimedSerializer(secret_key, salt=salt)

    @property
    def ttl(self) -> int:
        return self._ttl

    def issue_challenge(self, address: str, now: datetime | None = None) -> str:
        """
        Build a human-readable message for the wallet to sign.

        Nothing is stored; the signature is checked by recomputation.
        """
        address = normalize_address(address)
        now = now or datetime.now(timezone.utc)
        nonce = secrets.token_hex(8)
        return (
            f"Welcome to Web3 game black jack at {now.isoformat()}\n\n"
            f"Address: {address}\n"
            f"Nonce: {nonce}"
        )

    def authenticate(self, address: str, message: str, signature: str) -> AuthToken:
        """
        Check that ``signature`` over ``message`` was made by ``address``.

        Args:
            address: Wallet address claiming to have signed
            message: The signed challenge text
            signature: Hex-encoded 65-byte signature

        Returns:
            A freshly minted bearer token for the address

        Raises:
            ValidationError: If a field is missing or the address is malformed
            InvalidSignature: If the signature does not match the address
        """
        address = normalize_address(address)
        if not message or not signature:
            raise ValidationError("message and signature are required")

        try:
            signer = recover_signer(message, signature)
        except (ValueError, TypeError, BadKeySignature, KeyValidationError) as exc:
            logger.warning("Unreadable signature for %s: %s", address, exc)
            raise InvalidSignature() from exc

        if signer.lower() != address:
            logger.warning("Signature for %s recovered to %s", address, signer)
            raise InvalidSignature()

        token = self._serializer.dumps({"address": address})
        logger.info("Issued token for %s", address)
        return self.decode(token)

    def decode(self, token: str) -> AuthToken:
        """
        Verify a token's signature and age.

        Raises:
            ExpiredToken: If the token is older than the configured lifetime
            InvalidToken: If the token was tampered with or is malformed
        """
        try:
            payload, issued_at = self._serializer.loads(
                token, max_age=self._ttl, return_timestamp=True
            )
        except SignatureExpired as exc:
            raise ExpiredToken() from exc
        except BadSignature as exc:
            raise InvalidToken() from exc

        if not isinstance(payload, dict) or "address" not in payload:
            raise InvalidToken()

        return AuthToken(
            address=payload["address"],
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self._ttl),
            token=token,
        )

    def authorize(self, token: str | None, claimed_address: str | None) -> AuthToken:
        """
        Gate a mutating request on a valid token for the claimed address.

        Raises:
            MissingToken: If no token was supplied
            ExpiredToken: If the token is past its expiry
            InvalidToken: If the token cannot be verified
            AddressMismatch: If the token belongs to another address
        """
        if not token:
            raise MissingToken()

        decoded = self.decode(token)
        if not claimed_address or decoded.address.lower() != claimed_address.strip().lower():
            logger.warning(
                "Token for %s presented for %s", decoded.address, claimed_address
            )
            raise AddressMismatch()
        return decoded
