"""Tests for wallet signature authentication and bearer tokens."""

import time as time_module
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from conftest import sign
from core.auth import Authenticator, normalize_address, recover_signer
from core.errors import (
    AddressMismatch,
    AuthError,
    ExpiredToken,
    InvalidSignature,
    InvalidToken,
    MissingToken,
    ValidationError,
)


class TestNormalizeAddress:
    """Tests for address validation."""

    def test_lowercases(self):
        address = "0xAbC0000000000000000000000000000000000DeF"
        assert normalize_address(address) == address.lower()

    def test_strips_whitespace(self):
        address = " 0x" + "a" * 40 + " "
        assert normalize_address(address) == "0x" + "a" * 40

    @pytest.mark.parametrize("bad", [None, "", "0x123", "a" * 42, "0x" + "g" * 40])
    def test_rejects_malformed(self, bad):
        with pytest.raises(ValidationError):
            normalize_address(bad)


class TestChallenge:
    """Tests for challenge issuance."""

    def test_challenge_names_address(self, authenticator, wallet):
        challenge = authenticator.issue_challenge(wallet.address)
        assert challenge.startswith("Welcome to Web3 game black jack at ")
        assert wallet.address.lower() in challenge

    def test_challenges_are_fresh(self, authenticator, wallet):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        first = authenticator.issue_challenge(wallet.address, now=now)
        second = authenticator.issue_challenge(wallet.address, now=now)
        assert first != second


class TestAuthenticate:
    """Tests for signature verification and token minting."""

    def test_recover_signer(self, wallet):
        signature = sign(wallet.key, "hello")
        assert recover_signer("hello", signature) == wallet.address

    def test_valid_signature_mints_token(self, authenticator, wallet):
        message = authenticator.issue_challenge(wallet.address)
        token = authenticator.authenticate(wallet.address, message, sign(wallet.key, message))

        assert token.address == wallet.address.lower()
        assert token.expires_at - token.issued_at == timedelta(hours=1)
        assert token.token
        assert not token.is_expired()

    def test_checksum_case_does_not_matter(self, authenticator, wallet):
        message = "sign me"
        token = authenticator.authenticate(
            wallet.address.upper().replace("0X", "0x"), message, sign(wallet.key, message)
        )
        assert token.address == wallet.address.lower()

    def test_signature_from_other_wallet(self, authenticator, wallet, other_wallet):
        message = "sign me"
        with pytest.raises(InvalidSignature):
            authenticator.authenticate(wallet.address, message, sign(other_wallet.key, message))

    def test_signature_over_other_message(self, authenticator, wallet):
        with pytest.raises(InvalidSignature):
            authenticator.authenticate(wallet.address, "original", sign(wallet.key, "tampered"))

    @pytest.mark.parametrize("garbage", ["0x1234", "not-hex", "0x" + "00" * 65])
    def test_malformed_signature(self, authenticator, wallet, garbage):
        with pytest.raises(InvalidSignature):
            authenticator.authenticate(wallet.address, "sign me", garbage)

    def test_missing_fields(self, authenticator, wallet):
        with pytest.raises(ValidationError):
            authenticator.authenticate(wallet.address, "", "")
        with pytest.raises(ValidationError):
            authenticator.authenticate("", "sign me", "0x00")

    def test_invalid_signature_is_auth_error(self):
        assert issubclass(InvalidSignature, AuthError)
        assert InvalidSignature().message == "invalid signature"


class TestAuthorize:
    """Tests for bearer token validation."""

    @pytest.fixture
    def token(self, authenticator, wallet):
        message = "sign me"
        return authenticator.authenticate(wallet.address, message, sign(wallet.key, message))

    def test_valid_token(self, authenticator, wallet, token):
        decoded = authenticator.authorize(token.token, wallet.address)
        assert decoded.address == wallet.address.lower()

    def test_claimed_address_case_insensitive(self, authenticator, wallet, token):
        authenticator.authorize(token.token, wallet.address.lower())
        authenticator.authorize(token.token, wallet.address.upper().replace("0X", "0x"))

    @pytest.mark.parametrize("missing", [None, ""])
    def test_missing_token(self, authenticator, wallet, missing):
        with pytest.raises(MissingToken):
            authenticator.authorize(missing, wallet.address)

    def test_address_mismatch(self, authenticator, other_wallet, token):
        with pytest.raises(AddressMismatch):
            authenticator.authorize(token.token, other_wallet.address)

    def test_missing_claimed_address(self, authenticator, token):
        with pytest.raises(AddressMismatch):
            authenticator.authorize(token.token, None)

    def test_expired_token(self, authenticator, wallet, token):
        original_time = time_module.time

        def two_hours_later():
            return original_time() + 7200

        with patch("time.time", two_hours_later):
            with pytest.raises(ExpiredToken):
                authenticator.authorize(token.token, wallet.address)

    def test_expiry_boundary(self, token):
        assert not token.is_expired(now=token.expires_at)
        assert token.is_expired(now=token.expires_at + timedelta(seconds=1))

    def test_token_valid_just_before_expiry(self, authenticator, wallet, token):
        original_time = time_module.time

        def fifty_nine_minutes_later():
            return original_time() + 59 * 60

        with patch("time.time", fifty_nine_minutes_later):
            authenticator.authorize(token.token, wallet.address)

    def test_expiry_checked_before_address(self, authenticator, other_wallet, token):
        original_time = time_module.time

        with patch("time.time", lambda: original_time() + 7200):
            with pytest.raises(ExpiredToken):
                authenticator.authorize(token.token, other_wallet.address)

    def test_tampered_token(self, authenticator, wallet, token):
        tampered = ("A" if token.token[0] != "A" else "B") + token.token[1:]
        with pytest.raises(InvalidToken):
            authenticator.authorize(tampered, wallet.address)

    def test_token_from_other_secret(self, wallet, token):
        other = Authenticator(secret_key="another-secret")
        with pytest.raises(InvalidToken):
            other.authorize(token.token, wallet.address)

    def test_garbage_token(self, authenticator, wallet):
        with pytest.raises(InvalidToken):
            authenticator.authorize("not.a.token", wallet.address)
