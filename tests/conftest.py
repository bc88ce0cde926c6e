"""Pytest fixtures for blackjack session tests."""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SCORE_STORE", "memory")

import pytest
from random import Random

from eth_account import Account
from eth_account.messages import encode_defunct

from core.cards import Card, full_deck
from core.auth import Authenticator
from core.hand import Hand


class TopOfDeckRandom(Random):
    """Random source that always draws from the front of the deck."""

    def sample(self, population, k, *, counts=None):  # type: ignore[override]
        return list(population)[:k]


def cards(*specs: str) -> list[Card]:
    """Build cards from strings like 'AS', 'KH', '10D'."""
    return [Card.from_string(s) for s in specs]


def stacked_deck(*front: str):
    """
    Deck factory yielding ``front`` first, then the rest of the 52 cards.

    Paired with TopOfDeckRandom the front cards are dealt in order.
    """
    front_cards = cards(*front)

    def factory() -> list[Card]:
        rest = [c for c in full_deck() if c not in front_cards]
        return front_cards + rest

    return factory


def sign(private_key: str, message: str) -> str:
    """Personal-sign ``message`` and return the 0x-prefixed signature."""
    signed = Account.sign_message(encode_defunct(text=message), private_key=private_key)
    return "0x" + bytes(signed.signature).hex()


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def top_rng():
    """Random source that deals from the front of the deck."""
    return TopOfDeckRandom()


@pytest.fixture
def empty_hand():
    """An empty hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards("AS", "KH"))


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards("AS", "6H"))


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards("10S", "6H"))


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards("10S", "6H", "KC"))


@pytest.fixture
def wallet():
    """A throwaway wallet account."""
    return Account.from_key("0x" + "4c" * 32)


@pytest.fixture
def other_wallet():
    """A second wallet, distinct from ``wallet``."""
    return Account.from_key("0x" + "5d" * 32)


@pytest.fixture
def authenticator():
    """Authenticator with a fixed secret."""
    return Authenticator(secret_key="test-secret")
