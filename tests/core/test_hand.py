"""Tests for Hand evaluation."""

import itertools

import pytest

from conftest import cards
from core.cards import Card, Rank, Suit
from core.hand import Hand, hand_value


class TestHand:
    """Tests for the Hand class."""

    def test_empty_hand(self, empty_hand):
        """Test empty hand properties."""
        assert len(empty_hand) == 0
        assert empty_hand.value == 0
        assert not empty_hand.is_soft
        assert not empty_hand.is_blackjack
        assert not empty_hand.is_busted

    def test_add_card(self, empty_hand):
        """Test adding cards to hand."""
        empty_hand.add_card(Card(Rank.TEN, Suit.SPADES))
        assert len(empty_hand) == 1
        assert empty_hand.value == 10

    def test_hard_hand_value(self, hard_16_hand):
        assert hard_16_hand.value == 16
        assert not hard_16_hand.is_soft

    def test_soft_hand_value(self, soft_17_hand):
        assert soft_17_hand.value == 17
        assert soft_17_hand.is_soft

    def test_blackjack(self, blackjack_hand):
        assert blackjack_hand.is_blackjack
        assert blackjack_hand.value == 21

    def test_three_card_21_is_not_natural(self):
        hand = Hand(cards("7S", "7H", "7C"))
        assert hand.value == 21
        assert not hand.is_blackjack

    def test_bust(self, bust_hand):
        assert bust_hand.is_busted
        assert bust_hand.value == 26

    def test_soft_to_hard_transition(self):
        """Test ace switching from 11 to 1."""
        hand = Hand()
        hand.add_card(Card(Rank.ACE, Suit.SPADES))
        assert hand.value == 11
        hand.add_card(Card(Rank.FIVE, Suit.HEARTS))
        assert hand.value == 16
        assert hand.is_soft
        hand.add_card(Card(Rank.KING, Suit.CLUBS))
        assert hand.value == 16
        assert not hand.is_soft

    def test_str(self, soft_17_hand, bust_hand):
        assert str(soft_17_hand) == "A♠ 6♥ (soft 17)"
        assert str(bust_hand).endswith("(BUST)")

    def test_iteration_preserves_order(self):
        hand = Hand(cards("2S", "KD", "AH"))
        assert [str(c) for c in hand] == ["2♠", "K♦", "A♥"]


class TestHandValue:
    """Tests for ace demotion in hand_value."""

    @pytest.mark.parametrize(
        "specs, expected",
        [
            (("AS", "AH"), 12),
            (("AS", "AH", "AD"), 13),
            (("AS", "AH", "AD", "AC"), 14),
            (("AS", "AH", "9D"), 21),
            (("AS", "KH", "QD"), 21),
            (("AS", "AH", "KD", "QC"), 22),
            (("5S", "6H", "KD"), 21),
            (("KS", "QH", "2D"), 22),
            (("JS", "QH"), 20),
        ],
    )
    def test_values(self, specs, expected):
        assert hand_value(cards(*specs)) == expected

    def test_empty_is_zero(self):
        assert hand_value([]) == 0

    @pytest.mark.parametrize(
        "specs",
        [("AS", "5H", "KD", "AC"), ("AS", "AH", "9D", "2C"), ("3S", "AH", "QD")],
    )
    def test_order_independent(self, specs):
        """Value is the same for every ordering of the same cards."""
        values = {hand_value(list(p)) for p in itertools.permutations(cards(*specs))}
        assert len(values) == 1

    @pytest.mark.parametrize(
        "specs",
        [
            ("AS", "AH", "AD", "AC", "7S"),
            ("AS", "AH", "KD", "9C"),
            ("AS", "6H"),
            ("AS", "AH", "AD", "8C"),
            ("KS", "QH", "5D"),
        ],
    )
    def test_never_leaves_a_demotable_ace(self, specs):
        """A bust total never hides an ace still counted as 11."""
        hand = cards(*specs)
        value = hand_value(hand)
        aces = sum(1 for c in hand if c.is_ace)
        hard_total = sum(1 if c.is_ace else c.value for c in hand)

        if value > 21:
            assert value == hard_total
        else:
            # Soft aces only while they fit under 21
            soft_aces = (value - hard_total) // 10
            assert soft_aces <= min(aces, 1)
            assert value - 10 * soft_aces == hard_total
