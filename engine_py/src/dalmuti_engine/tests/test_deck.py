"""
Tests for deck construction, shuffling, dealing and hand ordering.
"""

import random
from collections import Counter

import pytest
from dalmuti_engine.comparator import card_value, sort_hand
from dalmuti_engine.constants import DECK_SIZE, JOKER
from dalmuti_engine.shuffle import create_deck, deal_cards, shuffle_deck
from dalmuti_engine.tests.helpers import cards_of


def test_deck_has_80_cards_with_rank_r_appearing_r_times():
    deck = create_deck()
    assert len(deck) == DECK_SIZE == 80

    counts = Counter(card.rank for card in deck)
    for rank in range(1, 13):
        assert counts[rank] == rank
    assert counts[JOKER] == 2


def test_deck_card_ids_are_unique():
    deck = create_deck()
    assert len({card.id for card in deck}) == len(deck)


def test_deck_construction_is_deterministic():
    assert [c.id for c in create_deck()] == [c.id for c in create_deck()]
    assert create_deck()[0].rank == 1
    assert create_deck()[-1].rank == JOKER


def test_shuffle_is_a_permutation_and_leaves_input_alone():
    deck = create_deck()
    original_ids = [c.id for c in deck]

    shuffled = shuffle_deck(deck, seed=3)

    assert [c.id for c in deck] == original_ids
    assert sorted(c.id for c in shuffled) == sorted(original_ids)


def test_seeded_shuffle_is_reproducible():
    first = shuffle_deck(create_deck(), seed=42)
    second = shuffle_deck(create_deck(), seed=42)
    other = shuffle_deck(create_deck(), seed=43)

    assert [c.id for c in first] == [c.id for c in second]
    assert [c.id for c in first] != [c.id for c in other]


def test_shuffle_reaches_every_ordering_evenly():
    """Each ordering of three cards shows up about a sixth of the time."""
    rng = random.Random(1234)
    cards = cards_of(5, 3)
    seen = Counter(
        tuple(c.id for c in shuffle_deck(cards, rng=rng))
        for _ in range(3000)
    )

    assert len(seen) == 6
    for count in seen.values():
        assert 380 <= count <= 620


@pytest.mark.parametrize("player_count", [1, 2, 3, 4, 5, 6, 7, 8])
def test_deal_sizes_differ_by_at_most_one(player_count):
    hands = deal_cards(player_count, seed=7)
    sizes = [len(hand) for hand in hands]

    assert len(hands) == player_count
    assert sum(sizes) == 80
    assert max(sizes) - min(sizes) <= 1
    # The earlier seats get the extra cards
    assert sizes == sorted(sizes, reverse=True)


def test_deal_hands_are_disjoint_and_cover_the_deck():
    hands = deal_cards(3, seed=11)
    all_ids = [card.id for hand in hands for card in hand]

    assert len(all_ids) == len(set(all_ids)) == 80
    assert set(all_ids) == {card.id for card in create_deck()}


def test_deal_is_round_robin_over_the_shuffled_deck():
    shuffled = shuffle_deck(create_deck(), seed=5)
    hands = deal_cards(4, seed=5)

    for i, card in enumerate(shuffled):
        assert card in hands[i % 4]


def test_deal_rejects_empty_table():
    with pytest.raises(ValueError):
        deal_cards(0)


def test_card_value_counts_jokers_as_zero():
    assert card_value(JOKER) == 0
    assert card_value(1) == 1
    assert card_value(12) == 12


def test_sort_hand_ascending_with_jokers_first():
    hand = cards_of(7, 1) + cards_of(JOKER, 1) + cards_of(2, 1) + cards_of(12, 1)
    assert [c.rank for c in sort_hand(hand)] == [JOKER, 2, 7, 12]


def test_sort_hand_descending_during_revolution():
    hand = cards_of(7, 1) + cards_of(JOKER, 1) + cards_of(2, 1) + cards_of(12, 1)
    assert [c.rank for c in sort_hand(hand, is_revolution=True)] == [12, 7, 2, JOKER]


def test_sort_hand_is_stable_for_equal_values():
    hand = cards_of(4, 3) + cards_of(1, 1)
    assert [c.id for c in sort_hand(hand)] == ["1-0", "4-0", "4-1", "4-2"]
