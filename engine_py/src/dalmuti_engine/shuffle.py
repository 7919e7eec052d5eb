"""
Card creation, shuffling and dealing utilities.
"""

import random
from typing import List, Optional

from .constants import JOKER, JOKER_COUNT, MAX_RANK, MIN_RANK
from .models import Card


def create_deck() -> List[Card]:
    """
    Create the Dalmuti deck.

    Rank r (1..12) appears exactly r times, followed by two Jokers.
    Construction order is deterministic: rank 1 first, ascending.
    """
    deck = []

    for rank in range(MIN_RANK, MAX_RANK + 1):
        for i in range(rank):
            deck.append(Card(rank=rank, id=f"{rank}-{i}"))

    for i in range(1, JOKER_COUNT + 1):
        deck.append(Card(rank=JOKER, id=f"{JOKER}-{i}"))

    return deck


def shuffle_deck(
    deck: List[Card],
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None
) -> List[Card]:
    """
    Shuffle a deck with an unbiased Fisher-Yates pass.

    Args:
        deck: Cards to shuffle (left untouched)
        seed: Optional seed for deterministic shuffling
        rng: Optional random source, takes precedence over seed

    Returns:
        Shuffled copy of the deck
    """
    if rng is None:
        rng = random.Random(seed) if seed is not None else random.Random()

    deck_copy = list(deck)
    for i in range(len(deck_copy) - 1, 0, -1):
        j = rng.randint(0, i)
        deck_copy[i], deck_copy[j] = deck_copy[j], deck_copy[i]

    return deck_copy


def deal_cards(player_count: int, seed: Optional[int] = None) -> List[List[Card]]:
    """
    Shuffle a fresh deck and deal it round-robin.

    Card i goes to hand ``i % player_count``, so hand sizes differ by at most one.
    """
    if player_count < 1:
        raise ValueError(f"Cannot deal to {player_count} players")

    deck = shuffle_deck(create_deck(), seed=seed)
    hands: List[List[Card]] = [[] for _ in range(player_count)]

    for i, card in enumerate(deck):
        hands[i % player_count].append(card)

    return hands
