"""
Rank comparison logic with support for revolution.

Lower ranks are stronger: the 1 (Dalmuti) beats everything, the 12 (Peasant)
beats nothing. Revolution flips the ordering.
"""

from typing import Dict, List, Sequence

from .constants import JOKER, JOKER_ONLY_RANK, JOKER_VALUE
from .models import Card, Rank


def card_value(rank: Rank) -> int:
    """Numeric value used for sorting. Jokers count as 0."""
    if rank == JOKER:
        return JOKER_VALUE
    return rank


def sort_hand(cards: Sequence[Card], is_revolution: bool = False) -> List[Card]:
    """
    Sort a hand for display and grouping.

    Ascending by value normally, descending during revolution. Equal values
    keep their relative order.
    """
    return sorted(cards, key=lambda c: card_value(c.rank), reverse=is_revolution)


def effective_rank(cards: Sequence[Card]) -> int:
    """
    Rank a set of cards compares as.

    Jokers take the rank of the cards they accompany; a set made only of
    Jokers compares as JOKER_ONLY_RANK.
    """
    for card in cards:
        if card.rank != JOKER:
            return card.rank
    return JOKER_ONLY_RANK


def beats(rank_a: int, rank_b: int, is_revolution: bool = False) -> bool:
    """Check if rank_a beats rank_b under the current polarity."""
    if is_revolution:
        return rank_a > rank_b
    return rank_a < rank_b


def strength_key(rank: int, is_revolution: bool = False) -> int:
    """Sort key where smaller means stronger."""
    return -rank if is_revolution else rank


def group_by_rank(cards: Sequence[Card]) -> Dict[Rank, List[Card]]:
    """Group cards by rank, keeping first-seen order of ranks and cards."""
    groups: Dict[Rank, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.rank, []).append(card)
    return groups
