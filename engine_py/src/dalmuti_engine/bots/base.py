"""
Bot actions and the candidate discovery shared by every difficulty tier.
"""

from typing import List, Optional, Sequence, Tuple

from ..comparator import group_by_rank
from ..constants import JOKER
from ..models import Card, Rank, Turn
from ..validate import can_play


class BotAction:
    """Represents a bot action."""

    PLAY = 'play'
    PASS = 'pass'

    def __init__(self, action_type: str, **kwargs):
        self.type = action_type
        self.data = kwargs

    @classmethod
    def play(cls, cards: List[Card]) -> 'BotAction':
        """Create a play action."""
        return cls(cls.PLAY, cards=list(cards))

    @classmethod
    def pass_turn(cls) -> 'BotAction':
        """Create a pass action."""
        return cls(cls.PASS)

    @property
    def is_pass(self) -> bool:
        return self.type == self.PASS

    @property
    def cards(self) -> List[Card]:
        return self.data.get('cards', [])

    def __repr__(self) -> str:
        if self.is_pass:
            return "BotAction(pass)"
        return f"BotAction(play {[c.id for c in self.cards]})"


def ranked_groups(hand: Sequence[Card]) -> List[Tuple[Rank, List[Card]]]:
    """Same-rank groups in ascending numeric rank, with the Jokers last."""
    groups = group_by_rank(hand)
    return sorted(
        groups.items(),
        key=lambda item: (item[0] == JOKER, 0 if item[0] == JOKER else item[0])
    )


def lead_set(hand: Sequence[Card]) -> List[Card]:
    """
    Cards to lead with on an empty table: the largest same-rank group.

    The Jokers count as a group of their own. Ties go to the lowest rank,
    whatever the revolution state.
    """
    return max((cards for _, cards in ranked_groups(hand)), key=len, default=[])


def find_playable_sets(
    hand: Sequence[Card],
    table_turn: Turn,
    is_revolution: bool
) -> List[List[Card]]:
    """
    Every set of the table's size that legally beats it.

    Plain same-rank sets come first, then sets where one to all of the
    Jokers stand in for missing cards of another rank.
    """
    required = len(table_turn.cards)
    groups = ranked_groups(hand)
    playable = []

    for rank, group in groups:
        if len(group) < required:
            continue
        for i in range(len(group) - required + 1):
            subset = group[i:i + required]
            if can_play(subset, table_turn, is_revolution):
                playable.append(subset)

    jokers = dict(groups).get(JOKER, [])
    if jokers:
        for rank, group in groups:
            if rank == JOKER:
                continue
            if len(group) + len(jokers) < required:
                continue
            for joker_use in range(1, min(len(jokers), required) + 1):
                normal = required - joker_use
                if len(group) < normal:
                    continue
                combo = group[:normal] + jokers[:joker_use]
                if can_play(combo, table_turn, is_revolution):
                    playable.append(combo)

    return playable


def primary_rank(cards: Sequence[Card]) -> Optional[Rank]:
    """Rank of the first non-Joker card, or JOKER for a Joker-only set."""
    for card in cards:
        if card.rank != JOKER:
            return card.rank
    return JOKER if cards else None
