"""
Difficulty-tiered play selection.

Strategy:
- Easy plays the first legal set it finds
- Medium sheds the rank it holds most of
- Hard blocks opponents close to going out with its strongest set, sheds
  bulk early and races with strong sets late
- Every tier leads with its largest group and pays tax with its weakest cards
"""

import logging
from typing import List, Optional

from ..comparator import card_value, effective_rank, group_by_rank, strength_key
from ..constants import DIFFICULTY_EASY, DIFFICULTY_HARD, DIFFICULTY_MEDIUM
from ..exchange import get_pending_tax
from ..models import Card, Game, Player
from .base import BotAction, find_playable_sets, lead_set, primary_rank

logger = logging.getLogger(__name__)

# Opponents holding this many cards or fewer are worth blocking
BLOCK_THRESHOLD = 3
# Hard bots shed bulk above this hand size and race at or below the next
BULK_HAND_SIZE = 10
ENDGAME_HAND_SIZE = 5


def easy_choice(playable: List[List[Card]]) -> List[Card]:
    return playable[0]


def medium_choice(playable: List[List[Card]], player: Player) -> List[Card]:
    """The set whose rank the player holds the most of."""
    counts = {rank: len(cards) for rank, cards in group_by_rank(player.cards).items()}
    return max(playable, key=lambda cards: counts.get(primary_rank(cards), 0))


def strongest_choice(playable: List[List[Card]], is_revolution: bool) -> List[Card]:
    return min(playable, key=lambda cards: strength_key(effective_rank(cards), is_revolution))


def hard_choice(playable: List[List[Card]], game: Game, player: Player) -> List[Card]:
    close_to_winning = [
        p for p in game.players
        if p.id != player.id and not p.has_finished and len(p.cards) <= BLOCK_THRESHOLD
    ]
    if close_to_winning:
        return strongest_choice(playable, game.is_revolution)

    if len(player.cards) > BULK_HAND_SIZE:
        return medium_choice(playable, player)

    if len(player.cards) <= ENDGAME_HAND_SIZE:
        return strongest_choice(playable, game.is_revolution)

    return medium_choice(playable, player)


def choose_action(game: Game, player_id: str, difficulty: str = DIFFICULTY_MEDIUM) -> BotAction:
    """
    Choose a play or a pass for the given player.

    Args:
        game: Current game, not modified
        player_id: The AI player to act for
        difficulty: One of easy, medium, hard

    Returns:
        BotAction to take
    """
    player = game.get_player(player_id)
    if player is None:
        raise ValueError(f"Player {player_id} is not in this game")

    if game.current_turn is None:
        cards = lead_set(player.cards)
        if not cards:
            return BotAction.pass_turn()
        return BotAction.play(cards)

    playable = find_playable_sets(player.cards, game.current_turn, game.is_revolution)
    if not playable:
        return BotAction.pass_turn()

    if difficulty == DIFFICULTY_EASY:
        cards = easy_choice(playable)
    elif difficulty == DIFFICULTY_MEDIUM:
        cards = medium_choice(playable, player)
    elif difficulty == DIFFICULTY_HARD:
        cards = hard_choice(playable, game, player)
    else:
        raise ValueError(f"Unknown difficulty: {difficulty}")

    logger.debug("%s (%s) picked %s", player.name, difficulty, [c.id for c in cards])
    return BotAction.play(cards)


def select_tax_cards(player: Player, count: int, is_revolution: bool = False) -> List[Card]:
    """The count weakest cards: highest values normally, lowest during revolution."""
    ordered = sorted(player.cards, key=lambda c: card_value(c.rank), reverse=not is_revolution)
    return ordered[:count]


def choose_tax_cards(game: Game, player_id: str) -> Optional[List[Card]]:
    """Cards to pay the player's pending tax with, or None if nothing is owed."""
    request = get_pending_tax(game, player_id)
    player = game.get_player(player_id)
    if request is None or player is None:
        return None
    return select_tax_cards(player, request.card_count, game.is_revolution)
