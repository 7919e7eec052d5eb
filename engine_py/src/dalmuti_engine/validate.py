"""
Play legality for card sets.
"""

from typing import List, Optional, Sequence

from .comparator import beats, effective_rank
from .constants import JOKER, PHASE_PLAYING, REVOLUTION_MIN_CARDS
from .errors import (
    ALREADY_FINISHED, ILLEGAL_PLAY, INVALID_STATE, NOT_FOUND, NOT_YOUR_TURN
)
from .models import Card, Game, Player, Turn


class ValidationResult:
    """Result of play validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message

    @classmethod
    def success(cls) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)


def is_same_rank_set(cards: Sequence[Card]) -> bool:
    """Check that all non-Joker cards share one rank. Jokers go with anything."""
    ranks = {card.rank for card in cards if card.rank != JOKER}
    return len(ranks) <= 1


def can_play(
    proposed: Sequence[Card],
    table_turn: Optional[Turn],
    is_revolution: bool = False
) -> bool:
    """
    Decide whether a set of cards may be played on the table.

    A lead (empty table) accepts any non-empty same-rank set, of any size.
    A follow must match the table's card count and strictly beat its
    effective rank: lower wins normally, higher wins during revolution.
    """
    if not proposed or not is_same_rank_set(proposed):
        return False

    if table_turn is None:
        return True

    if len(proposed) != len(table_turn.cards):
        return False

    return beats(effective_rank(proposed), effective_rank(table_turn.cards), is_revolution)


def is_revolution_trigger(cards: Sequence[Card]) -> bool:
    """Eight or more cards whose non-Joker cards share one rank."""
    if len(cards) < REVOLUTION_MIN_CARDS:
        return False
    non_jokers = [card for card in cards if card.rank != JOKER]
    if not non_jokers:
        return False
    return is_same_rank_set(non_jokers)


def validate_ownership(player: Player, cards: Sequence[Card]) -> bool:
    """Check the player holds every card, each named once."""
    card_ids = [card.id for card in cards]
    if len(set(card_ids)) != len(card_ids):
        return False
    hand_ids = {card.id for card in player.cards}
    return all(card_id in hand_ids for card_id in card_ids)


def validate_play(game: Game, player_id: str, cards: List[Card]) -> ValidationResult:
    """
    Validate a card play attempt.

    Args:
        game: Current game
        player_id: ID of player attempting the play
        cards: Cards being played

    Returns:
        ValidationResult with validation outcome
    """
    player = game.get_player(player_id)
    if player is None:
        return ValidationResult.error(NOT_FOUND, f"Player {player_id} is not in this game")

    if game.phase != PHASE_PLAYING:
        return ValidationResult.error(
            INVALID_STATE,
            f"Game is not in play phase (current: {game.phase})"
        )

    if game.current_player.id != player_id:
        return ValidationResult.error(NOT_YOUR_TURN, "Not your turn")

    if player.has_finished:
        return ValidationResult.error(ALREADY_FINISHED, "You have already finished")

    if not cards:
        return ValidationResult.error(ILLEGAL_PLAY, "No cards to play")

    if not validate_ownership(player, cards):
        return ValidationResult.error(ILLEGAL_PLAY, "You don't own all of those cards")

    if not is_same_rank_set(cards):
        return ValidationResult.error(ILLEGAL_PLAY, "All non-Joker cards must be same rank")

    table = game.current_turn
    if table is not None and len(cards) != len(table.cards):
        return ValidationResult.error(ILLEGAL_PLAY, f"Must play exactly {len(table.cards)} cards")

    if not can_play(cards, table, game.is_revolution):
        return ValidationResult.error(
            ILLEGAL_PLAY,
            f"Must play stronger than {effective_rank(table.cards)}"
        )

    return ValidationResult.success()
