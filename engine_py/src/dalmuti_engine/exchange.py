"""
Tax phase logic: pairing players and moving cards between hands.
"""

import copy
import logging
import time
from typing import List, Optional

from .comparator import sort_hand
from .constants import (
    PHASE_PLAYING, PHASE_TAX, TAX_SECOND_COUNT, TAX_SECOND_PAIR_MIN_PLAYERS, TAX_TOP_COUNT
)
from .errors import ILLEGAL_PLAY, INVALID_STATE, NOT_FOUND, GameError
from .models import Card, Game, Player, TaxRequest
from .validate import validate_ownership

logger = logging.getLogger(__name__)


def calculate_tax_requests(players: List[Player]) -> List[TaxRequest]:
    """
    Pair players for the tax exchange.

    Players are ordered by previous position. The last pays the first two
    cards; with four or more players the second-to-last pays the second one
    card.
    """
    requests = []
    ordered = sorted(players, key=lambda p: p.position)

    if len(ordered) >= 2:
        requests.append(TaxRequest(
            from_player_id=ordered[-1].id,
            to_player_id=ordered[0].id,
            card_count=TAX_TOP_COUNT,
        ))

    if len(ordered) >= TAX_SECOND_PAIR_MIN_PLAYERS:
        requests.append(TaxRequest(
            from_player_id=ordered[-2].id,
            to_player_id=ordered[1].id,
            card_count=TAX_SECOND_COUNT,
        ))

    return requests


def apply_tax(game: Game, from_player_id: str, to_player_id: str, cards: List[Card]) -> Game:
    """
    Move cards from one hand to another.

    The receiver's hand is re-sorted under the current revolution state. The
    phase is left alone.
    """
    state = copy.deepcopy(game)
    giver = state.get_player(from_player_id)
    receiver = state.get_player(to_player_id)
    if giver is None or receiver is None:
        raise GameError(NOT_FOUND, "Tax player not found")

    moved_ids = {card.id for card in cards}
    giver.cards = [c for c in giver.cards if c.id not in moved_ids]
    receiver.cards = sort_hand(receiver.cards + list(cards), state.is_revolution)

    state.version += 1
    return state


def get_pending_tax(game: Game, player_id: str) -> Optional[TaxRequest]:
    """Tax request the player still owes, if any."""
    return next((r for r in game.pending_tax if r.from_player_id == player_id), None)


def _finish_tax_phase(game: Game):
    game.pending_tax = []
    game.tax_phase_complete = True
    game.phase = PHASE_PLAYING
    game.turn_start_time = time.time() if game.game_options.turn_time_limit else None
    logger.info("Tax phase complete in room %s", game.room_id)


def submit_tax(game: Game, player_id: str, cards: List[Card]) -> Game:
    """
    Pay a pending tax request.

    The giver must owe a request, name exactly the requested number of cards
    and hold all of them. When the last request is paid the game moves on to
    the play phase.
    """
    if game.phase != PHASE_TAX:
        raise GameError(INVALID_STATE, f"Game is not in tax phase (current: {game.phase})")

    player = game.get_player(player_id)
    if player is None:
        raise GameError(NOT_FOUND, f"Player {player_id} is not in this game")

    request = get_pending_tax(game, player_id)
    if request is None:
        raise GameError(INVALID_STATE, "You have no tax to pay")

    if len(cards) != request.card_count:
        raise GameError(ILLEGAL_PLAY, f"Must give exactly {request.card_count} cards")

    if not validate_ownership(player, cards):
        raise GameError(ILLEGAL_PLAY, "You don't own all of those cards")

    # Use the hand's own card objects so ranks can't be forged
    hand = {c.id: c for c in player.cards}
    state = apply_tax(game, request.from_player_id, request.to_player_id, [hand[c.id] for c in cards])
    state.pending_tax = [r for r in state.pending_tax if r != request]
    logger.info(
        "%s paid %d cards of tax to %s",
        request.from_player_id, request.card_count, request.to_player_id
    )

    if not state.pending_tax:
        _finish_tax_phase(state)
    return state
