"""
Game state machine: dealing, playing, passing and game completion.

Every transition takes a Game and returns a new one; the input is never
mutated. Rejected transitions raise GameError.
"""

import copy
import logging
import time
from typing import List, Optional

from .comparator import sort_hand
from .constants import PHASE_FINISHED, PHASE_PLAYING, PHASE_TAX
from .errors import (
    ALREADY_FINISHED, INVALID_STATE, NOT_FOUND, NOT_YOUR_TURN, GameError
)
from .exchange import calculate_tax_requests
from .models import Card, Game, GameOptions, Player, Turn
from .ranking import assign_titles, carry_over_positions
from .shuffle import deal_cards
from .validate import is_revolution_trigger, validate_play

logger = logging.getLogger(__name__)


def create_game(
    players: List[Player],
    room_id: str,
    options: GameOptions,
    is_restart: bool = False,
    previous_game: Optional[Game] = None,
    seed: Optional[int] = None,
) -> Game:
    """
    Deal a new game for the given players.

    Args:
        players: Room members, in seat order
        room_id: Owning room
        options: Room options, copied into the game
        is_restart: Seed positions from previous_game's finishing order
        previous_game: The game being replaced on restart
        seed: Optional seed for a deterministic deal

    Returns:
        A game in the tax phase, or in the play phase when tax is disabled
    """
    hands = deal_cards(len(players), seed=seed)
    positions = carry_over_positions(players, previous_game if is_restart else None)

    game_players = []
    for player, hand in zip(players, hands):
        game_player = copy.deepcopy(player)
        game_player.cards = sort_hand(hand, False)
        game_player.position = positions[player.id]
        game_player.has_finished = False
        game_player.finish_order = None
        game_player.title = None
        game_players.append(game_player)

    game = Game(
        room_id=room_id,
        phase=PHASE_TAX if options.enable_tax else PHASE_PLAYING,
        players=game_players,
        current_player_index=0,
        game_options=copy.deepcopy(options),
        tax_phase_complete=not options.enable_tax,
        turn_start_time=time.time() if options.turn_time_limit else None,
    )

    if options.enable_tax:
        game.pending_tax = calculate_tax_requests(game.players)
        if not game.pending_tax:
            game.phase = PHASE_PLAYING
            game.tax_phase_complete = True

    logger.info(
        "Dealt game for room %s: %d players, phase %s",
        room_id, len(game_players), game.phase
    )
    return game


def next_player_index(game: Game, current_index: int) -> int:
    """Next player after current_index who still holds cards, wrapping around."""
    n = len(game.players)
    next_index = (current_index + 1) % n
    attempts = 0

    while game.players[next_index].has_finished and attempts < n:
        next_index = (next_index + 1) % n
        attempts += 1

    return next_index


def is_game_finished(players: List[Player]) -> bool:
    """The game ends when all but one player have emptied their hands."""
    finished_count = sum(1 for p in players if p.has_finished)
    return finished_count >= len(players) - 1


def _refresh_turn_clock(game: Game):
    game.turn_start_time = time.time() if game.game_options.turn_time_limit else None


def play_cards(game: Game, player_id: str, cards: List[Card]) -> Game:
    """Play cards for the active player."""
    validation = validate_play(game, player_id, cards)
    if not validation.valid:
        raise GameError(validation.error_code, validation.error_message)

    state = copy.deepcopy(game)
    player = state.get_player(player_id)

    is_revolution = state.is_revolution
    if state.game_options.enable_revolution and is_revolution_trigger(cards):
        is_revolution = not is_revolution
        logger.info("Revolution %s in room %s", "started" if is_revolution else "ended", state.room_id)

    played_ids = {card.id for card in cards}
    remaining = [c for c in player.cards if c.id not in played_ids]
    player.cards = sort_hand(remaining, is_revolution)

    if not remaining:
        player.has_finished = True
        state.finished_players.append(player_id)
        player.finish_order = len(state.finished_players)
        logger.info("%s finished in position %d", player.name, player.finish_order)

    turn = Turn(player_id=player_id, cards=list(cards), timestamp=time.time())
    state.current_turn = turn
    state.turn_history.append(turn)
    state.pass_count = 0
    state.is_revolution = is_revolution
    state.current_player_index = next_player_index(state, state.current_player_index)

    if is_game_finished(state.players):
        state.phase = PHASE_FINISHED
        assign_titles(state)
        logger.info("Game finished in room %s", state.room_id)
    else:
        state.phase = PHASE_PLAYING

    _refresh_turn_clock(state)
    state.version += 1
    return state


def _check_turn(game: Game, player_id: str) -> Player:
    player = game.get_player(player_id)
    if player is None:
        raise GameError(NOT_FOUND, f"Player {player_id} is not in this game")
    if game.phase != PHASE_PLAYING:
        raise GameError(INVALID_STATE, f"Game is not in play phase (current: {game.phase})")
    if game.current_player.id != player_id:
        raise GameError(NOT_YOUR_TURN, "Not your turn")
    if player.has_finished:
        raise GameError(ALREADY_FINISHED, "You have already finished")
    return player


def pass_turn(game: Game, player_id: str) -> Game:
    """
    Pass for the active player.

    Once every other unfinished player has passed in a row, the table is
    cleared and the next player leads.
    """
    _check_turn(game, player_id)

    state = copy.deepcopy(game)
    active_count = sum(1 for p in state.players if not p.has_finished)
    pass_count = state.pass_count + 1

    state.current_player_index = next_player_index(state, state.current_player_index)
    if pass_count >= active_count - 1:
        state.current_turn = None
        state.pass_count = 0
        logger.debug("All players passed in room %s, table cleared", state.room_id)
    else:
        state.pass_count = pass_count

    _refresh_turn_clock(state)
    state.version += 1
    return state
