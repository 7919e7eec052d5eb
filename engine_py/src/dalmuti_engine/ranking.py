# engine_py/src/dalmuti_engine/ranking.py

from typing import Dict, List, Optional

from .constants import (
    PHASE_FINISHED,
    TITLE_GREATER_DALMUTI,
    TITLE_LESSER_DALMUTI,
    TITLE_MERCHANT,
    TITLE_LESSER_PEON,
    TITLE_GREATER_PEON,
)
from .models import Game, GameResult, Player


def final_rankings(game: Game) -> List[Player]:
    """
    Players ordered by finish order.

    The sort is stable; a player without a finish order (the one left holding
    cards) goes last.
    """
    return sorted(
        game.players,
        key=lambda p: (p.finish_order is None, p.finish_order or 0)
    )


def final_position(player: Player, game: Game) -> int:
    """Finishing place, with the implicit last place for the unfinished player."""
    if player.finish_order is not None:
        return player.finish_order
    return len(game.players)


def titles_for(player_count: int) -> List[str]:
    """Titles by finishing place for a table of the given size."""
    if player_count < 1:
        return []
    if player_count == 1:
        return [TITLE_GREATER_DALMUTI]

    titles = [TITLE_MERCHANT] * player_count
    titles[0] = TITLE_GREATER_DALMUTI
    titles[-1] = TITLE_GREATER_PEON
    if player_count >= 3:
        titles[1] = TITLE_LESSER_DALMUTI
    if player_count >= 4:
        titles[-2] = TITLE_LESSER_PEON
    return titles


def assign_titles(game: Game):
    """
    Assigns Dalmuti titles to players based on their finishing place.

    This function mutates the game by setting the 'title' attribute on each
    player. Call it once the game is finished.
    """
    titles = titles_for(len(game.players))
    for place, player in enumerate(final_rankings(game)):
        player.title = titles[place]


def game_results(game: Game) -> List[GameResult]:
    """Results in ranking order, as sent with game-finished."""
    return [
        GameResult(
            player_id=p.id,
            player_name=p.name,
            position=final_position(p, game),
            title=p.title,
        )
        for p in final_rankings(game)
    ]


def carry_over_positions(players: List[Player], previous: Optional[Game]) -> Dict[str, int]:
    """
    Positions for the next game, keyed by player id.

    Each player takes their finish order from the previous game. The player
    who never finished a completed game takes the last place. Players who
    were not in the previous game keep their current position.
    """
    positions = {p.id: p.position for p in players}
    if previous is None:
        return positions

    previous_players = {p.id: p for p in previous.players}
    for player in players:
        earlier = previous_players.get(player.id)
        if earlier is None:
            continue
        if earlier.finish_order is not None:
            positions[player.id] = earlier.finish_order
        elif previous.phase == PHASE_FINISHED:
            positions[player.id] = len(previous.players)
    return positions
