"""
State serialization and sanitization utilities.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .models import Card, Game, GameOptions, GameResult, Player, Room, TaxRequest, Turn


def serialize_card(card: Card) -> Dict[str, Any]:
    return {"rank": card.rank, "id": card.id}


def serialize_cards(cards: List[Card]) -> List[Dict[str, Any]]:
    return [serialize_card(card) for card in cards]


def serialize_options(options: GameOptions) -> Dict[str, Any]:
    return asdict(options)


def serialize_turn(turn: Optional[Turn]) -> Optional[Dict[str, Any]]:
    if turn is None:
        return None
    return {
        "player_id": turn.player_id,
        "cards": serialize_cards(turn.cards),
        "timestamp": turn.timestamp,
    }


def serialize_player(player: Player, show_cards: bool = False) -> Dict[str, Any]:
    """
    Serialize a player. Cards are only included when show_cards is set;
    everyone can see how many a player holds.
    """
    data = {
        "id": player.id,
        "name": player.name,
        "type": player.type,
        "position": player.position,
        "is_ready": player.is_ready,
        "has_finished": player.has_finished,
        "finish_order": player.finish_order,
        "title": player.title,
        "card_count": len(player.cards),
    }
    if player.type == "ai":
        data["difficulty"] = player.difficulty
    if show_cards:
        data["cards"] = serialize_cards(player.cards)
    return data


def sanitize_game(game: Game, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Serialize a game for one viewer.

    Args:
        game: Game to serialize
        viewer_id: Player whose hand is revealed; other hands only show counts

    Returns:
        Dictionary safe for JSON transmission
    """
    return {
        "room_id": game.room_id,
        "version": game.version,
        "phase": game.phase,
        "players": [serialize_player(p, show_cards=p.id == viewer_id) for p in game.players],
        "current_player_index": game.current_player_index,
        "current_player_id": game.current_player.id if game.players else None,
        "current_turn": serialize_turn(game.current_turn),
        "pass_count": game.pass_count,
        "turn_history": [serialize_turn(t) for t in game.turn_history],
        "is_revolution": game.is_revolution,
        "tax_phase_complete": game.tax_phase_complete,
        "pending_tax": [serialize_tax_request(r) for r in game.pending_tax],
        "finished_players": list(game.finished_players),
        "game_options": serialize_options(game.game_options),
        "turn_start_time": game.turn_start_time,
    }


def serialize_room(room: Room) -> Dict[str, Any]:
    """Room with its members; the game is summarised, never its hands."""
    game = room.current_game
    return {
        "id": room.id,
        "name": room.name,
        "host_id": room.host_id,
        "max_players": room.max_players,
        "players": [serialize_player(p) for p in room.players],
        "game_options": serialize_options(room.game_options),
        "game_phase": game.phase if game else None,
    }


def serialize_tax_request(request: TaxRequest) -> Dict[str, Any]:
    return {
        "from_player_id": request.from_player_id,
        "to_player_id": request.to_player_id,
        "card_count": request.card_count,
    }


def serialize_result(result: GameResult) -> Dict[str, Any]:
    return asdict(result)


def get_public_room_info(room: Room) -> Dict[str, Any]:
    """Public information about a room for listings."""
    return {
        "id": room.id,
        "name": room.name,
        "player_count": len(room.players),
        "max_players": room.max_players,
        "game_phase": room.current_game.phase if room.current_game else None,
    }


def serialize_payload(payload: Any, viewer_id: Optional[str] = None) -> Any:
    """Turn an event payload into JSON-ready data for one viewer."""
    if isinstance(payload, Game):
        return sanitize_game(payload, viewer_id)
    if isinstance(payload, Room):
        return serialize_room(payload)
    if isinstance(payload, Player):
        return serialize_player(payload, show_cards=payload.id == viewer_id)
    if isinstance(payload, TaxRequest):
        return serialize_tax_request(payload)
    if isinstance(payload, GameResult):
        return serialize_result(payload)
    if isinstance(payload, list):
        return [serialize_payload(item, viewer_id) for item in payload]
    return payload
