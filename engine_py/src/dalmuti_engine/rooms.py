"""Room directory: membership, readiness, options and game creation"""

import copy
import logging
import uuid
from typing import Dict, List, Optional

from .constants import (
    DIFFICULTIES, DIFFICULTY_MEDIUM, MAX_PLAYERS, MIN_PLAYERS,
    PHASE_FINISHED, PHASE_WAITING, PLAYER_AI, PLAYER_HUMAN
)
from .engine import create_game
from .errors import INVALID_STATE, NOT_FOUND, GameError
from .models import Game, GameOptions, Player, Room

logger = logging.getLogger(__name__)


class SessionDirectory:
    """Sole owner of every live room and its current game."""

    def __init__(self):
        self.rooms: Dict[str, Room] = {}

    def _generate_room_id(self) -> str:
        while True:
            room_id = str(uuid.uuid4())[:8].upper()
            if room_id not in self.rooms:
                return room_id

    def get_room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            raise GameError(NOT_FOUND, "Room not found")
        return room

    def list_rooms(self) -> List[Room]:
        return list(self.rooms.values())

    def find_room_by_player(self, player_id: str) -> Room:
        for room in self.rooms.values():
            if room.get_player(player_id) is not None:
                return room
        raise GameError(NOT_FOUND, "You are not in a room")

    def _get_member(self, room: Room, player_id: str) -> Player:
        player = room.get_player(player_id)
        if player is None:
            raise GameError(NOT_FOUND, "Player not found")
        return player

    def create_room(self, host_id: str, room_name: str, host_name: str) -> Room:
        room_id = self._generate_room_id()
        host = Player(
            id=host_id,
            name=host_name,
            type=PLAYER_HUMAN,
            is_ready=True,  # the host is ready as soon as the room exists
        )
        room = Room(
            id=room_id,
            name=room_name,
            host_id=host_id,
            players=[host],
            max_players=MAX_PLAYERS,
        )
        self.rooms[room_id] = room
        logger.info("Room %s (%s) created by %s", room_id, room_name, host_name)
        return room

    def join_room(self, room_id: str, player_id: str, player_name: str) -> Room:
        room = self.get_room(room_id)
        if len(room.players) >= room.max_players:
            raise GameError(INVALID_STATE, "Room is full")
        if room.current_game is not None and room.current_game.phase != PHASE_WAITING:
            raise GameError(INVALID_STATE, "Game is already in progress")
        if room.get_player(player_id) is not None:
            raise GameError(INVALID_STATE, "Already in this room")

        room.players.append(Player(id=player_id, name=player_name, type=PLAYER_HUMAN))
        logger.info("%s joined room %s", player_name, room_id)
        return room

    def add_ai_player(self, room_id: str, difficulty: str = DIFFICULTY_MEDIUM) -> Room:
        if difficulty not in DIFFICULTIES:
            raise GameError(INVALID_STATE, f"Unknown AI difficulty: {difficulty}")
        room = self.get_room(room_id)
        if len(room.players) >= room.max_players:
            raise GameError(INVALID_STATE, "Room is full")

        ai_number = sum(1 for p in room.players if p.type == PLAYER_AI) + 1
        room.players.append(Player(
            id=f"ai-{uuid.uuid4().hex[:12]}",
            name=f"AI {ai_number}",
            type=PLAYER_AI,
            is_ready=True,
            difficulty=difficulty,
        ))
        return room

    def leave_room(self, room_id: str, player_id: str) -> Optional[Room]:
        """
        Remove a player from a room.

        Returns the room, or None when the room was emptied and deleted. The
        host role passes to the next remaining player.
        """
        room = self.get_room(room_id)
        player = self._get_member(room, player_id)
        room.players.remove(player)
        logger.info("%s left room %s", player.name, room_id)

        if not room.players:
            self._delete(room_id)
            return None

        if room.host_id == player_id:
            humans = [p for p in room.players if p.type == PLAYER_HUMAN]
            room.host_id = (humans or room.players)[0].id
        return room

    def delete_room(self, room_id: str):
        self.get_room(room_id)
        self._delete(room_id)

    def _delete(self, room_id: str):
        del self.rooms[room_id]
        logger.info("Room %s deleted", room_id)

    def set_ready(self, room_id: str, player_id: str, is_ready: bool = True) -> Room:
        room = self.get_room(room_id)
        self._get_member(room, player_id).is_ready = is_ready
        return room

    def update_options(self, room_id: str, options: GameOptions) -> Room:
        room = self.get_room(room_id)
        room.game_options = copy.deepcopy(options)
        return room

    def start_game(
        self,
        room_id: str,
        skip_ready_check: bool = False,
        is_restart: bool = False,
        seed: Optional[int] = None,
    ) -> Game:
        room = self.get_room(room_id)
        if len(room.players) < MIN_PLAYERS:
            raise GameError(INVALID_STATE, f"Need at least {MIN_PLAYERS} players")

        previous = room.current_game
        if previous is not None and previous.phase not in (PHASE_WAITING, PHASE_FINISHED):
            raise GameError(INVALID_STATE, "Game is already in progress")

        if not skip_ready_check:
            if not all(p.is_ready or p.type == PLAYER_AI for p in room.players):
                raise GameError(INVALID_STATE, "Not all players are ready")

        game = create_game(
            room.players,
            room_id,
            room.game_options,
            is_restart=is_restart,
            previous_game=previous,
            seed=seed,
        )
        if previous is not None:
            game.version = previous.version + 1

        positions = {p.id: p.position for p in game.players}
        for player in room.players:
            player.position = positions[player.id]

        room.current_game = game
        logger.info("Game %s in room %s", "restarted" if is_restart else "started", room_id)
        return game

    def update_game(self, room_id: str, game: Game) -> Room:
        room = self.get_room(room_id)
        room.current_game = game
        return room
