"""
Intent handling: the boundary between connections and the game core.

Each connection is identified by an opaque id, which doubles as the player
id of the human behind it. Failed intents produce a single error event for
the originating connection and leave shared state untouched.
"""

import logging
from typing import Any, List, Optional

from .constants import (
    DEFAULT_AI_MOVE_DELAY, DIFFICULTY_MEDIUM, EVENT_ERROR, EVENT_GAME_STARTED,
    EVENT_PLAYER_JOINED, EVENT_PLAYER_LEFT, EVENT_ROOM_UPDATED, EVENT_TAX_REQUEST,
    PHASE_FINISHED, PHASE_TAX, PLAYER_HUMAN
)
from .coordinator import TurnCoordinator
from .engine import pass_turn, play_cards
from .errors import (
    ILLEGAL_PLAY, INTERNAL_ERROR, INVALID_STATE, NOT_FOUND, PERMISSION_DENIED, GameError
)
from .exchange import submit_tax
from .models import Card, Game, GameOptions, Room
from .rooms import SessionDirectory
from .ws.events import (
    AddAIIntent, CreateRoomIntent, Intent, JoinRoomIntent, LeaveRoomIntent,
    PassIntent, PlayCardsIntent, RestartGameIntent, SetReadyIntent,
    StartGameIntent, SubmitTaxIntent, UpdateOptionsIntent
)

logger = logging.getLogger(__name__)


class Publisher:
    """
    Delivery channel for outbound events.

    Rooms are publish/subscribe topics; ``send`` targets a single connection.
    """

    async def publish(self, room_id: str, event: str, payload: Any):
        raise NotImplementedError

    async def send(self, connection_id: str, event: str, payload: Any):
        raise NotImplementedError

    def subscribe(self, room_id: str, connection_id: str):
        raise NotImplementedError

    def unsubscribe(self, room_id: str, connection_id: str):
        raise NotImplementedError


def resolve_cards(game: Game, player_id: str, card_ids: List[str]) -> List[Card]:
    """Look card ids up in the player's hand."""
    player = game.get_player(player_id)
    if player is None:
        raise GameError(NOT_FOUND, "You are not playing in this game")
    hand = {card.id: card for card in player.cards}
    missing = [card_id for card_id in card_ids if card_id not in hand]
    if missing:
        raise GameError(ILLEGAL_PLAY, f"You don't own {', '.join(missing)}")
    return [hand[card_id] for card_id in card_ids]


class GameService:
    def __init__(
        self,
        publisher: Publisher,
        directory: Optional[SessionDirectory] = None,
        coordinator: Optional[TurnCoordinator] = None,
        ai_delay: float = DEFAULT_AI_MOVE_DELAY,
        default_difficulty: str = DIFFICULTY_MEDIUM,
    ):
        self.publisher = publisher
        self.directory = directory or SessionDirectory()
        self.coordinator = coordinator or TurnCoordinator(self.directory, publisher, ai_delay=ai_delay)
        self.default_difficulty = default_difficulty

    async def handle_intent(self, connection_id: str, intent: Intent) -> Optional[Room]:
        """
        Apply an intent on behalf of a connection.

        Returns the room for create-room and join-room, None otherwise or on
        failure.
        """
        try:
            if isinstance(intent, CreateRoomIntent):
                return await self.create_room(connection_id, intent.name, intent.player_name)
            elif isinstance(intent, JoinRoomIntent):
                return await self.join_room(connection_id, intent.room_id, intent.player_name)
            elif isinstance(intent, LeaveRoomIntent):
                await self.leave_room(connection_id)
            elif isinstance(intent, AddAIIntent):
                await self.add_ai(connection_id, intent.difficulty)
            elif isinstance(intent, SetReadyIntent):
                await self.set_ready(connection_id, intent.is_ready)
            elif isinstance(intent, StartGameIntent):
                await self.start_game(connection_id, seed=intent.seed)
            elif isinstance(intent, RestartGameIntent):
                await self.restart_game(connection_id, seed=intent.seed)
            elif isinstance(intent, PlayCardsIntent):
                await self.play_cards(connection_id, [card.id for card in intent.cards])
            elif isinstance(intent, PassIntent):
                await self.pass_turn(connection_id)
            elif isinstance(intent, SubmitTaxIntent):
                await self.submit_tax(connection_id, [card.id for card in intent.cards])
            elif isinstance(intent, UpdateOptionsIntent):
                await self.update_options(connection_id, intent.options.to_options())
            else:
                raise GameError(INVALID_STATE, f"Unhandled intent: {type(intent).__name__}")
        except GameError as e:
            logger.warning("Intent %s from %s rejected: %s", intent.type.value, connection_id, e)
            await self.report_error(connection_id, e)
        except Exception:
            logger.exception("Error handling intent %s from %s", intent.type.value, connection_id)
            await self.report_error(connection_id, GameError(INTERNAL_ERROR, "Internal server error"))
        return None

    async def report_error(self, connection_id: str, error: GameError):
        await self.publisher.send(connection_id, EVENT_ERROR, error.message)

    def _require_host(self, room: Room, connection_id: str, action: str):
        if room.host_id != connection_id:
            raise GameError(PERMISSION_DENIED, f"Only the host can {action}")

    def _require_game(self, room: Room) -> Game:
        if room.current_game is None:
            raise GameError(INVALID_STATE, "No game in progress")
        return room.current_game

    async def create_room(self, connection_id: str, name: str, player_name: str) -> Room:
        if self._room_of(connection_id) is not None:
            raise GameError(INVALID_STATE, "Leave your current room first")
        room = self.directory.create_room(connection_id, name, player_name)
        self.publisher.subscribe(room.id, connection_id)
        await self.publisher.publish(room.id, EVENT_ROOM_UPDATED, room)
        return room

    async def join_room(self, connection_id: str, room_id: str, player_name: str) -> Room:
        if self._room_of(connection_id) is not None:
            raise GameError(INVALID_STATE, "Leave your current room first")
        self.directory.get_room(room_id)
        async with self.coordinator.room_lock(room_id):
            room = self.directory.join_room(room_id, connection_id, player_name)
            self.publisher.subscribe(room.id, connection_id)
            await self.publisher.publish(room.id, EVENT_ROOM_UPDATED, room)
            await self.publisher.publish(room.id, EVENT_PLAYER_JOINED, room.get_player(connection_id))
        return room

    async def leave_room(self, connection_id: str):
        room = self.directory.find_room_by_player(connection_id)
        async with self.coordinator.room_lock(room.id):
            remaining = self.directory.leave_room(room.id, connection_id)
            self.publisher.unsubscribe(room.id, connection_id)

            if remaining is not None and not any(p.type == PLAYER_HUMAN for p in remaining.players):
                # Nobody left to play with the AIs
                self.directory.delete_room(room.id)
                remaining = None

            if remaining is None:
                self.coordinator.forget_room(room.id)
                return

            await self.publisher.publish(room.id, EVENT_ROOM_UPDATED, remaining)
            await self.publisher.publish(room.id, EVENT_PLAYER_LEFT, connection_id)
            self.coordinator.schedule(room.id)

    async def disconnect(self, connection_id: str):
        """Connection closed: leave whatever room it was in."""
        if self._room_of(connection_id) is None:
            return
        await self.leave_room(connection_id)

    async def add_ai(self, connection_id: str, difficulty: Optional[str] = None) -> Room:
        room = self.directory.find_room_by_player(connection_id)
        self._require_host(room, connection_id, "add AI players")
        async with self.coordinator.room_lock(room.id):
            room = self.directory.add_ai_player(room.id, difficulty or self.default_difficulty)
            await self.publisher.publish(room.id, EVENT_ROOM_UPDATED, room)
        return room

    async def set_ready(self, connection_id: str, is_ready: bool = True) -> Room:
        room = self.directory.find_room_by_player(connection_id)
        async with self.coordinator.room_lock(room.id):
            room = self.directory.set_ready(room.id, connection_id, is_ready)
            await self.publisher.publish(room.id, EVENT_ROOM_UPDATED, room)
        return room

    async def update_options(self, connection_id: str, options: GameOptions) -> Room:
        room = self.directory.find_room_by_player(connection_id)
        self._require_host(room, connection_id, "change game options")
        async with self.coordinator.room_lock(room.id):
            room = self.directory.update_options(room.id, options)
            await self.publisher.publish(room.id, EVENT_ROOM_UPDATED, room)
        return room

    async def start_game(self, connection_id: str, seed: Optional[int] = None) -> Game:
        room = self.directory.find_room_by_player(connection_id)
        self._require_host(room, connection_id, "start the game")
        async with self.coordinator.room_lock(room.id):
            game = self.directory.start_game(room.id, seed=seed)
            await self._announce_game(room.id, game)
        return game

    async def restart_game(self, connection_id: str, seed: Optional[int] = None) -> Game:
        room = self.directory.find_room_by_player(connection_id)
        self._require_host(room, connection_id, "restart the game")
        current = self._require_game(room)
        if current.phase != PHASE_FINISHED:
            raise GameError(INVALID_STATE, "The current game has not finished")
        async with self.coordinator.room_lock(room.id):
            game = self.directory.start_game(room.id, skip_ready_check=True, is_restart=True, seed=seed)
            await self._announce_game(room.id, game)
        return game

    async def _announce_game(self, room_id: str, game: Game):
        await self.publisher.publish(room_id, EVENT_GAME_STARTED, game)
        if game.phase == PHASE_TAX:
            for request in game.pending_tax:
                await self.publisher.send(request.from_player_id, EVENT_TAX_REQUEST, request)
        self.coordinator.schedule(room_id)

    async def play_cards(self, connection_id: str, card_ids: List[str]) -> Game:
        room = self.directory.find_room_by_player(connection_id)
        async with self.coordinator.room_lock(room.id):
            game = self._require_game(room)
            cards = resolve_cards(game, connection_id, card_ids)
            updated = play_cards(game, connection_id, cards)
            await self._commit(room.id, updated)
        return updated

    async def pass_turn(self, connection_id: str) -> Game:
        room = self.directory.find_room_by_player(connection_id)
        async with self.coordinator.room_lock(room.id):
            game = self._require_game(room)
            updated = pass_turn(game, connection_id)
            await self._commit(room.id, updated)
        return updated

    async def submit_tax(self, connection_id: str, card_ids: List[str]) -> Game:
        room = self.directory.find_room_by_player(connection_id)
        async with self.coordinator.room_lock(room.id):
            game = self._require_game(room)
            cards = resolve_cards(game, connection_id, card_ids)
            updated = submit_tax(game, connection_id, cards)
            await self._commit(room.id, updated)
        return updated

    async def _commit(self, room_id: str, game: Game):
        self.directory.update_game(room_id, game)
        await self.coordinator.publish_game(room_id, game)
        self.coordinator.schedule(room_id)

    def _room_of(self, connection_id: str) -> Optional[Room]:
        try:
            return self.directory.find_room_by_player(connection_id)
        except GameError:
            return None

    def shutdown(self):
        self.coordinator.shutdown()
