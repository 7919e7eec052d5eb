"""
Turn coordination: AI moves, turn timeouts and ordered state publishing.

One driver task per room sleeps until the next actor is due (the AI delay,
or the human turn limit), applies the move under the room lock, publishes
it and works out the next step. Any transition applied from outside
re-schedules the room, which supersedes the pending driver.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from .bots import choose_action, choose_tax_cards
from .constants import (
    DEFAULT_AI_MOVE_DELAY, EVENT_GAME_FINISHED, EVENT_GAME_UPDATED,
    PHASE_FINISHED, PHASE_PLAYING, PHASE_TAX
)
from .engine import pass_turn, play_cards
from .errors import GameError
from .exchange import submit_tax
from .models import Game, Room
from .ranking import game_results
from .rooms import SessionDirectory

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Step kinds
STEP_AI_TURN = 'ai_turn'
STEP_TIMEOUT = 'timeout'
STEP_AI_TAX = 'ai_tax'
STEP_TAX_TIMEOUT = 'tax_timeout'


class TimerRegistry:
    """One cancellable task per room. Arming a room supersedes its previous task."""

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}

    def arm(self, room_id: str, coro) -> asyncio.Task:
        self.cancel(room_id)
        task = asyncio.create_task(coro)
        self._tasks[room_id] = task
        task.add_done_callback(lambda t: self._forget(room_id, t))
        logger.debug("Timer armed for room %s", room_id)
        return task

    def cancel(self, room_id: str) -> bool:
        task = self._tasks.pop(room_id, None)
        if task is None:
            return False
        if task is not asyncio.current_task():
            task.cancel()
        logger.debug("Timer cancelled for room %s", room_id)
        return True

    def is_armed(self, room_id: str) -> bool:
        return room_id in self._tasks

    def cancel_all(self):
        for room_id in list(self._tasks):
            self.cancel(room_id)

    def _forget(self, room_id: str, task: asyncio.Task):
        if self._tasks.get(room_id) is task:
            del self._tasks[room_id]


@dataclass(frozen=True)
class Step:
    kind: str
    delay: float
    version: int


class TurnCoordinator:
    def __init__(
        self,
        directory: SessionDirectory,
        publisher,
        ai_delay: float = DEFAULT_AI_MOVE_DELAY,
        sleep: Sleep = asyncio.sleep,
    ):
        self.directory = directory
        self.publisher = publisher
        self.ai_delay = ai_delay
        self.timers = TimerRegistry()
        self._sleep = sleep
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def room_lock(self, room_id: str) -> asyncio.Lock:
        """Lock serialising every transition applied to a room."""
        return self._locks[room_id]

    def forget_room(self, room_id: str):
        self.timers.cancel(room_id)
        self._locks.pop(room_id, None)

    def shutdown(self):
        self.timers.cancel_all()

    async def publish_game(self, room_id: str, game: Game):
        """Broadcast a new game state, plus the results once it is over."""
        await self.publisher.publish(room_id, EVENT_GAME_UPDATED, game)
        if game.phase == PHASE_FINISHED:
            await self.publisher.publish(room_id, EVENT_GAME_FINISHED, game_results(game))

    def schedule(self, room_id: str):
        """
        Work out who acts next in the room and arm its driver.

        Call after every transition. With nobody to wait for (game over, or a
        human turn without a time limit) the room's timer is just cancelled.
        """
        self.timers.cancel(room_id)
        if self._next_step(room_id) is not None:
            self.timers.arm(room_id, self._drive(room_id))

    def _current_game(self, room_id: str) -> Optional[Game]:
        room = self.directory.rooms.get(room_id)
        return room.current_game if room else None

    def _needs_autoplay(self, room: Room, player_id: str) -> bool:
        """AI players act on their own, and so do players who left mid-game."""
        member = room.get_player(player_id)
        return member is None or member.is_ai

    def _next_step(self, room_id: str) -> Optional[Step]:
        room = self.directory.rooms.get(room_id)
        if room is None or room.current_game is None:
            return None
        game = room.current_game
        limit = game.game_options.turn_time_limit

        if game.phase == PHASE_TAX:
            if any(self._needs_autoplay(room, r.from_player_id) for r in game.pending_tax):
                return Step(STEP_AI_TAX, self.ai_delay, game.version)
            if limit:
                return Step(STEP_TAX_TIMEOUT, limit, game.version)
            return None

        if game.phase == PHASE_PLAYING:
            if self._needs_autoplay(room, game.current_player.id):
                return Step(STEP_AI_TURN, self.ai_delay, game.version)
            if limit:
                return Step(STEP_TIMEOUT, limit, game.version)

        return None

    async def _drive(self, room_id: str):
        try:
            while True:
                step = self._next_step(room_id)
                if step is None:
                    return
                await self._sleep(step.delay)

                async with self.room_lock(room_id):
                    room = self.directory.rooms.get(room_id)
                    if room is None or room.current_game is None:
                        return
                    game = room.current_game
                    if game.version != step.version:
                        continue
                    try:
                        updated = self._apply_step(room, game, step)
                    except GameError as e:
                        logger.error("Automatic %s failed in room %s: %s", step.kind, room_id, e)
                        return
                    if updated is None:
                        return
                    self.directory.update_game(room_id, updated)
                    await self.publish_game(room_id, updated)
        except asyncio.CancelledError:
            logger.debug("Driver cancelled for room %s", room_id)
            raise

    def _apply_step(self, room: Room, game: Game, step: Step) -> Optional[Game]:
        if step.kind == STEP_AI_TURN:
            return self._ai_turn(room, game)
        if step.kind == STEP_TIMEOUT:
            player = game.current_player
            logger.info("Turn timed out for %s in room %s", player.name, room.id)
            return pass_turn(game, player.id)
        if step.kind == STEP_AI_TAX:
            givers = [r.from_player_id for r in game.pending_tax
                      if self._needs_autoplay(room, r.from_player_id)]
            return self._pay_tax(game, givers)
        if step.kind == STEP_TAX_TIMEOUT:
            logger.info("Tax phase timed out in room %s", room.id)
            return self._pay_tax(game, [r.from_player_id for r in game.pending_tax])
        raise ValueError(f"Unknown step: {step.kind}")

    def _ai_turn(self, room: Room, game: Game) -> Optional[Game]:
        player = game.current_player
        if room.get_player(player.id) is None:
            logger.info("%s has left room %s, passing for them", player.name, room.id)
            return pass_turn(game, player.id)

        try:
            action = choose_action(game, player.id, player.difficulty)
            if action.is_pass:
                return pass_turn(game, player.id)
            return play_cards(game, player.id, action.cards)
        except Exception:
            logger.exception("AI %s failed to move in room %s, passing instead", player.name, room.id)

        try:
            return pass_turn(game, player.id)
        except GameError as e:
            logger.error("AI %s could not pass in room %s: %s", player.name, room.id, e)
            return None

    def _pay_tax(self, game: Game, giver_ids) -> Game:
        for giver_id in giver_ids:
            cards = choose_tax_cards(game, giver_id)
            if cards is None:
                continue
            game = submit_tax(game, giver_id, cards)
        return game
