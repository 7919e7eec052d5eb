"""
Shared builders for engine tests.
"""

import asyncio
from collections import defaultdict
from typing import List, Optional

from dalmuti_engine.constants import JOKER, PHASE_PLAYING
from dalmuti_engine.models import Card, Game, GameOptions, Player
from dalmuti_engine.service import Publisher


def cards_of(rank, count, start=0) -> List[Card]:
    """Cards of one rank with ids matching the deck's naming."""
    if rank == JOKER:
        return [Card(rank=JOKER, id=f"{JOKER}-{i}") for i in range(start + 1, start + count + 1)]
    return [Card(rank=rank, id=f"{rank}-{i}") for i in range(start, start + count)]


def make_game(hands, options: Optional[GameOptions] = None, **kwargs) -> Game:
    """A game in play with players p0, p1, ... holding the given hands."""
    players = [
        Player(id=f"p{i}", name=f"Player {i}", cards=list(hand))
        for i, hand in enumerate(hands)
    ]
    kwargs.setdefault("phase", PHASE_PLAYING)
    kwargs.setdefault("tax_phase_complete", True)
    return Game(
        room_id="room",
        players=players,
        game_options=options or GameOptions(enable_tax=False),
        **kwargs
    )


class RecordingPublisher(Publisher):
    """Publisher that keeps every event for inspection."""

    def __init__(self):
        self.published = []  # (room_id, event, payload)
        self.sent = []  # (connection_id, event, payload)
        self.subscriptions = defaultdict(set)

    async def publish(self, room_id, event, payload):
        self.published.append((room_id, event, payload))

    async def send(self, connection_id, event, payload):
        self.sent.append((connection_id, event, payload))

    def subscribe(self, room_id, connection_id):
        self.subscriptions[room_id].add(connection_id)

    def unsubscribe(self, room_id, connection_id):
        self.subscriptions[room_id].discard(connection_id)

    def events(self, event):
        return [payload for _, name, payload in self.published if name == event]

    def errors_for(self, connection_id):
        return [payload for cid, name, payload in self.sent if cid == connection_id and name == "error"]


class FakeSleep:
    """
    Stand-in for asyncio.sleep that records requested delays.

    The first ``allowed`` calls return at once; later calls block until the
    task is cancelled. With allowed=None every call returns at once.
    """

    def __init__(self, allowed: Optional[int] = None):
        self.allowed = allowed
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        if self.allowed is not None and len(self.delays) > self.allowed:
            await asyncio.Event().wait()
        await asyncio.sleep(0)


async def settle(predicate, attempts: int = 2000) -> bool:
    """Yield to the event loop until predicate() holds."""
    for _ in range(attempts):
        if predicate():
            return True
        await asyncio.sleep(0)
    return predicate()
