"""
FastAPI WebSocket server for the Dalmuti game.
"""

import logging
import uuid
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, Set

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import Settings
from ..errors import INVALID_EVENT, GameError
from ..serialization import get_public_room_info, serialize_payload
from ..service import GameService, Publisher
from .events import IntentType, parse_intent

logger = logging.getLogger(__name__)


def encode_event(event: str, payload: Any, viewer_id: Optional[str] = None) -> str:
    return orjson.dumps({"type": event, "data": serialize_payload(payload, viewer_id)}).decode()


class ConnectionManager(Publisher):
    """Manages WebSocket connections and room subscriptions."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        self.room_connections: Dict[str, Set[str]] = defaultdict(set)

    async def connect(self, websocket: WebSocket, connection_id: str):
        await websocket.accept()
        self.active_connections[connection_id] = websocket
        logger.info(f"Connection {connection_id} opened")

    def disconnect(self, connection_id: str):
        self.active_connections.pop(connection_id, None)
        for room_id in list(self.room_connections):
            self.unsubscribe(room_id, connection_id)
        logger.info(f"Connection {connection_id} closed")

    def subscribe(self, room_id: str, connection_id: str):
        self.room_connections[room_id].add(connection_id)

    def unsubscribe(self, room_id: str, connection_id: str):
        members = self.room_connections.get(room_id)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self.room_connections[room_id]

    async def send(self, connection_id: str, event: str, payload: Any):
        websocket = self.active_connections.get(connection_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(encode_event(event, payload, connection_id))
        except Exception as e:
            logger.error(f"Error sending {event} to {connection_id}: {e}")
            self.disconnect(connection_id)

    async def publish(self, room_id: str, event: str, payload: Any):
        # Each member gets its own rendering so hands stay private
        for connection_id in sorted(self.room_connections.get(room_id, ())):
            await self.send(connection_id, event, payload)


def create_app(settings: Optional[Settings] = None, service: Optional[GameService] = None) -> FastAPI:
    """Build the FastAPI application around a game service."""
    settings = settings or Settings.from_env()
    manager = ConnectionManager()
    if service is None:
        service = GameService(
            manager,
            ai_delay=settings.ai_move_delay,
            default_difficulty=settings.ai_difficulty,
        )
    else:
        manager = service.publisher

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        service.shutdown()

    app = FastAPI(title="Dalmuti Game Engine", version=__version__, lifespan=lifespan)
    app.state.service = service
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Dalmuti Card Game API", "version": __version__}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "rooms": len(service.directory.rooms),
            "connections": len(manager.active_connections),
        }

    @app.get("/rooms")
    async def list_rooms():
        return [get_public_room_info(room) for room in service.directory.list_rooms()]

    async def serve(websocket: WebSocket, connection_id: str):
        await manager.connect(websocket, connection_id)
        try:
            while True:
                raw_data = await websocket.receive_text()
                try:
                    intent = parse_intent(orjson.loads(raw_data))
                except (ValueError, orjson.JSONDecodeError) as e:
                    await service.report_error(connection_id, GameError(INVALID_EVENT, str(e)))
                    continue

                room = await service.handle_intent(connection_id, intent)
                if room is not None and intent.type in (IntentType.CREATE_ROOM, IntentType.JOIN_ROOM):
                    await manager.send(connection_id, "ack", room)
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected for {connection_id}")
        except Exception as e:
            logger.error(f"WebSocket error for {connection_id}: {e}")
        finally:
            await service.disconnect(connection_id)
            manager.disconnect(connection_id)

    @app.websocket("/ws/{connection_id}")
    async def websocket_endpoint(websocket: WebSocket, connection_id: str):
        await serve(websocket, connection_id)

    @app.websocket("/ws")
    async def websocket_endpoint_anonymous(websocket: WebSocket):
        await serve(websocket, str(uuid.uuid4())[:8])

    return app
