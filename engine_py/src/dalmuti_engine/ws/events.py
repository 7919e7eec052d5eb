"""
WebSocket intent models and validation.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..constants import DIFFICULTY_MEDIUM, JOKER, MAX_RANK, MIN_RANK
from ..models import GameOptions


class IntentType(str, Enum):
    """Inbound intent types."""
    CREATE_ROOM = "create-room"
    JOIN_ROOM = "join-room"
    LEAVE_ROOM = "leave-room"
    ADD_AI = "add-ai"
    SET_READY = "set-ready"
    START_GAME = "start-game"
    RESTART_GAME = "restart-game"
    PLAY_CARDS = "play-cards"
    PASS = "pass"
    SUBMIT_TAX = "submit-tax"
    UPDATE_OPTIONS = "update-options"


class CardPayload(BaseModel):
    """A card as sent by clients. Only the id is trusted."""
    rank: Union[int, Literal["joker"]]
    id: str = Field(..., min_length=1, max_length=20)

    @field_validator('rank')
    @classmethod
    def validate_rank(cls, v):
        if v != JOKER and not MIN_RANK <= v <= MAX_RANK:
            raise ValueError(f'rank must be {MIN_RANK}..{MAX_RANK} or "{JOKER}"')
        return v


class GameOptionsPayload(BaseModel):
    """Room options as sent by the host."""
    enable_revolution: bool = True
    enable_tax: bool = True
    turn_time_limit: Optional[int] = Field(default=None, ge=1, le=600)

    def to_options(self) -> GameOptions:
        return GameOptions(
            enable_revolution=self.enable_revolution,
            enable_tax=self.enable_tax,
            turn_time_limit=self.turn_time_limit,
        )


# Inbound intent models
class BaseIntent(BaseModel):
    """Base intent model."""
    type: IntentType


class CreateRoomIntent(BaseIntent):
    type: IntentType = IntentType.CREATE_ROOM
    name: str = Field(..., min_length=1, max_length=50)
    player_name: str = Field(..., min_length=1, max_length=30)


class JoinRoomIntent(BaseIntent):
    type: IntentType = IntentType.JOIN_ROOM
    room_id: str = Field(..., min_length=1, max_length=50)
    player_name: str = Field(..., min_length=1, max_length=30)


class LeaveRoomIntent(BaseIntent):
    type: IntentType = IntentType.LEAVE_ROOM


class AddAIIntent(BaseIntent):
    type: IntentType = IntentType.ADD_AI
    difficulty: Literal["easy", "medium", "hard"] = DIFFICULTY_MEDIUM


class SetReadyIntent(BaseIntent):
    type: IntentType = IntentType.SET_READY
    is_ready: bool = True


class StartGameIntent(BaseIntent):
    type: IntentType = IntentType.START_GAME
    seed: Optional[int] = None


class RestartGameIntent(BaseIntent):
    type: IntentType = IntentType.RESTART_GAME
    seed: Optional[int] = None


class PlayCardsIntent(BaseIntent):
    type: IntentType = IntentType.PLAY_CARDS
    cards: List[CardPayload] = Field(..., min_length=1, max_length=80)


class PassIntent(BaseIntent):
    type: IntentType = IntentType.PASS


class SubmitTaxIntent(BaseIntent):
    type: IntentType = IntentType.SUBMIT_TAX
    cards: List[CardPayload] = Field(..., min_length=1, max_length=2)


class UpdateOptionsIntent(BaseIntent):
    type: IntentType = IntentType.UPDATE_OPTIONS
    options: GameOptionsPayload


Intent = Union[
    CreateRoomIntent,
    JoinRoomIntent,
    LeaveRoomIntent,
    AddAIIntent,
    SetReadyIntent,
    StartGameIntent,
    RestartGameIntent,
    PlayCardsIntent,
    PassIntent,
    SubmitTaxIntent,
    UpdateOptionsIntent,
]

INTENT_MODELS = {
    IntentType.CREATE_ROOM: CreateRoomIntent,
    IntentType.JOIN_ROOM: JoinRoomIntent,
    IntentType.LEAVE_ROOM: LeaveRoomIntent,
    IntentType.ADD_AI: AddAIIntent,
    IntentType.SET_READY: SetReadyIntent,
    IntentType.START_GAME: StartGameIntent,
    IntentType.RESTART_GAME: RestartGameIntent,
    IntentType.PLAY_CARDS: PlayCardsIntent,
    IntentType.PASS: PassIntent,
    IntentType.SUBMIT_TAX: SubmitTaxIntent,
    IntentType.UPDATE_OPTIONS: UpdateOptionsIntent,
}


def parse_intent(data: Dict[str, Any]) -> Intent:
    """
    Parse raw message data into the matching intent model.

    Raises:
        ValueError: If the intent type is unknown or the payload is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Intent must be a JSON object")

    intent_type = data.get("type")
    if not intent_type:
        raise ValueError("Missing intent type")

    try:
        intent_type = IntentType(intent_type)
    except ValueError:
        raise ValueError(f"Invalid intent type: {intent_type}")

    try:
        return INTENT_MODELS[intent_type](**data)
    except ValidationError as e:
        raise ValueError(f"Invalid intent data: {e.errors()[0]['msg']}")
