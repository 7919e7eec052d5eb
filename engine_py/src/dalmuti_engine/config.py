"""
Server settings read from the environment.
"""

import os
from typing import List

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_AI_MOVE_DELAY, DIFFICULTIES, DIFFICULTY_MEDIUM


class Settings(BaseModel):
    """Process-wide configuration."""

    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=8000, ge=1, le=65535, description="Port to bind")
    log_level: str = Field(default="info", description="Logging level name")
    reload: bool = Field(default=False, description="Auto-reload on code changes")
    ai_move_delay: float = Field(
        default=DEFAULT_AI_MOVE_DELAY,
        ge=0,
        le=10,
        description="Seconds an AI waits before acting"
    )
    ai_difficulty: str = Field(
        default=DIFFICULTY_MEDIUM,
        description="Difficulty for AI players added without one"
    )
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator('ai_difficulty')
    @classmethod
    def validate_difficulty(cls, v):
        if v not in DIFFICULTIES:
            raise ValueError(f'ai_difficulty must be one of {", ".join(DIFFICULTIES)}')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        return v.lower()

    @classmethod
    def from_env(cls) -> 'Settings':
        values = {
            "host": os.getenv("HOST"),
            "port": os.getenv("PORT"),
            "log_level": os.getenv("LOG_LEVEL"),
            "reload": os.getenv("RELOAD", "false").lower() == "true",
            "ai_move_delay": os.getenv("AI_MOVE_DELAY"),
            "ai_difficulty": os.getenv("AI_DIFFICULTY"),
        }
        origins = os.getenv("CORS_ORIGINS")
        if origins:
            values["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]
        return cls(**{k: v for k, v in values.items() if v is not None})
