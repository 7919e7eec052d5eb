"""
WebSocket transport for the Dalmuti game.
"""

from .events import IntentType, parse_intent

__all__ = ["IntentType", "parse_intent"]
