# engine_py/src/dalmuti_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
NOT_FOUND = "NOT_FOUND"
PERMISSION_DENIED = "PERMISSION_DENIED"
INVALID_STATE = "INVALID_STATE"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
ALREADY_FINISHED = "ALREADY_FINISHED"
ILLEGAL_PLAY = "ILLEGAL_PLAY"
INVALID_EVENT = "INVALID_EVENT"
INTERNAL_ERROR = "INTERNAL_ERROR"
