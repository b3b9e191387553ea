"""
Room errors.

Every failure a caller can observe is one of these classes. Each carries the
HTTP status it maps to, and app.py renders them all through one handler as
{"error": message, "kind": class name}.
"""
from typing import Optional


class PlanningPokerException(Exception):
    """Base class for every room error."""
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


# ============ Room lookup ============

class InvalidRoomCode(PlanningPokerException):
    """Room code is not exactly five ASCII digits. Raised before any store access."""
    default_message = "Invalid room code"

    def __init__(self, room_id: Optional[str] = None):
        self.room_id = room_id
        super().__init__(f"Invalid room code: {room_id!r}" if room_id is not None else None)


class RoomNotFound(PlanningPokerException):
    status_code = 404
    default_message = "Room not found"

    def __init__(self, room_id: Optional[str] = None):
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found" if room_id is not None else None)


class Forbidden(PlanningPokerException):
    """Admin action without this room's admin secret."""
    status_code = 403
    default_message = "Only the room admin can do this"


# ============ Voting ============

class NotAVoter(PlanningPokerException):
    default_message = "You are not registered as a voter"


class AlreadyFinished(PlanningPokerException):
    default_message = "Voting has already finished"


class InvalidToken(PlanningPokerException):
    default_message = "Vote is not a card in the active pack"


class InvalidCardPack(PlanningPokerException):
    default_message = "Unknown card pack"


class InvalidRequestBody(PlanningPokerException):
    """Body field present but of the wrong JSON type."""
    default_message = "Invalid request body"


# ============ Storage ============

class StorageUnavailable(PlanningPokerException):
    """Backing store call failed on write."""
    status_code = 503
    default_message = "Room storage is unavailable"


class IdGenerationExhausted(PlanningPokerException):
    status_code = 500
    default_message = "Could not generate a free room code"
