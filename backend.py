import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis
from pydantic import ValidationError

from constants import (
    DEFAULT_ROOM_TTL_SECONDS,
    MAX_ROOM_TTL_SECONDS,
    MIN_ROOM_TTL_SECONDS,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    ROOM_TTL_SECONDS,
)
from exceptions import StorageUnavailable
from logging_config import get_logger
from redis_keys import REDIS_ROOM_KEY
from schemas.rooms import RoomState

logger = get_logger(__name__)


def get_room_ttl_seconds(raw: Optional[str] = ROOM_TTL_SECONDS) -> int:
    """Resolve the configured room TTL, clamped to 5 minutes .. 30 days."""
    if raw is None or str(raw).strip() == "":
        return DEFAULT_ROOM_TTL_SECONDS
    try:
        ttl = int(str(raw).strip())
    except ValueError:
        logger.warning(f"Ignoring invalid PP_ROOM_TTL_SECONDS={raw!r}, using {DEFAULT_ROOM_TTL_SECONDS}")
        return DEFAULT_ROOM_TTL_SECONDS
    clamped = min(max(ttl, MIN_ROOM_TTL_SECONDS), MAX_ROOM_TTL_SECONDS)
    if clamped != ttl:
        logger.warning(f"PP_ROOM_TTL_SECONDS={ttl} out of range, clamped to {clamped}")
    return clamped


def encode_room(room: RoomState) -> str:
    return room.model_dump_json(by_alias=True)


def decode_room(raw) -> Optional[RoomState]:
    """Stored data that does not decode to a RoomState reads as an absent room."""
    if raw is None:
        return None
    try:
        return RoomState.model_validate_json(raw)
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning(f"Discarding undecodable room data: {e}")
        return None


class RoomStore(ABC):
    """Last-writer-wins register of room snapshots, one key per room."""

    def __init__(self, ttl_seconds: int = DEFAULT_ROOM_TTL_SECONDS):
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    def get(self, room_id: str) -> Optional[RoomState]:
        ...

    @abstractmethod
    def set(self, room: RoomState) -> None:
        """Persist the snapshot and refresh its TTL from now."""

    @abstractmethod
    def delete(self, room_id: str) -> None:
        ...


class RedisRoomStore(RoomStore):
    def __init__(self, redis_client: redis.Redis, ttl_seconds: int = DEFAULT_ROOM_TTL_SECONDS):
        super().__init__(ttl_seconds)
        self.redis_client = redis_client

    @classmethod
    def from_config(cls, ttl_seconds: int = DEFAULT_ROOM_TTL_SECONDS) -> "RedisRoomStore":
        try:
            redis_client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                db=REDIS_DB,
                decode_responses=True,
            )
            # Test connection
            redis_client.ping()
            logger.info(f"Redis client connected successfully to {REDIS_HOST}:{REDIS_PORT}")
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis at {REDIS_HOST}:{REDIS_PORT}: {e}", exc_info=True)
            raise
        return cls(redis_client, ttl_seconds)

    def get(self, room_id: str) -> Optional[RoomState]:
        key = REDIS_ROOM_KEY.format(room_id=room_id)
        logger.debug(f"Fetching room {room_id} from key {key}")
        try:
            raw = self.redis_client.get(key)
        except redis.RedisError as e:
            logger.error(f"Redis read failed for room {room_id}: {e}", exc_info=True)
            return None
        if raw is None:
            logger.debug(f"Room {room_id} not found in Redis")
            return None
        return decode_room(raw)

    def set(self, room: RoomState) -> None:
        key = REDIS_ROOM_KEY.format(room_id=room.room_id)
        try:
            self.redis_client.set(key, encode_room(room), ex=self.ttl_seconds)
        except redis.RedisError as e:
            logger.error(f"Redis write failed for room {room.room_id}: {e}", exc_info=True)
            raise StorageUnavailable() from e
        logger.debug(f"Room {room.room_id} stored with TTL {self.ttl_seconds} seconds")

    def delete(self, room_id: str) -> None:
        key = REDIS_ROOM_KEY.format(room_id=room_id)
        try:
            deleted = self.redis_client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Redis delete failed for room {room_id}: {e}", exc_info=True)
            raise StorageUnavailable() from e
        logger.debug(f"Room {room_id} deleted: key={deleted}")


class MemoryRoomStore(RoomStore):
    """
    Process-local fallback used when no Redis is configured.

    Entries hold the same JSON the Redis store writes and expire individually;
    an expired entry is dropped the next time it is read. There is no sweep.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_ROOM_TTL_SECONDS, clock: Callable[[], float] = time.time):
        super().__init__(ttl_seconds)
        self.clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}

    def get(self, room_id: str) -> Optional[RoomState]:
        entry = self._entries.get(room_id)
        if entry is None:
            return None
        raw, expires_at = entry
        if expires_at < self.clock():
            logger.debug(f"Room {room_id} expired in memory store")
            self._entries.pop(room_id, None)
            return None
        return decode_room(raw)

    def set(self, room: RoomState) -> None:
        self._entries[room.room_id] = (encode_room(room), self.clock() + self.ttl_seconds)
        logger.debug(f"Room {room.room_id} stored in memory with TTL {self.ttl_seconds} seconds")

    def delete(self, room_id: str) -> None:
        self._entries.pop(room_id, None)
        logger.debug(f"Room {room_id} deleted from memory store")

    def __len__(self) -> int:
        return len(self._entries)


def create_room_store() -> RoomStore:
    """Pick the backend once at startup: Redis when REDIS_HOST is set, memory otherwise."""
    ttl_seconds = get_room_ttl_seconds()
    if REDIS_HOST:
        logger.info(f"Using Redis room store at {REDIS_HOST}:{REDIS_PORT} (ttl={ttl_seconds}s)")
        return RedisRoomStore.from_config(ttl_seconds)
    logger.info(f"REDIS_HOST not set, using in-memory room store (ttl={ttl_seconds}s)")
    return MemoryRoomStore(ttl_seconds)
