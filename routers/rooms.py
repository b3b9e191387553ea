from fastapi import APIRouter, Depends, Request, Response
from typing import Any, Dict
import json
import random
import re

from backend import RoomStore
from constants import DEFAULT_CARD_PACK, ROOM_ID_ATTEMPTS
from exceptions import Forbidden, IdGenerationExhausted, InvalidRequestBody, InvalidRoomCode, RoomNotFound
from logging_config import get_logger
from room_logic import (
    cast_vote,
    change_card_pack,
    clear_vote,
    ensure_connection,
    new_room,
    reset,
    reveal,
    set_voter_flag,
    to_room_view,
)
from schemas.rooms import (
    CardPackRequest,
    CloseRoomResponse,
    CreateRoomResponse,
    RoomState,
    RoomView,
    ToggleVoterRequest,
    VoteRequest,
)
from sessions import (
    get_or_create_session_id,
    is_room_admin,
    new_admin_token,
    set_admin_cookie,
    set_session_cookie,
)

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/api/rooms", tags=["rooms"])

# ASCII only; \d would also accept other Unicode digits
ROOM_ID_PATTERN = re.compile(r"[0-9]{5}")


def get_room_store(request: Request) -> RoomStore:
    return request.app.state.room_store


async def read_json_body(request: Request) -> Dict[str, Any]:
    """
    Request body as a JSON object, or {} when it is missing, malformed or not
    an object.

    Bodies are read here rather than declared as pydantic parameters so a bad
    body never fails before the room code and admin checks have run.
    """
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        logger.debug(f"Ignoring malformed JSON body on {request.url.path}")
        return {}
    return body if isinstance(body, dict) else {}


def generate_room_id() -> str:
    return str(random.randint(10000, 99999))


def validate_room_id(room_id: str):
    if not ROOM_ID_PATTERN.fullmatch(room_id or ""):
        raise InvalidRoomCode(room_id)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _load_room(store: RoomStore, room_id: str) -> RoomState:
    validate_room_id(room_id)
    room = store.get(room_id)
    if room is None:
        raise RoomNotFound(room_id)
    return room


def _require_admin(request: Request, room: RoomState):
    if not is_room_admin(request, room):
        logger.warning(f"Admin action on room {room.room_id} rejected for {_client_host(request)}")
        raise Forbidden()


def _view_response(response: Response, room: RoomState, session_id: str, is_new: bool, is_admin: bool) -> RoomView:
    set_session_cookie(response, session_id, is_new)
    response.headers["Cache-Control"] = "no-store"
    return to_room_view(room, session_id, is_admin)


@rooms_router.post("", status_code=201, response_model=CreateRoomResponse)
def create_room(request: Request, response: Response, store: RoomStore = Depends(get_room_store)):
    logger.info(f"Room creation request from {_client_host(request)}")
    session_id, is_new = get_or_create_session_id(request)

    room_id = None
    for attempt in range(ROOM_ID_ATTEMPTS):
        candidate = generate_room_id()
        if store.get(candidate) is None:
            room_id = candidate
            break
        logger.warning(f"Room code collision on {candidate} (attempt {attempt + 1}/{ROOM_ID_ATTEMPTS})")
    if room_id is None:
        logger.error(f"Room creation failed: no free room code after {ROOM_ID_ATTEMPTS} attempts")
        raise IdGenerationExhausted()

    admin_token = new_admin_token()
    room = ensure_connection(new_room(room_id, admin_token, DEFAULT_CARD_PACK), session_id)
    store.set(room)

    set_admin_cookie(response, room_id, admin_token)
    set_session_cookie(response, session_id, is_new)
    logger.info(f"Room {room_id} created successfully: card_pack={room.card_pack}")
    return CreateRoomResponse(room_id=room_id)


@rooms_router.get("/{room_id}", response_model=RoomView)
def get_room(room_id: str, request: Request, response: Response, store: RoomStore = Depends(get_room_store)):
    """
    Current view of the room for the caller's session.

    Registers the session as a connection on first contact; polling clients
    that are already registered do not cause a write.
    """
    room = _load_room(store, room_id)
    session_id, is_new = get_or_create_session_id(request)
    is_admin = is_room_admin(request, room)

    next_room = ensure_connection(room, session_id)
    if next_room is not room:
        store.set(next_room)
        logger.info(f"Session {session_id[:8]} joined room {room_id} ({len(next_room.connections)} connections)")

    return _view_response(response, next_room, session_id, is_new, is_admin)


@rooms_router.post("/{room_id}/vote", response_model=RoomView)
def vote(
    room_id: str,
    request: Request,
    response: Response,
    body: Dict[str, Any] = Depends(read_json_body),
    store: RoomStore = Depends(get_room_store),
):
    room = _load_room(store, room_id)
    session_id, is_new = get_or_create_session_id(request)
    is_admin = is_room_admin(request, room)

    next_room = cast_vote(room, session_id, VoteRequest.model_validate(body).vote)
    store.set(next_room)
    logger.debug(f"Session {session_id[:8]} voted in room {room_id}")
    return _view_response(response, next_room, session_id, is_new, is_admin)


@rooms_router.post("/{room_id}/unvote", response_model=RoomView)
def unvote(room_id: str, request: Request, response: Response, store: RoomStore = Depends(get_room_store)):
    room = _load_room(store, room_id)
    session_id, is_new = get_or_create_session_id(request)
    is_admin = is_room_admin(request, room)

    next_room = clear_vote(room, session_id)
    store.set(next_room)
    logger.debug(f"Session {session_id[:8]} cleared its vote in room {room_id}")
    return _view_response(response, next_room, session_id, is_new, is_admin)


@rooms_router.post("/{room_id}/toggle-voter", response_model=RoomView)
def toggle_voter(
    room_id: str,
    request: Request,
    response: Response,
    body: Dict[str, Any] = Depends(read_json_body),
    store: RoomStore = Depends(get_room_store),
):
    room = _load_room(store, room_id)
    session_id, is_new = get_or_create_session_id(request)
    is_admin = is_room_admin(request, room)

    room = ensure_connection(room, session_id)
    voter = ToggleVoterRequest.model_validate(body).voter
    if voter is None:
        voter = not room.connections[session_id].voter
    elif not isinstance(voter, bool):
        raise InvalidRequestBody(f"voter must be true or false, got {voter!r}")
    next_room = set_voter_flag(room, session_id, voter)
    store.set(next_room)
    logger.debug(f"Session {session_id[:8]} set voter={voter} in room {room_id}")
    return _view_response(response, next_room, session_id, is_new, is_admin)


@rooms_router.post("/{room_id}/reveal", response_model=RoomView)
def reveal_room(room_id: str, request: Request, response: Response, store: RoomStore = Depends(get_room_store)):
    room = _load_room(store, room_id)
    _require_admin(request, room)
    session_id, is_new = get_or_create_session_id(request)

    next_room = reveal(ensure_connection(room, session_id))
    store.set(next_room)
    logger.info(f"Room {room_id} revealed by admin")
    return _view_response(response, next_room, session_id, is_new, True)


@rooms_router.post("/{room_id}/reset", response_model=RoomView)
def reset_room(room_id: str, request: Request, response: Response, store: RoomStore = Depends(get_room_store)):
    room = _load_room(store, room_id)
    _require_admin(request, room)
    session_id, is_new = get_or_create_session_id(request)

    next_room = reset(ensure_connection(room, session_id))
    store.set(next_room)
    logger.info(f"Room {room_id} reset by admin, new voting round")
    return _view_response(response, next_room, session_id, is_new, True)


@rooms_router.post("/{room_id}/card-pack", response_model=RoomView)
def set_card_pack(
    room_id: str,
    request: Request,
    response: Response,
    body: Dict[str, Any] = Depends(read_json_body),
    store: RoomStore = Depends(get_room_store),
):
    room = _load_room(store, room_id)
    _require_admin(request, room)
    session_id, is_new = get_or_create_session_id(request)

    next_room = change_card_pack(ensure_connection(room, session_id), CardPackRequest.model_validate(body).card_pack)
    store.set(next_room)
    logger.info(f"Room {room_id} switched to card pack {next_room.card_pack}")
    return _view_response(response, next_room, session_id, is_new, True)


@rooms_router.delete("/{room_id}", response_model=CloseRoomResponse)
def close_room(room_id: str, request: Request, store: RoomStore = Depends(get_room_store)):
    # Removes the room for everyone; polling clients start receiving 404
    room = _load_room(store, room_id)
    _require_admin(request, room)
    store.delete(room_id)
    logger.info(f"Room {room_id} closed by admin {_client_host(request)}")
    return CloseRoomResponse(message="Room closed successfully")
