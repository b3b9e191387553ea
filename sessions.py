import secrets
import uuid
from typing import Optional, Tuple

from fastapi import Request, Response

from constants import ADMIN_COOKIE_PREFIX, COOKIE_MAX_AGE, SECURE_COOKIES, SESSION_COOKIE
from schemas.rooms import RoomState


def admin_cookie_name(room_id: str) -> str:
    return f"{ADMIN_COOKIE_PREFIX}{room_id}"


def get_or_create_session_id(request: Request) -> Tuple[str, bool]:
    """Return (session_id, is_new). A new id still has to be written with set_session_cookie."""
    existing = request.cookies.get(SESSION_COOKIE)
    if existing:
        return existing, False
    return str(uuid.uuid4()), True


def _set_cookie(response: Response, name: str, value: str):
    response.set_cookie(
        key=name,
        value=value,
        max_age=COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        samesite="lax",
        secure=SECURE_COOKIES,
    )


def set_session_cookie(response: Response, session_id: str, is_new: bool):
    if is_new:
        _set_cookie(response, SESSION_COOKIE, session_id)


def set_admin_cookie(response: Response, room_id: str, admin_token: str):
    _set_cookie(response, admin_cookie_name(room_id), admin_token)


def new_admin_token() -> str:
    return str(uuid.uuid4())


def is_room_admin(request: Request, room: RoomState) -> bool:
    presented: Optional[str] = request.cookies.get(admin_cookie_name(room.room_id))
    if not presented or not room.admin_token:
        return False
    return secrets.compare_digest(presented.encode(), room.admin_token.encode())
