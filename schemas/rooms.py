from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    # JSON on the wire and in the store is camelCase; Python code uses snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- stored state ----

class RoomConnection(CamelModel):
    session_id: str
    voter: bool = True
    vote: Optional[str] = None
    joined_at: int
    updated_at: int


class RoomState(CamelModel):
    room_id: str
    created_at: int
    updated_at: int
    card_pack: str
    forced_reveal: bool = False
    admin_token: str
    connections: Dict[str, RoomConnection] = {}


# ---- requester-scoped view ----

class RoomViewConnection(CamelModel):
    session_id: str
    voter: bool
    has_voted: bool
    vote: Optional[str] = None
    is_self: bool


class MyConnection(CamelModel):
    session_id: str
    voter: bool
    vote: Optional[str] = None


class VoteStats(CamelModel):
    average: Optional[float] = None
    std_dev: Optional[float] = None


class RoomView(CamelModel):
    room_id: str
    created_at: int
    updated_at: int
    card_pack: str
    cards: List[str]
    forced_reveal: bool
    revealed: bool
    is_admin: bool
    connections: List[RoomViewConnection]
    voter_count: int
    voted_count: int
    my: MyConnection
    stats: Optional[VoteStats] = None


# ---- requests / responses ----

# Request fields are typed loosely; wrong JSON types are rejected with a
# room error kind once the room and admin checks have passed

class VoteRequest(CamelModel):
    vote: Optional[Any] = None

class ToggleVoterRequest(CamelModel):
    # omitted means flip the current flag
    voter: Optional[Any] = None

class CardPackRequest(CamelModel):
    card_pack: Optional[Any] = None

class CreateRoomResponse(CamelModel):
    room_id: str

class CloseRoomResponse(BaseModel):
    message: str

class ErrorResponse(BaseModel):
    error: str
    kind: str
