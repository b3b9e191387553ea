"""
Room state machine and view projection.

Every function here takes a RoomState snapshot and returns a new one; inputs
are never mutated. Callers load a snapshot from the store, run it through
one of these transitions, write the result back and project a RoomView for
the acting session. Admin-only transitions (reveal, reset, change_card_pack)
do not check authorization; the router does that before calling them.
"""
import math
import time
from typing import List, Optional

from card_packs import get_card_pack, is_card_pack
from exceptions import AlreadyFinished, InvalidCardPack, InvalidToken, NotAVoter
from schemas.rooms import (
    MyConnection,
    RoomConnection,
    RoomState,
    RoomView,
    RoomViewConnection,
    VoteStats,
)


def now_ms() -> int:
    return int(time.time() * 1000)


def new_room(room_id: str, admin_token: str, card_pack: str) -> RoomState:
    now = now_ms()
    return RoomState(
        room_id=room_id,
        created_at=now,
        updated_at=now,
        card_pack=card_pack,
        forced_reveal=False,
        admin_token=admin_token,
        connections={},
    )


def ensure_connection(room: RoomState, session_id: str) -> RoomState:
    """
    Register a session as a connection of the room.

    Returns `room` itself when the session is already known, so callers can
    compare identity to decide whether a write is needed.
    """
    if session_id in room.connections:
        return room
    now = now_ms()
    conn = RoomConnection(
        session_id=session_id,
        voter=True,
        vote=None,
        joined_at=now,
        updated_at=now,
    )
    connections = dict(room.connections)
    connections[session_id] = conn
    return room.model_copy(update={"updated_at": now, "connections": connections})


def compute_voting_finished(room: RoomState) -> bool:
    if room.forced_reveal:
        return True
    voters = [c for c in room.connections.values() if c.voter]
    # a room without voters only finishes through a forced reveal
    if not voters:
        return False
    return all(c.vote for c in voters)


def _update_connection(room: RoomState, session_id: str, **fields) -> RoomState:
    now = now_ms()
    connections = dict(room.connections)
    connections[session_id] = connections[session_id].model_copy(update=dict(fields, updated_at=now))
    return room.model_copy(update={"updated_at": now, "connections": connections})


def _clear_all_votes(room: RoomState, **fields) -> RoomState:
    now = now_ms()
    connections = {
        sid: conn.model_copy(update={"vote": None, "updated_at": now})
        for sid, conn in room.connections.items()
    }
    return room.model_copy(update=dict(fields, updated_at=now, connections=connections))


def cast_vote(room: RoomState, session_id: str, token: str) -> RoomState:
    room = ensure_connection(room, session_id)
    if not room.connections[session_id].voter:
        raise NotAVoter()
    if compute_voting_finished(room):
        raise AlreadyFinished()
    if not isinstance(token, str) or not token or token not in get_card_pack(room.card_pack):
        raise InvalidToken(f"Vote {token!r} is not a card in the {room.card_pack!r} pack")
    return _update_connection(room, session_id, vote=token)


def clear_vote(room: RoomState, session_id: str) -> RoomState:
    room = ensure_connection(room, session_id)
    if compute_voting_finished(room):
        raise AlreadyFinished()
    return _update_connection(room, session_id, vote=None)


def set_voter_flag(room: RoomState, session_id: str, voter: bool) -> RoomState:
    # allowed after reveal too; an existing vote is kept
    room = ensure_connection(room, session_id)
    return _update_connection(room, session_id, voter=bool(voter))


def reveal(room: RoomState) -> RoomState:
    return room.model_copy(update={"forced_reveal": True, "updated_at": now_ms()})


def reset(room: RoomState) -> RoomState:
    """Start a new round: clear every vote and the forced reveal."""
    return _clear_all_votes(room, forced_reveal=False)


def change_card_pack(room: RoomState, card_pack: str) -> RoomState:
    # votes from the previous pack are not valid tokens in the new one
    if not isinstance(card_pack, str) or not is_card_pack(card_pack):
        raise InvalidCardPack(f"Unknown card pack: {card_pack!r}")
    return _clear_all_votes(room, card_pack=card_pack, forced_reveal=False)


def _parse_number(vote: Optional[str]) -> Optional[float]:
    if not vote:
        return None
    try:
        value = float(vote)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def compute_vote_stats(room: RoomState) -> VoteStats:
    """Average and population standard deviation over numeric voter votes."""
    numbers: List[float] = []
    for conn in room.connections.values():
        if not conn.voter:
            continue
        value = _parse_number(conn.vote)
        if value is not None:
            numbers.append(value)
    if not numbers:
        return VoteStats(average=None, std_dev=None)
    average = sum(numbers) / len(numbers)
    variance = sum((n - average) ** 2 for n in numbers) / len(numbers)
    return VoteStats(average=average, std_dev=math.sqrt(variance))


def to_room_view(room: RoomState, session_id: str, is_admin: bool) -> RoomView:
    """
    Project a snapshot for one requester.

    Other sessions' votes stay hidden until the room is revealed; `hasVoted`
    is reported regardless. The admin token has no field in RoomView.
    """
    revealed = compute_voting_finished(room)

    ordered = sorted(room.connections.values(), key=lambda c: c.joined_at)
    connections = []
    for conn in ordered:
        is_self = conn.session_id == session_id
        connections.append(RoomViewConnection(
            session_id=conn.session_id,
            voter=conn.voter,
            has_voted=bool(conn.vote),
            vote=conn.vote if (revealed or is_self) else None,
            is_self=is_self,
        ))

    voter_count = sum(1 for c in room.connections.values() if c.voter)
    voted_count = sum(1 for c in room.connections.values() if c.voter and c.vote)

    me = room.connections.get(session_id)
    if me is None:
        # session arrived but has not been written yet
        my = MyConnection(session_id=session_id, voter=True, vote=None)
    else:
        my = MyConnection(session_id=me.session_id, voter=me.voter, vote=me.vote)

    return RoomView(
        room_id=room.room_id,
        created_at=room.created_at,
        updated_at=room.updated_at,
        card_pack=room.card_pack,
        cards=get_card_pack(room.card_pack),
        forced_reveal=room.forced_reveal,
        revealed=revealed,
        is_admin=is_admin,
        connections=connections,
        voter_count=voter_count,
        voted_count=voted_count,
        my=my,
        stats=compute_vote_stats(room) if revealed else None,
    )
