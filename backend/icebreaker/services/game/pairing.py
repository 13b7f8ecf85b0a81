from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from icebreaker import db
from icebreaker.errors import NotFound, ValidationError
from icebreaker.models import GameSession, User
from . import participants
from .rooms import get_joinable_room, get_room, partner_seat_for, validate_seat


@dataclass
class SessionStart:
    session: GameSession
    user: User
    partner: User

    def to_dict(self):
        return {
            'id': self.session.id,
            'game_room_id': self.session.game_room_id,
            'is_complete': self.session.is_complete,
            'user_id': self.user.id,
            'user_name': self.user.name,
            'seat_number': self.user.seat_number,
            'partner_id': self.partner.id,
            'partner_name': self.partner.name,
            'partner_seat_number': self.partner.seat_number,
        }


def get_session(session_id: int) -> GameSession:
    session = db.session.get(GameSession, session_id)
    if session is None:
        raise NotFound('Game session not found')
    return session


def _open_session(room_id: int, low: int, high: int) -> Optional[GameSession]:
    return (
        GameSession.query
        .filter_by(game_room_id=room_id, user1_id=low, user2_id=high, is_complete=False)
        .order_by(GameSession.created_at.desc(), GameSession.id.desc())
        .first()
    )


def get_or_create(room_id: int, user_a_id: int, user_b_id: int) -> GameSession:
    """Return the open session for the unordered pair, creating one if needed.

    A finished session is never reused, so the same two seats can be paired
    again in a later round without mixing answers.
    """
    room = get_room(room_id)
    if user_a_id == user_b_id:
        raise ValidationError('A participant cannot be paired with themselves')
    for uid in (user_a_id, user_b_id):
        user = db.session.get(User, uid)
        if user is None or user.game_room_id != room.id:
            raise NotFound(f'User {uid} is not seated in this room')

    low, high = sorted((user_a_id, user_b_id))
    session = _open_session(room.id, low, high)
    if session is not None:
        return session

    session = GameSession(game_room_id=room.id, user1_id=low, user2_id=high, is_complete=False)
    db.session.add(session)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        session = _open_session(room.id, low, high)
        if session is None:
            raise
        return session
    current_app.logger.info(f"[session-create] room={room.id} session={session.id} users=({low}, {high})")
    return session


def mark_complete(session_id: int) -> GameSession:
    session = get_session(session_id)
    if session.is_complete:
        return session
    session.is_complete = True
    db.session.add(session)
    db.session.commit()
    current_app.logger.info(f"[session-complete] session={session.id}")
    return session


def start_session(room_code: str, my_name: str, my_seat: int, partner_seat: Optional[int] = None) -> SessionStart:
    """Seat the caller (re-entering under a new name if needed) and pair them with the partner seat.

    Without an explicit partner seat the room's partner assignment is used.
    The partner must already have joined.
    """
    room = get_joinable_room(room_code)
    validate_seat(room, my_seat, field='my_seat_number')
    if partner_seat is None:
        partner_seat = partner_seat_for(room, my_seat)
        if partner_seat is None:
            raise ValidationError('partner_seat_number is required; no partner is assigned to this seat')
    validate_seat(room, partner_seat, field='partner_seat_number')
    if my_seat == partner_seat:
        raise ValidationError("Your seat number and partner's seat number must be different")

    me = participants.find_by_seat(room.id, my_seat)
    if me is None:
        me = participants.join(room.id, my_name, my_seat)
    else:
        me = participants.rename(me.id, my_name)

    partner = participants.find_by_seat(room.id, partner_seat)
    if partner is None:
        raise NotFound(f'Nobody has joined seat {partner_seat} yet')

    session = get_or_create(room.id, me.id, partner.id)
    current_app.logger.info(f"[session-start] room={room.id} session={session.id} seat={my_seat} partner_seat={partner_seat}")
    return SessionStart(session=session, user=me, partner=partner)
