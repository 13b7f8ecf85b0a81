from typing import List

from flask import current_app
from sqlalchemy.exc import IntegrityError

from icebreaker import db
from icebreaker.errors import Conflict, NotFound, ValidationError
from icebreaker.models import User
from .rooms import get_room, validate_seat


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('name is required')
    name = name.strip()
    if len(name) > 64:
        raise ValidationError('name must be at most 64 characters')
    return name


def _seated(room_id: int, seat_number: int):
    return User.query.filter_by(game_room_id=room_id, seat_number=seat_number).first()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound('User not found')
    return user


def join(room_id: int, name: str, seat_number: int) -> User:
    """Seat a participant; the first claim on a seat wins.

    Rejoining the same seat under the same name returns the existing
    participant, a different name is a Conflict.
    """
    room = get_room(room_id)
    name = _clean_name(name)
    validate_seat(room, seat_number)

    existing = _seated(room.id, seat_number)
    if existing is None:
        user = User(game_room_id=room.id, name=name, seat_number=seat_number)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # Lost the race for this seat; settle against the winner
            db.session.rollback()
            existing = _seated(room.id, seat_number)
            if existing is None:
                raise
        else:
            current_app.logger.info(f"[seat-join] room={room.id} seat={seat_number} user={user.id}")
            return user

    if existing.name != name:
        raise Conflict(f'Seat {seat_number} is already taken')
    current_app.logger.info(f"[seat-rejoin] room={room.id} seat={seat_number} user={existing.id}")
    return existing


def rename(user_id: int, name: str) -> User:
    user = get_user(user_id)
    name = _clean_name(name)
    if user.name != name:
        current_app.logger.info(f"[seat-rename] user={user.id} seat={user.seat_number}")
        user.name = name
        db.session.add(user)
        db.session.commit()
    return user


def find_by_seat(room_id: int, seat_number: int):
    return _seated(room_id, seat_number)


def list_participants(room_id: int) -> List[User]:
    room = get_room(room_id)
    return User.query.filter_by(game_room_id=room.id).order_by(User.seat_number).all()
