import random
import string
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from icebreaker import db
from icebreaker.errors import Conflict, NotFound, ValidationError
from icebreaker.models import GameRoom, utcnow


def _random_code(length: int) -> str:
    return ''.join(random.choices(string.digits, k=length))


def _code_in_use(code: str) -> bool:
    return GameRoom.query.filter_by(code=code, is_active=True).first() is not None


def create_room(expiry_hours: int, total_participants: Optional[int] = None) -> GameRoom:
    """Create an active room whose code no other active room holds.

    Collisions are retried, both when a pre-check finds the code taken and
    when a concurrent insert wins the unique index at commit time.
    """
    cfg = current_app.config
    min_hours = int(cfg.get('ROOM_MIN_EXPIRY_HOURS', 1))
    max_hours = int(cfg.get('ROOM_MAX_EXPIRY_HOURS', 72))
    if isinstance(expiry_hours, bool) or not isinstance(expiry_hours, int) or not min_hours <= expiry_hours <= max_hours:
        raise ValidationError(f'expiry_hours must be an integer between {min_hours} and {max_hours}')

    seats = int(cfg.get('MAX_SEAT_NUMBER', 12))
    if total_participants is not None:
        max_participants = int(cfg.get('MAX_ROOM_PARTICIPANTS', 100))
        if isinstance(total_participants, bool) or not isinstance(total_participants, int) or not 2 <= total_participants <= max_participants:
            raise ValidationError(f'total_participants must be an integer between 2 and {max_participants}')
        seats = total_participants

    length = int(cfg.get('ROOM_CODE_LENGTH', 6))
    attempts = int(cfg.get('ROOM_CODE_ATTEMPTS', 20))
    for _ in range(attempts):
        code = _random_code(length)
        if _code_in_use(code):
            continue
        now = utcnow()
        room = GameRoom(
            code=code,
            is_active=True,
            created_at=now,
            expires_at=now + timedelta(hours=expiry_hours),
            total_participants=seats,
        )
        db.session.add(room)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.info(f"[room-create] code collision on commit code={code}, retrying")
            continue
        current_app.logger.info(f"[room-create] room={room.id} code={room.code} expires_at={room.expires_at.isoformat()}")
        return room
    raise Conflict('Could not allocate a unique room code, please try again')


def get_room(room_id: int) -> GameRoom:
    room = db.session.get(GameRoom, room_id)
    if room is None:
        raise NotFound('Game room not found')
    return room


def find_active_room_by_code(code: str, now: Optional[datetime] = None) -> Optional[GameRoom]:
    """Look up a room by code, ignoring rooms that are inactive or already expired.

    Expiry is checked here as well as by the sweep, so a room cannot be joined
    between its deadline and the next sweep tick.
    """
    if not code:
        return None
    return (
        GameRoom.query
        .filter(GameRoom.code == code.strip(), GameRoom.is_active.is_(True), GameRoom.expires_at > (now or utcnow()))
        .first()
    )


def get_joinable_room(code: str) -> GameRoom:
    room = find_active_room_by_code(code)
    if room is None:
        raise NotFound('Game room not found or expired')
    return room


def list_active_rooms(now: Optional[datetime] = None) -> List[GameRoom]:
    return (
        GameRoom.query
        .filter(GameRoom.is_active.is_(True), GameRoom.expires_at > (now or utcnow()))
        .order_by(GameRoom.created_at.desc(), GameRoom.id.desc())
        .all()
    )


def deactivate(room_id: int) -> GameRoom:
    """Deactivate a room. Calling it on an inactive room is a no-op."""
    room = get_room(room_id)
    if not room.is_active:
        return room
    room.is_active = False
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[room-deactivate] room={room.id} code={room.code}")
    return room


def sweep_expired(now: Optional[datetime] = None) -> List[int]:
    """Deactivate every active room past its expiry; return the ids deactivated.

    Each room is committed on its own so one failure does not abort the sweep.
    """
    now = now or utcnow()
    candidates = [
        room_id for (room_id,) in
        db.session.query(GameRoom.id).filter(GameRoom.is_active.is_(True), GameRoom.expires_at <= now)
        .order_by(GameRoom.id).all()
    ]
    deactivated = []
    for room_id in candidates:
        try:
            room = db.session.get(GameRoom, room_id)
            if room is None or not room.is_active:
                continue
            room.is_active = False
            db.session.add(room)
            db.session.commit()
            deactivated.append(room_id)
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"[sweep] failed to deactivate room={room_id}")
    current_app.logger.info(f"[sweep] checked={len(candidates)} deactivated={len(deactivated)}")
    return deactivated


def seat_limit(room: GameRoom) -> int:
    return max(int(current_app.config.get('MAX_SEAT_NUMBER', 12)), int(room.total_participants or 0))


def validate_seat(room: GameRoom, seat_number, field: str = 'seat_number') -> int:
    limit = seat_limit(room)
    if isinstance(seat_number, bool) or not isinstance(seat_number, int) or not 1 <= seat_number <= limit:
        raise ValidationError(f'{field} must be an integer between 1 and {limit}')
    return seat_number


def assign_teams(room_id: int, teams: Dict[str, List[int]]) -> GameRoom:
    """Replace the room's team layout (team label -> ordered seats)."""
    room = get_room(room_id)
    if not isinstance(teams, dict):
        raise ValidationError('teams must be an object mapping team label to seat numbers')
    layout = {}
    seen = {}
    for label, seats in teams.items():
        label = str(label).strip()
        if not label:
            raise ValidationError('Team labels must not be empty')
        if not isinstance(seats, list):
            raise ValidationError(f'Seats for team {label!r} must be a list')
        ordered = []
        for seat in seats:
            validate_seat(room, seat)
            if seat in seen:
                raise ValidationError(f'Seat {seat} is already in team {seen[seat]!r}')
            seen[seat] = label
            ordered.append(seat)
        layout[label] = ordered
    room.team_config = layout
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[room-teams] room={room.id} teams={len(layout)}")
    return room


def assign_partners(room_id: int, pairs: Dict[str, int]) -> GameRoom:
    """Replace the room's partner layout (seat -> partner seat), stored symmetric."""
    room = get_room(room_id)
    if not isinstance(pairs, dict):
        raise ValidationError('partners must be an object mapping seat to partner seat')
    layout = {}
    for seat, partner in pairs.items():
        try:
            seat = int(seat)
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid seat {seat!r}')
        validate_seat(room, seat)
        validate_seat(room, partner, field='partner seat')
        if seat == partner:
            raise ValidationError(f'Seat {seat} cannot be its own partner')
        for a, b in ((seat, partner), (partner, seat)):
            existing = layout.get(str(a))
            if existing is not None and existing != b:
                raise ValidationError(f'Seat {a} is already paired with seat {existing}')
            layout[str(a)] = b
    room.partner_config = layout
    db.session.add(room)
    db.session.commit()
    current_app.logger.info(f"[room-partners] room={room.id} pairs={len(layout) // 2}")
    return room


def partner_seat_for(room: GameRoom, seat_number: int) -> Optional[int]:
    return (room.partner_config or {}).get(str(seat_number))


def team_for(room: GameRoom, seat_number: int) -> Optional[str]:
    for label, seats in (room.team_config or {}).items():
        if seat_number in seats:
            return label
    return None
