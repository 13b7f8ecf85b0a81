from dataclasses import dataclass, asdict
from typing import List, Optional

from icebreaker.models import GameSession
from .rooms import get_room, team_for
from .scoring import Pending, score_session


@dataclass
class UserScoreSummary:
    user_id: int
    name: str
    seat_number: int
    team: Optional[str]
    partner_id: int
    partner_name: str
    partner_seat_number: int
    game_session_id: int
    correct_count: int
    total_questions: int

    def to_dict(self):
        return asdict(self)


def summarize(room_id: int) -> List[UserScoreSummary]:
    """One row per participant of every completed pairing in the room, by seat.

    Sessions whose answers are all in but that nobody has polled yet are
    scored here too, which marks them complete.
    """
    room = get_room(room_id)
    rows = []
    for session in room.sessions.order_by(GameSession.id).all():
        scored = score_session(session)
        if isinstance(scored, Pending):
            continue
        for result in scored.values():
            rows.append(UserScoreSummary(
                user_id=result.user_id,
                name=result.user_name,
                seat_number=result.user_seat_number,
                team=team_for(room, result.user_seat_number),
                partner_id=result.partner_id,
                partner_name=result.partner_name,
                partner_seat_number=result.partner_seat_number,
                game_session_id=session.id,
                correct_count=result.correct_count,
                total_questions=result.total_questions,
            ))
    rows.sort(key=lambda row: (row.seat_number, row.game_session_id))
    return rows
