from dataclasses import dataclass, field, asdict
from typing import Dict, List, Union

from icebreaker import db
from icebreaker.errors import Forbidden, NotFound
from icebreaker.models import Answer, GameSession, User
from .answers import question_count
from .pairing import get_session, mark_complete


@dataclass
class AnswerPair:
    question_number: int
    my_answer: str
    partner_guess: str
    actual_partner_answer: str
    is_correct: bool


@dataclass
class GameResult:
    game_session_id: int
    user_id: int
    partner_id: int
    user_name: str
    partner_name: str
    user_seat_number: int
    partner_seat_number: int
    total_questions: int
    correct_count: int = 0
    answer_pairs: List[AnswerPair] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Pending:
    """Not an error: at least one side has not answered every question yet."""
    waiting_on: List[int]

    def to_dict(self):
        return {'waiting_on': list(self.waiting_on)}


def _sheets(session: GameSession) -> Dict[int, Dict[int, Answer]]:
    """Both participants' answers keyed by question number, from one query."""
    sheets = {session.user1_id: {}, session.user2_id: {}}
    for answer in session.answers.order_by(Answer.question_number).all():
        if answer.user_id in sheets:
            sheets[answer.user_id][answer.question_number] = answer
    return sheets


def _score(session: GameSession, user: User, partner: User, mine, theirs, n: int) -> GameResult:
    result = GameResult(
        game_session_id=session.id,
        user_id=user.id,
        partner_id=partner.id,
        user_name=user.name,
        partner_name=partner.name,
        user_seat_number=user.seat_number,
        partner_seat_number=partner.seat_number,
        total_questions=n,
    )
    for number in range(1, n + 1):
        own, other = mine[number], theirs[number]
        is_correct = own.partner_guess == other.my_answer
        result.answer_pairs.append(AnswerPair(
            question_number=number,
            my_answer=own.my_answer,
            partner_guess=own.partner_guess,
            actual_partner_answer=other.my_answer,
            is_correct=is_correct,
        ))
        if is_correct:
            result.correct_count += 1
    return result


def score_session(session: GameSession, viewing_user_id: int = None) -> Union[Dict[int, GameResult], Pending]:
    """Score both sides of a pairing, keyed by user id.

    A side counts as finished only when its question numbers are exactly
    1..N. A guess is correct only on an exact string match; no trimming or
    case folding is applied. The first complete scoring marks the session
    complete.
    """
    first = viewing_user_id if viewing_user_id is not None else session.user1_id
    order = (first, session.partner_of(first))
    n = question_count()
    expected = set(range(1, n + 1))
    sheets = _sheets(session)

    waiting_on = [uid for uid in order if set(sheets[uid]) != expected]
    if waiting_on:
        return Pending(waiting_on=waiting_on)

    users = {uid: db.session.get(User, uid) for uid in order}
    if any(u is None for u in users.values()):
        raise NotFound('Participant not found')

    a, b = order
    results = {
        a: _score(session, users[a], users[b], sheets[a], sheets[b], n),
        b: _score(session, users[b], users[a], sheets[b], sheets[a], n),
    }
    if not session.is_complete:
        mark_complete(session.id)
    return results


def compute_result(session_id: int, viewing_user_id: int) -> Union[GameResult, Pending]:
    """Score the viewer's guesses against the partner's real answers."""
    session = get_session(session_id)
    if not session.has_participant(viewing_user_id):
        raise Forbidden('User is not part of this game session')
    outcome = score_session(session, viewing_user_id)
    if isinstance(outcome, Pending):
        return outcome
    return outcome[viewing_user_id]
