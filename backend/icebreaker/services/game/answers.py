from typing import Iterable, List, Mapping

from flask import current_app
from sqlalchemy.exc import IntegrityError

from icebreaker import db
from icebreaker.errors import Forbidden, ValidationError
from icebreaker.models import Answer, GameSession
from .pairing import get_session


def question_count() -> int:
    return int(current_app.config.get('QUESTION_COUNT', 10))


def _participant_session(session_id: int, user_id: int) -> GameSession:
    session = get_session(session_id)
    if not session.has_participant(user_id):
        raise Forbidden('User is not part of this game session')
    return session


def _check_fields(question_number, my_answer, partner_guess) -> None:
    n = question_count()
    if isinstance(question_number, bool) or not isinstance(question_number, int) or not 1 <= question_number <= n:
        raise ValidationError(f'question_number must be between 1 and {n}')
    if not isinstance(my_answer, str) or not my_answer.strip():
        raise ValidationError(f'Question {question_number}: your answer is required')
    if not isinstance(partner_guess, str) or not partner_guess.strip():
        raise ValidationError(f"Question {question_number}: your guess for your partner's answer is required")


def _write(session_id, user_id, question_number, my_answer, partner_guess) -> Answer:
    answer = Answer.query.filter_by(
        game_session_id=session_id, user_id=user_id, question_number=question_number
    ).first()
    if answer is None:
        answer = Answer(game_session_id=session_id, user_id=user_id, question_number=question_number)
    answer.my_answer = my_answer
    answer.partner_guess = partner_guess
    db.session.add(answer)
    return answer


def _commit_with_retry(write) -> list:
    # A concurrent insert of the same (session, user, question) loses to the
    # unique constraint; the retry then finds that row and overwrites it
    for attempt in range(2):
        rows = write()
        try:
            db.session.commit()
            return rows
        except IntegrityError:
            db.session.rollback()
            if attempt:
                raise
    return []


def upsert_answer(session_id: int, user_id: int, question_number: int, my_answer: str, partner_guess: str) -> Answer:
    """Insert or overwrite the answer for (session, user, question)."""
    _participant_session(session_id, user_id)
    _check_fields(question_number, my_answer, partner_guess)
    (answer,) = _commit_with_retry(
        lambda: [_write(session_id, user_id, question_number, my_answer, partner_guess)]
    )
    return answer


def submit_answers(session_id: int, user_id: int, answers: Iterable[Mapping]) -> List[Answer]:
    """Save a full answer sheet in one transaction.

    Question numbers follow list position. Everything is validated before
    the first row is written.
    """
    _participant_session(session_id, user_id)
    n = question_count()
    if not isinstance(answers, list) or len(answers) != n:
        raise ValidationError(f'Exactly {n} answers are required')
    sheet = []
    for number, item in enumerate(answers, start=1):
        if not isinstance(item, Mapping):
            raise ValidationError(f'Question {number}: answer must be an object')
        my_answer, partner_guess = item.get('my_answer'), item.get('partner_guess')
        _check_fields(number, my_answer, partner_guess)
        sheet.append((number, my_answer, partner_guess))

    rows = _commit_with_retry(
        lambda: [_write(session_id, user_id, number, mine, guess) for number, mine, guess in sheet]
    )
    current_app.logger.info(f"[answers-saved] session={session_id} user={user_id} count={len(rows)}")
    return rows


def get_answers(session_id: int, user_id: int) -> List[Answer]:
    return (
        Answer.query
        .filter_by(game_session_id=session_id, user_id=user_id)
        .order_by(Answer.question_number)
        .all()
    )


def has_answered_all(session_id: int, user_id: int) -> bool:
    """True only when the stored question numbers are exactly 1..N."""
    numbers = [a.question_number for a in get_answers(session_id, user_id)]
    return len(numbers) == question_count() and set(numbers) == set(range(1, question_count() + 1))
