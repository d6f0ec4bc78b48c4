from __future__ import annotations

import logging
import random
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizcomp.core.config import settings
from quizcomp.core.errors import bad_request, forbidden, not_found
from quizcomp.models.attempt import ATTEMPT_COMPLETED, ATTEMPT_STARTED, Attempt
from quizcomp.models.question import Question
from quizcomp.models.user import QUIZ_COMPLETED, QUIZ_FINISHED_STATUSES, QUIZ_STARTED, User
from quizcomp.schemas.quiz import QuizQuestionOut, StartQuizOut, SubmitAnswersRequest

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()

SUBMITTED = "Quiz submitted successfully!"
ALREADY_SUBMITTED = "Quiz already submitted."


def parse_id_list(raw: Optional[str]) -> List[int]:
    """Parse a comma separated id list, keeping order and dropping junk tokens."""
    ids: List[int] = []
    for token in (raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        try:
            value = int(token)
        except ValueError:
            continue
        if value > 0:
            ids.append(value)
    return ids


def pick_question_ids(pool: Sequence[int], k: int, rng: random.Random = _rng) -> List[int]:
    """Uniform random subset of `k` distinct ids, in random order."""
    return rng.sample(list(pool), k)


def _started_attempt(db: Session, user_id: int) -> Optional[Attempt]:
    return (
        db.query(Attempt)
        .filter(Attempt.user_id == int(user_id), Attempt.status == ATTEMPT_STARTED)
        .first()
    )


def _start_out(attempt: Attempt) -> StartQuizOut:
    return StartQuizOut(attempt_id=int(attempt.id), question_ids=[int(x) for x in attempt.shuffled_questions or []])


def start_quiz(db: Session, user_id: int) -> StartQuizOut:
    user = db.get(User, int(user_id))
    if user is None:
        raise not_found("User not found")
    if user.quiz_status in QUIZ_FINISHED_STATUSES:
        raise forbidden("Quiz already completed")

    # Resuming hands back the same attempt, so the persisted order stays authoritative
    existing = _started_attempt(db, user.id)
    if existing is not None:
        logger.info("User id=%s resumed attempt id=%s", user.id, existing.id)
        return _start_out(existing)

    quiz_length = int(settings.QUIZ_LENGTH)
    pool = [int(qid) for (qid,) in db.query(Question.id).all()]
    if len(pool) < quiz_length:
        raise bad_request("Not enough questions")

    ids = pick_question_ids(pool, quiz_length)

    user.quiz_status = QUIZ_STARTED
    attempt = Attempt(user_id=user.id, shuffled_questions=ids, status=ATTEMPT_STARTED)
    db.add(attempt)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent start for the same user won the unique (user, started) index
        db.rollback()
        existing = _started_attempt(db, user.id)
        if existing is None:
            raise
        logger.info("User id=%s start raced; returning attempt id=%s", user.id, existing.id)
        return _start_out(existing)
    db.refresh(attempt)

    logger.info("User id=%s started attempt id=%s with %s questions", user.id, attempt.id, len(ids))
    return _start_out(attempt)


def get_questions(db: Session, ids: Sequence[int]) -> List[QuizQuestionOut]:
    """Questions for `ids`, in exactly that order; unknown ids are left out.

    Clients render "question N of M" by indexing into the attempt's id list,
    so the output order must follow the input, not the database.
    """

    if not ids:
        return []
    rows = db.query(Question).filter(Question.id.in_(sorted(set(ids)))).all()
    by_id = {int(q.id): q for q in rows}
    return [QuizQuestionOut.model_validate(by_id[i]) for i in ids if i in by_id]


def score_answers(question_ids: Iterable[int], correct: Mapping[int, str], answers: Mapping[str, Any]) -> int:
    score = 0
    for qid in question_ids:
        chosen = answers.get(str(qid))
        expected = correct.get(int(qid))
        # Unanswered and deleted questions are simply wrong
        if chosen and expected is not None and chosen == expected:
            score += 1
    return score


def submit_answers(db: Session, user_id: int, payload: SubmitAnswersRequest) -> str:
    query = db.query(Attempt).filter(Attempt.id == int(payload.attempt_id), Attempt.user_id == int(user_id))
    if db.get_bind().dialect.name != "sqlite":
        query = query.with_for_update()
    attempt = query.first()

    if attempt is None:
        raise not_found("Attempt not found")
    if attempt.status != ATTEMPT_STARTED:
        # Already scored; the first submission stands
        db.rollback()
        return ALREADY_SUBMITTED

    ids = [int(x) for x in attempt.shuffled_questions or []]
    rows = db.query(Question.id, Question.correct_option).filter(Question.id.in_(ids)).all() if ids else []
    correct: Dict[int, str] = {int(qid): opt for qid, opt in rows}

    score = score_answers(ids, correct, payload.answers or {})

    attempt.score = score
    attempt.status = ATTEMPT_COMPLETED
    attempt.end_time = datetime.now(timezone.utc)
    user = db.get(User, int(user_id))
    # Never overwrite a disqualification that landed mid-submit
    if user is not None and user.quiz_status == QUIZ_STARTED:
        user.quiz_status = QUIZ_COMPLETED
    db.commit()

    logger.info("User id=%s completed attempt id=%s", user_id, attempt.id)
    return SUBMITTED
