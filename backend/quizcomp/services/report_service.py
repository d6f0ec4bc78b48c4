"""Read-only admin reporting over completed attempts.

Disqualified students are left out of the completed counts and every
ranking; they still count as participants.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from quizcomp.core.config import settings
from quizcomp.models.attempt import ATTEMPT_COMPLETED, Attempt
from quizcomp.models.user import QUIZ_DISQUALIFIED, ROLE_STUDENT, User
from quizcomp.schemas.admin import LeaderboardRow, MetricsOut, ResultRow
from quizcomp.services.question_service import count_questions


def _completed_rows(db: Session, limit: Optional[int] = None):
    q = (
        db.query(User.full_name, User.email, Attempt.score, Attempt.created_at, Attempt.end_time)
        .join(User, Attempt.user_id == User.id)
        .filter(Attempt.status == ATTEMPT_COMPLETED, User.quiz_status != QUIZ_DISQUALIFIED)
        # Equal scores: whoever finished first ranks higher
        .order_by(Attempt.score.desc(), Attempt.end_time.asc(), Attempt.id.asc())
    )
    if limit is not None:
        q = q.limit(int(limit))
    return q.all()


def completed_results(db: Session) -> List[ResultRow]:
    return [
        ResultRow(full_name=name, email=email, score=int(score or 0), created_at=created_at, end_time=end_time)
        for name, email, score, created_at, end_time in _completed_rows(db)
    ]


def metrics(db: Session) -> MetricsOut:
    total_participants = db.query(func.count(User.id)).filter(User.role == ROLE_STUDENT).scalar() or 0
    completed_quizzes = (
        db.query(func.count(Attempt.id))
        .select_from(Attempt)
        .join(User, Attempt.user_id == User.id)
        .filter(Attempt.status == ATTEMPT_COMPLETED, User.quiz_status != QUIZ_DISQUALIFIED)
        .scalar()
        or 0
    )

    return MetricsOut(
        total_participants=int(total_participants),
        total_questions=count_questions(db),
        completed_quizzes=int(completed_quizzes),
        results=completed_results(db),
    )


def leaderboard(db: Session, limit: Optional[int] = None) -> List[LeaderboardRow]:
    size = int(limit or settings.LEADERBOARD_SIZE)
    return [
        LeaderboardRow(full_name=name, score=int(score or 0), created_at=created_at, end_time=end_time)
        for name, _email, score, created_at, end_time in _completed_rows(db, limit=size)
    ]
