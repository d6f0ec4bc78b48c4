from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from quizcomp.db.base_class import Base


ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"

QUIZ_UNATTEMPTED = "unattempted"
QUIZ_STARTED = "started"
QUIZ_COMPLETED = "completed"
QUIZ_DISQUALIFIED = "disqualified"

# A student in one of these states has used up the one-shot quiz
QUIZ_FINISHED_STATUSES = frozenset({QUIZ_COMPLETED, QUIZ_DISQUALIFIED})


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=ROLE_STUDENT, server_default=ROLE_STUDENT)
    quiz_status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=QUIZ_UNATTEMPTED,
        server_default=QUIZ_UNATTEMPTED,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
