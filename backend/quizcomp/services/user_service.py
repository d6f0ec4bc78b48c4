from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizcomp.core.errors import bad_request, conflict, forbidden, not_found, unauthorized
from quizcomp.core.security import get_password_hash, verify_password
from quizcomp.models.attempt import ATTEMPT_COMPLETED, ATTEMPT_STARTED, Attempt
from quizcomp.models.user import (
    QUIZ_DISQUALIFIED,
    QUIZ_FINISHED_STATUSES,
    QUIZ_UNATTEMPTED,
    ROLE_ADMIN,
    ROLE_STUDENT,
    User,
)
from quizcomp.schemas.auth import LoginOut, LoginRequest, RegisterRequest
from quizcomp.services.session_registry import SessionRegistry, registry

logger = logging.getLogger(__name__)

INVALID_LOGIN = "Invalid login"


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _normalize_email(email: Optional[str]) -> str:
    return _clean(email).lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def register_user(db: Session, payload: RegisterRequest) -> User:
    full_name = _clean(payload.full_name)
    email = _normalize_email(payload.email)
    password = payload.password or ""
    if not full_name or not email or not password:
        raise bad_request("All fields required")

    if get_user_by_email(db, email) is not None:
        raise conflict("Email already exists")

    user = User(
        full_name=full_name,
        email=email,
        password_hash=get_password_hash(password),
        role=ROLE_STUDENT,
        quiz_status=QUIZ_UNATTEMPTED,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise conflict("Email already exists")
    db.refresh(user)

    logger.info("Registered user id=%s email=%s", user.id, user.email)
    return user


def login_user(db: Session, payload: LoginRequest, *, sessions: SessionRegistry = registry) -> LoginOut:
    user = get_user_by_email(db, payload.email or "")
    if user is None:
        logger.warning("Login refused: unknown email")
        raise unauthorized(INVALID_LOGIN)

    # The quiz is one-shot: finished students cannot come back, whatever the password
    if user.role == ROLE_STUDENT and user.quiz_status in QUIZ_FINISHED_STATUSES:
        logger.warning("Login refused: user id=%s quiz_status=%s", user.id, user.quiz_status)
        raise forbidden("Quiz already completed")

    if not verify_password(payload.password or "", user.password_hash):
        logger.warning("Login refused: bad credentials for user id=%s", user.id)
        raise unauthorized(INVALID_LOGIN)

    token = sessions.create(user.id, user.role)
    logger.info("User id=%s logged in as %s", user.id, user.role)
    return LoginOut(session_id=token, role=user.role)


def logout(token: Optional[str], *, sessions: SessionRegistry = registry) -> bool:
    return sessions.revoke(token)


def disqualify_user(db: Session, user_id: int, *, sessions: SessionRegistry = registry) -> User:
    user = db.get(User, int(user_id))
    if user is None:
        raise not_found("User not found")
    if user.role != ROLE_STUDENT:
        raise bad_request("Only students can be disqualified")

    user.quiz_status = QUIZ_DISQUALIFIED
    # An in-flight attempt is closed with no credit so it can never be submitted
    in_flight = (
        db.query(Attempt)
        .filter(Attempt.user_id == user.id, Attempt.status == ATTEMPT_STARTED)
        .all()
    )
    for attempt in in_flight:
        attempt.status = ATTEMPT_COMPLETED
        attempt.score = 0
        attempt.end_time = datetime.now(timezone.utc)
    db.commit()
    revoked = sessions.revoke_user(user.id)

    logger.info("Disqualified user id=%s (revoked %s sessions)", user.id, revoked)
    return user


def ensure_admin(db: Session, *, email: str, password: str, full_name: str = "Administrator") -> User:
    """Create the bootstrap admin when missing (safe to run repeatedly).

    An existing row with that email is promoted to admin; its password is
    left alone.
    """

    user = get_user_by_email(db, email)
    if user is not None:
        if user.role != ROLE_ADMIN:
            user.role = ROLE_ADMIN
            db.commit()
            logger.info("Promoted user id=%s to admin", user.id)
        return user

    user = User(
        full_name=full_name,
        email=_normalize_email(email),
        password_hash=get_password_hash(password),
        role=ROLE_ADMIN,
        quiz_status=QUIZ_UNATTEMPTED,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created admin user id=%s", user.id)
    return user
