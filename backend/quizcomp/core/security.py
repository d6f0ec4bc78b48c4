from __future__ import annotations

import secrets

from passlib.context import CryptContext

from quizcomp.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Malformed or foreign hash in the users table
        return False


def new_session_token() -> str:
    return secrets.token_urlsafe(32)
