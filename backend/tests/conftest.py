from __future__ import annotations

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("QUIZ_LENGTH", "5")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from quizcomp.core.security import get_password_hash
from quizcomp.db.base import Base
from quizcomp.db.session import get_db
from quizcomp.main import app
from quizcomp.models.question import Question
from quizcomp.models.user import QUIZ_UNATTEMPTED, ROLE_ADMIN, ROLE_STUDENT, User
from quizcomp.services.session_registry import registry


PASSWORD = "pa55word"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    registry.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    registry.clear()


@pytest.fixture
def make_user(db):
    def _make(email: str, *, role: str = ROLE_STUDENT, quiz_status: str = QUIZ_UNATTEMPTED, full_name: str | None = None):
        u = User(
            full_name=full_name or email.split("@")[0].title(),
            email=email,
            password_hash=get_password_hash(PASSWORD),
            role=role,
            quiz_status=quiz_status,
        )
        db.add(u)
        db.commit()
        db.refresh(u)
        return u

    return _make


@pytest.fixture
def seed_questions(db):
    def _seed(n: int) -> list[Question]:
        rows = []
        for i in range(1, n + 1):
            q = Question(
                question_text=f"Question {i}?",
                option_a=f"A{i}",
                option_b=f"B{i}",
                option_c=f"C{i}",
                option_d=f"D{i}",
                correct_option=f"A{i}",
            )
            db.add(q)
            rows.append(q)
        db.commit()
        return rows

    return _seed


@pytest.fixture
def login(client):
    def _login(email: str, password: str = PASSWORD) -> dict:
        resp = client.post("/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"X-Session-Id": resp.json()["data"]["sessionId"]}

    return _login


@pytest.fixture
def admin_headers(make_user, login):
    make_user("admin@quiz.test", role=ROLE_ADMIN)
    return login("admin@quiz.test")
