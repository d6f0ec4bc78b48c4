from __future__ import annotations

import pytest
from fastapi import HTTPException

from quizcomp.core.config import settings
from quizcomp.models.attempt import ATTEMPT_COMPLETED, ATTEMPT_STARTED, Attempt
from quizcomp.models.question import Question
from quizcomp.models.user import QUIZ_COMPLETED, QUIZ_DISQUALIFIED, QUIZ_STARTED, User
from quizcomp.schemas.quiz import SubmitAnswersRequest
from quizcomp.services import quiz_service
from quizcomp.services.session_registry import SessionRegistry
from quizcomp.services.user_service import disqualify_user


@pytest.fixture
def quiz_length(monkeypatch):
    monkeypatch.setattr(settings, "QUIZ_LENGTH", 3)
    return 3


def test_start_quiz_needs_a_full_question_pool(client, make_user, login, seed_questions, quiz_length):
    make_user("eve@quiz.test")
    seed_questions(quiz_length - 1)
    headers = login("eve@quiz.test")

    resp = client.post("/student/start-quiz", headers=headers)

    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Not enough questions"


def test_start_quiz_persists_random_subset(client, db, make_user, login, seed_questions, quiz_length):
    user = make_user("eve@quiz.test")
    pool = {q.id for q in seed_questions(10)}
    headers = login("eve@quiz.test")

    resp = client.post("/student/start-quiz", headers=headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    ids = data["questionIds"]
    assert len(ids) == quiz_length
    assert len(set(ids)) == quiz_length
    assert set(ids) <= pool

    db.expire_all()
    attempt = db.get(Attempt, data["attemptId"])
    assert attempt.shuffled_questions == ids
    assert attempt.status == ATTEMPT_STARTED
    assert attempt.score is None
    assert db.get(User, user.id).quiz_status == QUIZ_STARTED


def test_start_quiz_twice_resumes_same_attempt(client, db, make_user, login, seed_questions, quiz_length):
    make_user("eve@quiz.test")
    seed_questions(10)
    headers = login("eve@quiz.test")

    first = client.post("/student/start-quiz", headers=headers).json()["data"]
    second = client.post("/student/start-quiz", headers=headers).json()["data"]

    assert first == second
    assert db.query(Attempt).count() == 1


def test_admins_cannot_start_a_quiz(client, admin_headers, seed_questions, quiz_length):
    seed_questions(quiz_length)

    resp = client.post("/student/start-quiz", headers=admin_headers)
    assert resp.status_code == 403


def test_finished_student_cannot_start_again(db, make_user, seed_questions, quiz_length):
    user = make_user("done@quiz.test", quiz_status=QUIZ_COMPLETED)
    seed_questions(quiz_length)

    with pytest.raises(HTTPException) as exc:
        quiz_service.start_quiz(db, user.id)
    assert exc.value.status_code == 403


def test_concurrent_start_falls_back_to_winning_attempt(db, make_user, seed_questions, quiz_length, monkeypatch):
    user = make_user("eve@quiz.test")
    seed_questions(5)
    winner = Attempt(user_id=user.id, shuffled_questions=[5, 4, 3], status=ATTEMPT_STARTED)
    db.add(winner)
    db.commit()

    real_lookup = quiz_service._started_attempt
    calls = {"n": 0}

    def _lookup(session, user_id):
        # First lookup happens before the other request committed
        calls["n"] += 1
        return None if calls["n"] == 1 else real_lookup(session, user_id)

    monkeypatch.setattr(quiz_service, "_started_attempt", _lookup)

    out = quiz_service.start_quiz(db, user.id)

    assert out.attempt_id == winner.id
    assert out.question_ids == [5, 4, 3]
    assert db.query(Attempt).count() == 1


def test_get_questions_follows_requested_order(client, make_user, login, seed_questions):
    make_user("eve@quiz.test")
    seed_questions(3)
    headers = login("eve@quiz.test")

    resp = client.get("/questions?ids=3,1,2", headers=headers)

    assert resp.status_code == 200
    rows = resp.json()["data"]
    assert [r["id"] for r in rows] == [3, 1, 2]
    assert all("correct_option" not in r for r in rows)
    assert rows[0]["question_text"] == "Question 3?"


def test_get_questions_omits_missing_and_junk_ids(client, make_user, login, seed_questions):
    make_user("eve@quiz.test")
    seed_questions(3)
    headers = login("eve@quiz.test")

    resp = client.get("/questions?ids=2,99,abc,,0,1", headers=headers)

    assert [r["id"] for r in resp.json()["data"]] == [2, 1]


def _attempt_for(db, user, ids):
    attempt = Attempt(user_id=user.id, shuffled_questions=ids, status=ATTEMPT_STARTED)
    user.quiz_status = QUIZ_STARTED
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    return attempt


def test_submit_scores_against_persisted_order_without_revealing_score(client, db, make_user, login):
    user = make_user("eve@quiz.test")
    q1 = Question(question_text="1?", option_a="A", option_b="B", option_c="C", option_d="X", correct_option="A")
    q2 = Question(question_text="2?", option_a="A", option_b="B", option_c="C", option_d="X", correct_option="B")
    q3 = Question(question_text="3?", option_a="A", option_b="B", option_c="C", option_d="X", correct_option="C")
    db.add_all([q1, q2, q3])
    db.commit()
    attempt = _attempt_for(db, user, [q1.id, q2.id, q3.id])
    headers = login("eve@quiz.test")

    resp = client.post(
        "/student/submit-answers",
        headers=headers,
        json={"attemptId": attempt.id, "answers": {str(q1.id): "A", str(q2.id): "X", str(q3.id): "C"}},
    )

    assert resp.status_code == 200
    assert resp.json()["data"] == {"message": "Quiz submitted successfully!"}
    assert "score" not in resp.text

    db.expire_all()
    stored = db.get(Attempt, attempt.id)
    assert stored.score == 2
    assert stored.status == ATTEMPT_COMPLETED
    assert stored.end_time is not None
    assert db.get(User, user.id).quiz_status == QUIZ_COMPLETED


def test_second_submission_is_acknowledged_without_rescoring(client, db, make_user, login, seed_questions):
    user = make_user("eve@quiz.test")
    questions = seed_questions(3)
    attempt = _attempt_for(db, user, [q.id for q in questions])
    headers = login("eve@quiz.test")

    all_right = {str(q.id): q.correct_option for q in questions}
    first = client.post("/student/submit-answers", headers=headers, json={"attemptId": attempt.id, "answers": all_right})
    second = client.post("/student/submit-answers", headers=headers, json={"attemptId": attempt.id, "answers": {}})

    assert first.status_code == second.status_code == 200
    assert second.json()["data"] == {"message": "Quiz already submitted."}

    db.expire_all()
    stored = db.get(Attempt, attempt.id)
    assert stored.score == 3
    assert stored.status == ATTEMPT_COMPLETED


def test_submit_for_unknown_or_foreign_attempt_is_not_found(client, db, make_user, login, seed_questions):
    owner = make_user("owner@quiz.test")
    make_user("other@quiz.test")
    questions = seed_questions(3)
    attempt = _attempt_for(db, owner, [q.id for q in questions])
    headers = login("other@quiz.test")

    foreign = client.post("/student/submit-answers", headers=headers, json={"attemptId": attempt.id, "answers": {}})
    unknown = client.post("/student/submit-answers", headers=headers, json={"attemptId": 4242, "answers": {}})

    assert foreign.status_code == unknown.status_code == 404
    db.expire_all()
    assert db.get(Attempt, attempt.id).status == ATTEMPT_STARTED


def test_deleted_question_counts_as_wrong(db, make_user, seed_questions):
    user = make_user("eve@quiz.test")
    questions = seed_questions(3)
    attempt = _attempt_for(db, user, [q.id for q in questions])
    answers = {str(q.id): q.correct_option for q in questions}
    db.delete(questions[0])
    db.commit()

    msg = quiz_service.submit_answers(db, user.id, SubmitAnswersRequest(attemptId=attempt.id, answers=answers))

    assert msg == quiz_service.SUBMITTED
    assert db.get(Attempt, attempt.id).score == 2


def test_submit_keeps_a_disqualification_that_landed_mid_quiz(db, make_user, seed_questions):
    user = make_user("eve@quiz.test")
    questions = seed_questions(3)
    attempt = _attempt_for(db, user, [q.id for q in questions])
    # Status flipped underneath a still-open attempt
    user.quiz_status = QUIZ_DISQUALIFIED
    db.commit()

    answers = {str(q.id): q.correct_option for q in questions}
    quiz_service.submit_answers(db, user.id, SubmitAnswersRequest(attemptId=attempt.id, answers=answers))

    db.expire_all()
    assert db.get(User, user.id).quiz_status == QUIZ_DISQUALIFIED


def test_submit_after_disqualification_is_not_rescored(db, make_user, seed_questions):
    user = make_user("eve@quiz.test")
    questions = seed_questions(3)
    attempt = _attempt_for(db, user, [q.id for q in questions])
    disqualify_user(db, user.id, sessions=SessionRegistry(ttl_seconds=60))

    answers = {str(q.id): q.correct_option for q in questions}
    msg = quiz_service.submit_answers(db, user.id, SubmitAnswersRequest(attemptId=attempt.id, answers=answers))

    assert msg == quiz_service.ALREADY_SUBMITTED
    db.expire_all()
    assert db.get(Attempt, attempt.id).score == 0
    assert db.get(User, user.id).quiz_status == QUIZ_DISQUALIFIED


def test_score_answers_counts_exact_matches_only():
    correct = {1: "A", 2: "B", 3: "C"}

    assert quiz_service.score_answers([1, 2, 3], correct, {"1": "A", "2": "X", "3": "C"}) == 2
    assert quiz_service.score_answers([1, 2, 3], correct, {"1": "a", "3": ""}) == 0
    assert quiz_service.score_answers([1, 2, 3], correct, {}) == 0


def test_parse_id_list_keeps_order():
    assert quiz_service.parse_id_list("3, 1,2") == [3, 1, 2]
    assert quiz_service.parse_id_list("x,-4,0,7") == [7]
    assert quiz_service.parse_id_list(None) == []


def test_pick_question_ids_is_distinct_subset():
    pool = list(range(1, 101))
    picked = quiz_service.pick_question_ids(pool, 50)

    assert len(picked) == 50
    assert len(set(picked)) == 50
    assert set(picked) <= set(pool)

