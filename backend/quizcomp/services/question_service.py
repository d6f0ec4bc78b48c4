from __future__ import annotations

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from quizcomp.core.errors import bad_request, not_found
from quizcomp.models.question import Question
from quizcomp.schemas.admin import QuestionCreateRequest

logger = logging.getLogger(__name__)


def list_questions(db: Session) -> List[Question]:
    return db.query(Question).order_by(Question.id.desc()).all()


def count_questions(db: Session) -> int:
    return int(db.query(func.count(Question.id)).scalar() or 0)


def create_question(db: Session, payload: QuestionCreateRequest) -> Question:
    fields = {
        "question_text": (payload.question_text or "").strip(),
        "option_a": (payload.option_a or "").strip(),
        "option_b": (payload.option_b or "").strip(),
        "option_c": (payload.option_c or "").strip(),
        "option_d": (payload.option_d or "").strip(),
        "correct_option": (payload.correct_option or "").strip(),
    }
    if not all(fields.values()):
        raise bad_request("All fields required")

    options = [fields["option_a"], fields["option_b"], fields["option_c"], fields["option_d"]]
    if fields["correct_option"] not in options:
        raise bad_request("Correct option must match one of the four options")

    q = Question(**fields)
    db.add(q)
    db.commit()
    db.refresh(q)

    logger.info("Question id=%s added", q.id)
    return q


def delete_question(db: Session, question_id: int) -> None:
    q = db.get(Question, int(question_id))
    if q is None:
        raise not_found("Question not found")
    db.delete(q)
    db.commit()
    logger.info("Question id=%s deleted", question_id)
