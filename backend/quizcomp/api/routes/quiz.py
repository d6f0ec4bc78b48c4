from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from quizcomp.api.deps import get_db, require_session, require_student
from quizcomp.schemas.auth import MessageOut
from quizcomp.schemas.quiz import SubmitAnswersRequest
from quizcomp.services.quiz_service import get_questions, parse_id_list, start_quiz, submit_answers
from quizcomp.services.session_registry import SessionInfo

router = APIRouter(tags=["quiz"])


@router.post("/student/start-quiz")
def student_start_quiz(
    request: Request,
    db: Session = Depends(get_db),
    session: SessionInfo = Depends(require_student),
):
    data = start_quiz(db, session.user_id).model_dump(by_alias=True)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.get("/questions")
def questions_by_ids(
    request: Request,
    ids: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    _session: SessionInfo = Depends(require_session),
):
    data = [q.model_dump() for q in get_questions(db, parse_id_list(ids))]
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/student/submit-answers")
def student_submit_answers(
    request: Request,
    payload: SubmitAnswersRequest,
    db: Session = Depends(get_db),
    session: SessionInfo = Depends(require_session),
):
    # Only an acknowledgment goes back; scores are for admins
    message = submit_answers(db, session.user_id, payload)
    data = MessageOut(message=message).model_dump()
    return {"request_id": request.state.request_id, "data": data, "error": None}
