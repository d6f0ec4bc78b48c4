from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from quizcomp.api.deps import get_db, require_admin
from quizcomp.schemas.admin import QuestionCreateRequest, QuestionOut
from quizcomp.services import report_service
from quizcomp.services.question_service import create_question, delete_question, list_questions
from quizcomp.services.session_registry import SessionInfo
from quizcomp.services.user_service import disqualify_user

router = APIRouter(tags=["admin"])


@router.get("/admin/metrics")
def admin_metrics(
    request: Request,
    db: Session = Depends(get_db),
    _admin: SessionInfo = Depends(require_admin),
):
    data = report_service.metrics(db).model_dump(by_alias=True)
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.get("/admin/questions")
def admin_list_questions(
    request: Request,
    db: Session = Depends(get_db),
    _admin: SessionInfo = Depends(require_admin),
):
    data = [QuestionOut.model_validate(q).model_dump() for q in list_questions(db)]
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.post("/admin/questions")
def admin_create_question(
    request: Request,
    payload: QuestionCreateRequest,
    db: Session = Depends(get_db),
    _admin: SessionInfo = Depends(require_admin),
):
    q = create_question(db, payload)
    data = {"message": "Question added", "id": int(q.id)}
    return {"request_id": request.state.request_id, "data": data, "error": None}


@router.delete("/admin/questions/{question_id}")
def admin_delete_question(
    request: Request,
    question_id: int,
    db: Session = Depends(get_db),
    _admin: SessionInfo = Depends(require_admin),
):
    delete_question(db, question_id)
    return {"request_id": request.state.request_id, "data": {"message": "Question deleted"}, "error": None}


@router.post("/admin/users/{user_id}/disqualify")
def admin_disqualify_user(
    request: Request,
    user_id: int,
    db: Session = Depends(get_db),
    _admin: SessionInfo = Depends(require_admin),
):
    disqualify_user(db, user_id)
    return {"request_id": request.state.request_id, "data": {"message": "User disqualified"}, "error": None}


@router.get("/leaderboard-data")
def leaderboard_data(
    request: Request,
    db: Session = Depends(get_db),
    _admin: SessionInfo = Depends(require_admin),
):
    data = [row.model_dump() for row in report_service.leaderboard(db)]
    return {"request_id": request.state.request_id, "data": data, "error": None}
