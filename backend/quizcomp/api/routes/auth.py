from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from quizcomp.api.deps import get_db, session_token
from quizcomp.schemas.auth import LoginRequest, MessageOut, RegisterRequest
from quizcomp.services.user_service import login_user, logout, register_user


router = APIRouter(tags=["auth"])


@router.post("/register")
def register(request: Request, payload: RegisterRequest, db: Session = Depends(get_db)):
    register_user(db, payload)
    out = MessageOut(message="Registered successfully").model_dump()
    return {"request_id": request.state.request_id, "data": out, "error": None}


@router.post("/login")
def login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    out = login_user(db, payload).model_dump(by_alias=True)
    return {"request_id": request.state.request_id, "data": out, "error": None}


@router.post("/logout")
def logout_route(request: Request, token: Optional[str] = Depends(session_token)):
    logout(token)
    out = MessageOut(message="Logged out").model_dump()
    return {"request_id": request.state.request_id, "data": out, "error": None}
