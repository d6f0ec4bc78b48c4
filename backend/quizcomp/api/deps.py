"""Common FastAPI dependencies.

Clients send the token returned by /login either as the `X-Session-Id`
header or as the `sessionId` query parameter. There is no cookie.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Query, Request

from quizcomp.core.errors import api_error, forbidden, unauthorized
from quizcomp.db.session import get_db
from quizcomp.models.user import ROLE_ADMIN, ROLE_STUDENT
from quizcomp.services.session_registry import SessionInfo, registry

__all__ = ["get_db", "session_token", "require_session", "require_admin", "require_student"]


def _wants_html(request: Request) -> bool:
    accept = (request.headers.get("accept") or "").lower()
    return "text/html" in accept


def session_token(
    x_session_id: Optional[str] = Header(default=None, alias="X-Session-Id"),
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
) -> Optional[str]:
    token = (x_session_id or session_id or "").strip()
    return token or None


def require_session(request: Request, token: Optional[str] = Depends(session_token)) -> SessionInfo:
    info = registry.get(token)
    if info is None:
        if _wants_html(request):
            # Browser navigation: send back to the login page
            raise api_error(303, "LOGIN_REQUIRED", "Login required", headers={"Location": "/"})
        raise unauthorized()
    return info


def require_admin(info: SessionInfo = Depends(require_session)) -> SessionInfo:
    if info.role != ROLE_ADMIN:
        raise forbidden("Admin access required")
    return info


def require_student(info: SessionInfo = Depends(require_session)) -> SessionInfo:
    if info.role != ROLE_STUDENT:
        raise forbidden("Student access required")
    return info
