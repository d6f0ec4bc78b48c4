from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from quizcomp.core.config import settings
from quizcomp.api.routes.health import router as health_router
from quizcomp.api.routes.auth import router as auth_router
from quizcomp.api.routes.quiz import router as quiz_router
from quizcomp.api.routes.admin import router as admin_router
from quizcomp.db.base import Base
from quizcomp.db.session import SessionLocal, engine
from quizcomp.schemas.common import ErrorOut
from quizcomp.services.user_service import ensure_admin


logging.basicConfig(
    level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def envelope(request_id: str, data: Any = None, error: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"request_id": request_id, "data": data, "error": error}


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = req_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = req_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        error = ErrorOut(
            code=str(detail.get("code") or "HTTP_ERROR"),
            message=str(detail.get("message") or detail),
        )
    else:
        error = ErrorOut(code="HTTP_ERROR", message=str(detail))

    return JSONResponse(
        status_code=exc.status_code,
        content=envelope(request_id=_request_id(request), error=error.model_dump(exclude_none=True)),
        # Keeps Location on login redirects
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error = ErrorOut(code="VALIDATION_ERROR", message="Invalid request", details={"errors": jsonable_encoder(exc.errors())})
    return JSONResponse(
        status_code=422,
        content=envelope(request_id=_request_id(request), error=error.model_dump()),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    error = ErrorOut(code="INTERNAL_ERROR", message="Internal server error")
    return JSONResponse(
        status_code=500,
        content=envelope(request_id=_request_id(request), error=error.model_dump(exclude_none=True)),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = ErrorOut(code="INTERNAL_ERROR", message="Internal server error")
    return JSONResponse(
        status_code=500,
        content=envelope(request_id=_request_id(request), error=error.model_dump(exclude_none=True)),
    )


@app.on_event("startup")
def bootstrap():
    """Create tables (when enabled) and the bootstrap admin. Safe to run repeatedly."""
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)

    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return

    db = SessionLocal()
    try:
        ensure_admin(
            db,
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            full_name=settings.ADMIN_FULL_NAME,
        )
    finally:
        db.close()


app.include_router(health_router)
app.include_router(auth_router)
app.include_router(quiz_router)
app.include_router(admin_router)
