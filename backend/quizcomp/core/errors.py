from __future__ import annotations

from typing import Dict, Optional

from fastapi import HTTPException


def api_error(status_code: int, code: str, message: str, headers: Optional[Dict[str, str]] = None) -> HTTPException:
    """HTTPException whose detail is rendered as the envelope `error` object."""
    return HTTPException(status_code=status_code, detail={"code": code, "message": message}, headers=headers)


def bad_request(message: str) -> HTTPException:
    return api_error(400, "BAD_REQUEST", message)


def unauthorized(message: str = "Unauthorized") -> HTTPException:
    return api_error(401, "UNAUTHORIZED", message)


def forbidden(message: str) -> HTTPException:
    return api_error(403, "FORBIDDEN", message)


def not_found(message: str) -> HTTPException:
    return api_error(404, "NOT_FOUND", message)


def conflict(message: str) -> HTTPException:
    return api_error(409, "CONFLICT", message)
