"""Translate domain failures into HTTP errors."""

from __future__ import annotations

from fastapi import HTTPException

from ..errors import LeadflowError


def to_http_exception(exc: LeadflowError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))
