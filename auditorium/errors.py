"""Error taxonomy for bookings and posts."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AuditoriumError(Exception):
    """Base class for errors surfaced to the HTTP layer."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuditoriumError):
    """Form data is malformed or missing required fields."""

    status_code = 422

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ConflictDetected(AuditoriumError):
    """The requested slot overlaps an existing booking on the same date."""

    status_code = 409


class RepositoryError(AuditoriumError):
    """The backing store was unreachable or rejected the query."""

    status_code = 503


class NotFoundOrForbidden(AuditoriumError):
    """No row with that id is visible to, or owned by, the acting principal."""

    status_code = 404


def _error_response(_: Request, exc: AuditoriumError) -> JSONResponse:
    content: Dict[str, Any] = {"detail": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


def add_error_handlers(app: FastAPI) -> None:
    """Translate the error taxonomy into HTTP responses."""

    app.add_exception_handler(AuditoriumError, _error_response)  # type: ignore[arg-type]
