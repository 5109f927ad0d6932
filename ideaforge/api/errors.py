"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module convertit les erreurs métier (`IdeaError`) en réponses JSON `{code, message, trace_id}`.
`code` est le `kind` de l'erreur; `message` est un texte générique par kind. Les diagnostics
détaillés (texte brut du backend, champ fautif, exception d'origine) restent dans les logs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ideaforge.core.http_constants import (
    HTTP_BAD_GATEWAY,
    HTTP_BAD_REQUEST,
    HTTP_CONFLICT,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_SERVICE_UNAVAILABLE,
    HTTP_TOO_MANY_REQUESTS,
    HTTP_UNAUTHORIZED,
)
from ideaforge.domain.errors import IdeaError

log = structlog.get_logger(__name__)


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None


# kind -> (statut HTTP, message générique)
ERROR_STATUS: dict[str, tuple[int, str]] = {
    "unauthenticated": (
        HTTP_UNAUTHORIZED,
        "The function must be called while authenticated.",
    ),
    "permission-denied": (HTTP_FORBIDDEN, "Administrator privileges are required."),
    "invalid-argument": (HTTP_BAD_REQUEST, "The request arguments are invalid."),
    "QuotaExhausted": (
        HTTP_TOO_MANY_REQUESTS,
        "No generations left on the free plan. Upgrade or wait for the monthly reset.",
    ),
    "MalformedResponse": (
        HTTP_BAD_GATEWAY,
        "The idea generator returned an unreadable answer. Please try again.",
    ),
    "InvalidRecord": (
        HTTP_BAD_GATEWAY,
        "The idea generator returned an incomplete idea. Please try again.",
    ),
    "GenerationUnavailable": (
        HTTP_SERVICE_UNAVAILABLE,
        "The idea generator is unavailable. Please try again later.",
    ),
    "internal": (HTTP_INTERNAL_SERVER_ERROR, "An internal error occurred."),
}


def create_error_response(
    status_code: int, code: str, message: str, trace_id: str | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id)
    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
        },
    )


def extract_trace_id(request: Request) -> str | None:
    """Retourne l'identifiant de requête (en-tête ou état posé par le middleware)."""
    trace_id = request.headers.get("X-Request-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def error_response_for(kind: str, trace_id: str | None = None) -> JSONResponse:
    """Construit la réponse associée à un kind (inconnu -> internal)."""
    status, message = ERROR_STATUS.get(kind, ERROR_STATUS["internal"])
    code = kind if kind in ERROR_STATUS else "internal"
    return create_error_response(status, code, message, trace_id)


def handle_idea_error(request: Request, exc: IdeaError) -> JSONResponse:
    """Convertit une erreur métier en enveloppe standard."""
    trace_id = extract_trace_id(request)
    details: dict[str, Any] = {"kind": exc.kind, "detail": exc.message, "trace_id": trace_id}
    field = getattr(exc, "field", None)
    if field:
        details["field"] = field
    log.warning("request_failed", path=request.url.path, **details)
    return error_response_for(exc.kind, trace_id)


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTPException (auth routes, unknown paths) with the standard envelope.

    Codes propres à la couche HTTP: `already-exists` (409) et `not-found` (404).
    """
    trace_id = extract_trace_id(request)
    error_codes = {
        HTTP_BAD_REQUEST: "invalid-argument",
        HTTP_UNAUTHORIZED: "unauthenticated",
        HTTP_FORBIDDEN: "permission-denied",
        HTTP_CONFLICT: "already-exists",
        HTTP_NOT_FOUND: "not-found",
    }
    code = error_codes.get(exc.status_code, "internal")
    log.info("http_exception", path=request.url.path, status=exc.status_code, code=code)
    return create_error_response(exc.status_code, code, str(exc.detail), trace_id)


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Corps de requête illisible -> invalid-argument."""
    trace_id = extract_trace_id(request)
    log.warning("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return error_response_for("invalid-argument", trace_id)


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions as `internal` without leaking their text."""
    trace_id = extract_trace_id(request)
    log.error(
        "unexpected_error",
        path=request.url.path,
        trace_id=trace_id,
        exception_type=type(exc).__name__,
        exc_info=exc,
    )
    return error_response_for("internal", trace_id)


def install_error_handlers(app: FastAPI) -> None:
    """Enregistre les handlers d'erreurs sur l'application."""
    app.add_exception_handler(IdeaError, handle_idea_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_generic_exception)
