"""Middleware Starlette pour l'identifiant de requête et la mesure de durée.

Ce module ajoute l'en-tête X-Request-ID (propagé ou généré) et X-Process-Time-ms sur chaque
réponse, et lie `request_id` au contexte structlog pour que tous les logs de la requête le
portent.
"""

import time
from collections.abc import Callable
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware pour propager un identifiant de requête et mesurer le traitement."""

    def __init__(
        self,
        app: ASGIApp,
        header_name: str = "X-Request-ID",
        timing_header: str = "X-Process-Time-ms",
    ) -> None:
        """Initialise le middleware avec les noms d'en-têtes spécifiés.

        Args:
            app: Application ASGI à wrapper.
            header_name: Nom de l'en-tête HTTP pour l'ID de requête.
            timing_header: Nom de l'en-tête HTTP pour le temps de traitement.
        """
        super().__init__(app)
        self.header_name = header_name
        self.timing_header = timing_header

    async def dispatch(self, request, call_next: Callable):
        """Traite une requête en liant son identifiant au contexte de log."""
        request_id = request.headers.get(self.header_name) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        duration_ms = int((time.perf_counter() - start) * 1000)
        response.headers[self.header_name] = request_id
        response.headers[self.timing_header] = str(duration_ms)
        return response
