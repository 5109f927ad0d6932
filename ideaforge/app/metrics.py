"""
Métriques Prometheus pour l'application.

Ce module définit les métriques Prometheus utilisées pour le monitoring du pipeline de
génération, des quotas, de la classification et des rôles.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Génération interactive
IDEA_GENERATIONS = Counter(
    "idea_generations_total",
    "Idea generation requests by outcome",
    ["outcome"],
)
IDEA_GENERATION_LATENCY = Histogram(
    "idea_generation_latency_seconds",
    "Latency of generation backend calls",
)

# Quotas
QUOTA_DECISIONS = Counter(
    "quota_decisions_total",
    "Quota ledger decisions",
    ["tier", "result"],
)
QUOTA_RESET_USERS = Counter(
    "quota_reset_users_total",
    "Users whose allowance was reset",
    ["tier"],
)

# Classification du flux
CLASSIFIER_POSTS = Counter(
    "classifier_posts_total",
    "Feed posts processed by the batch classifier",
    ["outcome"],
)

# Rôles
ROLE_GRANTS = Counter(
    "role_grants_total",
    "Creator role grant attempts",
    ["outcome"],
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        """Traite une requête HTTP et collecte les métriques."""
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = request.scope.get("path", "unknown")
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
