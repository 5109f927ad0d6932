"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares, gestion des erreurs,
routes et métriques.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter les middlewares (contexte de requête, métriques)
- Monter les routers (santé, auth, idées, rôles, paiement, catalogue, métriques)
"""

from __future__ import annotations

from fastapi import FastAPI

from ideaforge.api.errors import install_error_handlers
from ideaforge.api.routes_auth import router as auth_router
from ideaforge.api.routes_billing import router as billing_router
from ideaforge.api.routes_catalog import router as catalog_router
from ideaforge.api.routes_health import router as health_router
from ideaforge.api.routes_ideas import router as ideas_router
from ideaforge.api.routes_roles import router as roles_router
from ideaforge.app.metrics import PrometheusMiddleware, metrics_router
from ideaforge.core.container import container
from ideaforge.core.logging import setup_logging
from ideaforge.middlewares.request_context import RequestContextMiddleware


def create_app() -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Lit les paramètres d'exécution
    - Ajoute les middlewares et les handlers d'erreurs
    - Publie les routes
    """
    setup_logging()
    settings = container.settings
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(ideas_router)
    app.include_router(roles_router)
    app.include_router(billing_router)
    app.include_router(catalog_router)
    app.include_router(metrics_router)
    return app


app = create_app()
