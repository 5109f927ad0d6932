"""
Endpoint de santé pour vérifier la disponibilité de l'API et du backend.

Expose `/health` pour signaler l'état général de l'application, du stockage et du backend de
génération.
"""

from fastapi import APIRouter

from ideaforge.core.container import container

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Vérifie la disponibilité de l'API et le backend de stockage."""
    return {
        "status": "ok",
        "storage": getattr(container, "storage_backend", "unknown"),
        "llm_configured": getattr(container.llm, "client", None) is not None,
    }
