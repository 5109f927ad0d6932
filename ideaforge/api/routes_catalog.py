"""Consultation publique du catalogue d'idées classées (sans authentification)."""

from fastapi import APIRouter

from ideaforge.core.container import container
from ideaforge.domain.errors import Internal

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("")
def list_catalog():
    """Liste les entrées du catalogue public, triées par nom."""
    try:
        entries = container.catalog_repo.list_entries()
    except Exception as exc:
        raise Internal(f"catalog_read_failed: {type(exc).__name__}") from exc
    return {"items": entries, "count": len(entries)}
