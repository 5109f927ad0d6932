"""Routes de génération d'idées et de consultation du quota.

Ce module expose `generateIdea` (POST /ideas/generate) et l'état de quota de l'utilisateur courant.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ideaforge.api.routes_auth import get_current_user
from ideaforge.core.container import container

router = APIRouter(tags=["ideas"])
_current_user_dep = Depends(get_current_user)


class GeneratePayload(BaseModel):
    """Payload de génération; le type du prompt est validé par le générateur."""

    prompt: Any = None


@router.post("/ideas/generate")
def generate_idea(payload: GeneratePayload, user=_current_user_dep):
    """Génère une idée de jeu à partir du prompt de l'utilisateur."""
    record = container.generator.generate(user, payload.prompt)
    return record.to_public()


@router.get("/quota")
def my_quota(user=_current_user_dep):
    """Retourne le tier et le nombre de générations restantes."""
    state = container.ledger.get_state(user["id"])
    return {
        "userId": state.user_id,
        "subscriptionTier": state.tier.value,
        "generationsRemaining": state.generations_remaining,
    }
