"""Route d'administration des rôles (`setCreatorRole`)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ideaforge.api.routes_auth import get_current_user
from ideaforge.core.container import container

router = APIRouter(prefix="/roles", tags=["roles"])
_current_user_dep = Depends(get_current_user)


class CreatorRolePayload(BaseModel):
    """Payload: email de l'utilisateur à promouvoir."""

    email: Any = None


@router.post("/creator")
def set_creator_role(payload: CreatorRolePayload, user=_current_user_dep):
    """Accorde le rôle creator (réservé aux administrateurs)."""
    message = container.roles.grant_creator_role(user, payload.email)
    return {"message": message}
