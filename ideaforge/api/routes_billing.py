"""Route de création de session de paiement (`createCheckoutSession`)."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ideaforge.api.routes_auth import get_current_user
from ideaforge.core.container import container
from ideaforge.domain.errors import Internal, InvalidArgument
from ideaforge.infra.payments import PaymentUnavailable

router = APIRouter(prefix="/billing", tags=["billing"])
_current_user_dep = Depends(get_current_user)
log = structlog.get_logger(__name__)


class CheckoutPayload(BaseModel):
    """Payload: identifiant de prix du fournisseur de paiement."""

    price_id: Any = Field(default=None, alias="priceId")


@router.post("/checkout-session")
def create_checkout_session(payload: CheckoutPayload, user=_current_user_dep):
    """Crée une session de checkout pour l'utilisateur courant."""
    price_id = payload.price_id
    if not isinstance(price_id, str) or not price_id.strip():
        raise InvalidArgument("missing_price_id")
    try:
        session_id = container.payments.create_checkout_session(price_id.strip(), user["id"])
    except PaymentUnavailable as exc:
        log.error("checkout_session_failed", user_id=user["id"], error=str(exc))
        raise Internal("checkout_session_failed") from exc
    return {"sessionId": session_id}
