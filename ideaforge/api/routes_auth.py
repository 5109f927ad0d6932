"""
Routes d'authentification pour l'API.

Ce module fournit les endpoints d'inscription et de connexion, ainsi que la dépendance qui
résout l'utilisateur courant à partir du token bearer. L'inscription ouvre l'état de quota
(tier gratuit) de l'utilisateur.
"""

import uuid

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, EmailStr

from ideaforge.core.container import container
from ideaforge.core.http_constants import HTTP_CONFLICT, HTTP_UNAUTHORIZED
from ideaforge.domain.auth import (
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)
from ideaforge.domain.entities import SubscriptionTier
from ideaforge.domain.errors import Unauthenticated

router = APIRouter(prefix="/auth", tags=["auth"])


class SignupPayload(BaseModel):
    """Payload pour l'inscription d'un nouvel utilisateur."""

    email: EmailStr
    password: str


class LoginPayload(BaseModel):
    """Payload pour la connexion d'un utilisateur."""

    email: EmailStr
    password: str


@router.post("/signup")
def signup(p: SignupPayload):
    """Inscrit un nouvel utilisateur et lui ouvre un quota gratuit."""
    existing = container.user_repo.get_by_email(str(p.email))
    if existing:
        raise HTTPException(status_code=HTTP_CONFLICT, detail="email_exists")
    user = {
        "id": uuid.uuid4().hex,
        "email": str(p.email),
        "password_hash": hash_password(p.password),
        "claims": {},
    }
    container.user_repo.save(user)
    quota = container.ledger.open_account(
        user["id"],
        SubscriptionTier.FREE,
        container.settings.FREE_TIER_INITIAL_GENERATIONS,
    )
    return {
        "id": user["id"],
        "email": user["email"],
        "subscriptionTier": quota.tier.value,
        "generationsRemaining": quota.generations_remaining,
    }


@router.post("/login")
def login(p: LoginPayload):
    """Authentifie un utilisateur et retourne un token d'accès."""
    user = container.user_repo.get_by_email(str(p.email))
    if not user or not verify_password(p.password, user.get("password_hash", "")):
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="invalid_credentials")
    s = container.settings
    token = issue_token(user, s.JWT_SECRET, s.JWT_ALG, s.JWT_EXPIRES_MIN)
    return {"access_token": token, "token_type": "bearer"}


def get_current_user(authorization: str = Header(None)):
    """Extrait et valide l'utilisateur courant à partir du token d'autorisation."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise Unauthenticated("missing_token")
    token = authorization.split(" ", 1)[1]
    data = decode_token(token, container.settings.JWT_SECRET, container.settings.JWT_ALG)
    if not data:
        raise Unauthenticated("invalid_token")
    user = container.user_repo.get(data.sub)
    if not user:
        raise Unauthenticated("user_not_found")
    return user
