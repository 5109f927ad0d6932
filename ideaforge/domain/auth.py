"""
Authentification: mots de passe, tokens bearer et forme canonique des emails.

Le token ne transporte que l'identité (`sub`, `email`). Les claims personnalisés (`creator`,
`admin`) et le tier d'abonnement ne sont jamais lus depuis le token: ils sont rechargés depuis
les dépôts à chaque requête, une attribution de rôle s'applique donc dès la requête suivante.

Les emails sont comparés sous leur forme canonique (celle produite par `EmailStr` à
l'inscription: domaine en minuscules, partie locale conservée).
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from passlib.context import CryptContext
from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_email_adapter = TypeAdapter(EmailStr)


class TokenData(BaseModel):
    """Identité portée par un token bearer."""

    sub: str
    email: EmailStr


def normalize_email(value: object) -> str:
    """
    Retourne la forme canonique d'un email.

    Raises:
        ValueError: si `value` n'est pas une adresse email valide.
    """
    if not isinstance(value, str):
        raise ValueError("email_not_a_string")
    try:
        return str(_email_adapter.validate_python(value.strip()))
    except ValidationError as exc:
        raise ValueError("invalid_email") from exc


def hash_password(p: str) -> str:
    """Hache un mot de passe (PBKDF2)."""
    return pwd_context.hash(p)


def verify_password(p: str, h: str) -> bool:
    return pwd_context.verify(p, h)


def issue_token(user: dict[str, Any], secret: str, alg: str, expires_min: int) -> str:
    """Émet un token bearer pour un utilisateur du dépôt (`id`, `email`)."""
    payload = {
        "sub": user["id"],
        "email": user["email"],
        "exp": datetime.now(UTC) + timedelta(minutes=expires_min),
    }
    return jwt.encode(payload, secret, algorithm=alg)


def decode_token(token: str, secret: str, alg: str) -> TokenData | None:
    """Décode un token; None s'il est invalide, expiré ou incomplet."""
    try:
        return TokenData(**jwt.decode(token, secret, algorithms=[alg]))
    except (InvalidTokenError, ValidationError):
        return None
