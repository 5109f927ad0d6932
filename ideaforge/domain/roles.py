"""
Gestion des rôles et de l'autorisation.

Ce module fournit la politique d'administration (qui peut accorder des rôles) et l'opération
privilégiée qui attribue le claim `creator` à une identité résolue par email.
"""

from __future__ import annotations

from typing import Any

import structlog

from ideaforge.app.metrics import ROLE_GRANTS
from ideaforge.domain.auth import normalize_email
from ideaforge.domain.errors import (
    IdeaError,
    Internal,
    InvalidArgument,
    PermissionDenied,
    Unauthenticated,
)

log = structlog.get_logger(__name__)

CREATOR_CLAIM = "creator"
ADMIN_CLAIM = "admin"


def _normalize_emails(emails: list[str] | str | None) -> set[str]:
    """Normalise une liste d'emails (liste ou CSV) en minuscules."""
    if not emails:
        return set()
    if isinstance(emails, str):
        emails = emails.split(",")
    out: set[str] = set()
    for item in emails:
        out.update(e.strip().lower() for e in str(item).split(",") if e.strip())
    return out


def is_admin(user: dict[str, Any], admin_emails: list[str] | str | None = None) -> bool:
    """Vrai si l'utilisateur porte le claim `admin` ou figure dans `admin_emails`."""
    claims = user.get("claims") or {}
    if claims.get(ADMIN_CLAIM) is True:
        return True
    email = str(user.get("email") or "").lower()
    return bool(email) and email in _normalize_emails(admin_emails)


def require_admin(user: dict[str, Any] | None, admin_emails: list[str] | str | None = None):
    """
    Vérifie qu'un appelant est authentifié et administrateur.

    Raises:
        Unauthenticated: Si aucun appelant n'est fourni.
        PermissionDenied: Si l'appelant n'est pas administrateur.
    """
    if not user or not user.get("id"):
        raise Unauthenticated("missing_caller_identity")
    if not is_admin(user, admin_emails):
        raise PermissionDenied(f"not_admin:{user.get('id')}")


class RoleAuthority:
    """Attribue le rôle `creator` via le fournisseur d'identité."""

    def __init__(self, identity, admin_emails: list[str] | str | None = None):
        """Initialise avec le fournisseur d'identité et la liste d'emails administrateurs."""
        self.identity = identity
        self.admin_emails = admin_emails

    def grant_creator_role(self, caller: dict[str, Any] | None, target_email: object) -> str:
        """
        Accorde le claim `creator` à l'utilisateur identifié par `target_email`.

        Idempotent: accorder deux fois n'a pas d'effet supplémentaire.

        Returns:
            str: Message de confirmation lisible.

        Raises:
            Unauthenticated, PermissionDenied, InvalidArgument, Internal.
        """
        try:
            message = self._grant(caller, target_email)
        except IdeaError as err:
            ROLE_GRANTS.labels(outcome=err.kind).inc()
            raise
        ROLE_GRANTS.labels(outcome="ok").inc()
        return message

    def _grant(self, caller: dict[str, Any] | None, target_email: object) -> str:
        require_admin(caller, self.admin_emails)
        if not isinstance(target_email, str) or not target_email.strip():
            raise InvalidArgument("missing_email")
        try:
            email = normalize_email(target_email)
        except ValueError as exc:
            raise InvalidArgument(str(exc)) from exc

        try:
            target = self.identity.get_user_by_email(email)
        except Exception as exc:
            log.error("role_grant_lookup_failed", error=type(exc).__name__, detail=str(exc))
            raise Internal("identity_lookup_failed") from exc
        if not target:
            log.error("role_grant_user_not_found", caller=caller.get("id"))
            raise Internal("identity_not_found")

        try:
            self.identity.set_custom_claims(target["id"], {CREATOR_CLAIM: True})
        except Exception as exc:
            log.error("role_grant_write_failed", error=type(exc).__name__, detail=str(exc))
            raise Internal("claim_write_failed") from exc

        log.info("creator_role_granted", caller=caller.get("id"), target=target["id"])
        return f"Success! {email} has been made a creator."
