"""Fournisseur d'identité adossé au dépôt utilisateurs.

Résolution email -> identité et écriture de claims personnalisés (fusionnés avec les claims
existants). Les claims sont relus depuis le dépôt à chaque requête authentifiée.
"""

from __future__ import annotations

from typing import Any


class RepoIdentityProvider:
    """Adaptateur identité sur `InMemoryUserRepo` / `RedisUserRepo`."""

    def __init__(self, user_repo):
        """Initialise avec le dépôt utilisateurs."""
        self.users = user_repo

    def get_user_by_email(self, email: str) -> dict[str, Any] | None:
        """Retourne l'utilisateur, ou None s'il est inconnu."""
        return self.users.get_by_email(email)

    def set_custom_claims(self, user_id: str, claims: dict[str, bool]) -> dict[str, Any]:
        """Fusionne `claims` dans les claims de l'utilisateur et sauvegarde."""
        user = self.users.get(user_id)
        if not user:
            raise KeyError(f"user_not_found:{user_id}")
        merged = {**(user.get("claims") or {}), **claims}
        return self.users.save({**user, "claims": merged})
