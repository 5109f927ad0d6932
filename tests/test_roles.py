"""Tests pour l'attribution du rôle creator et la politique d'administration."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from ideaforge.domain.errors import Internal, InvalidArgument, PermissionDenied, Unauthenticated
from ideaforge.domain.roles import RoleAuthority, is_admin, require_admin
from ideaforge.infra.identity import RepoIdentityProvider
from ideaforge.infra.repositories import InMemoryUserRepo

ADMIN = {"id": "a1", "email": "boss@test.io", "claims": {}}
CLAIM_ADMIN = {"id": "a2", "email": "ops@test.io", "claims": {"admin": True}}
REGULAR = {"id": "u1", "email": "jane@test.io", "claims": {}}


def _authority() -> tuple[RoleAuthority, InMemoryUserRepo]:
    repo = InMemoryUserRepo()
    for user in (ADMIN, CLAIM_ADMIN, REGULAR):
        repo.save(dict(user))
    return RoleAuthority(RepoIdentityProvider(repo), admin_emails=["Boss@Test.io"]), repo


def test_is_admin_by_email_or_claim() -> None:
    """Administrateur par liste d'emails (insensible à la casse) ou par claim."""
    assert is_admin(ADMIN, ["boss@test.io"])
    assert is_admin(ADMIN, "other@test.io, BOSS@test.io")
    assert is_admin(CLAIM_ADMIN, [])
    assert not is_admin(REGULAR, ["boss@test.io"])


def test_require_admin_without_caller() -> None:
    """Aucun appelant -> unauthenticated."""
    with pytest.raises(Unauthenticated):
        require_admin(None, ["boss@test.io"])


def test_grant_creator_role_sets_claim() -> None:
    """Un administrateur promeut un utilisateur existant."""
    authority, repo = _authority()
    message = authority.grant_creator_role(ADMIN, "jane@test.io")
    assert message == "Success! jane@test.io has been made a creator."
    assert repo.get("u1")["claims"] == {"creator": True}


def test_grant_is_idempotent() -> None:
    """Accorder deux fois ne change rien de plus."""
    authority, repo = _authority()
    authority.grant_creator_role(CLAIM_ADMIN, "jane@test.io")
    authority.grant_creator_role(CLAIM_ADMIN, "jane@test.io")
    assert repo.get("u1")["claims"] == {"creator": True}


def test_grant_merges_existing_claims() -> None:
    """Les claims existants sont conservés."""
    authority, repo = _authority()
    authority.grant_creator_role(ADMIN, "ops@test.io")
    assert repo.get("a2")["claims"] == {"admin": True, "creator": True}


def test_non_admin_is_permission_denied() -> None:
    """Un appelant non administrateur ne peut rien accorder."""
    authority, repo = _authority()
    with pytest.raises(PermissionDenied):
        authority.grant_creator_role(REGULAR, "jane@test.io")
    assert repo.get("u1")["claims"] == {}


def test_unauthenticated_caller() -> None:
    """Sans appelant, l'opération est refusée avant toute résolution."""
    authority, _ = _authority()
    with pytest.raises(Unauthenticated):
        authority.grant_creator_role(None, "jane@test.io")


@pytest.mark.parametrize("email", [None, "", "   ", 12])
def test_missing_email_is_invalid_argument(email) -> None:
    """Email absent ou non textuel -> invalid-argument."""
    authority, _ = _authority()
    with pytest.raises(InvalidArgument):
        authority.grant_creator_role(ADMIN, email)


def test_unknown_email_is_internal_and_sets_nothing() -> None:
    """Email non résolu -> internal, aucun claim écrit."""
    identity = Mock()
    identity.get_user_by_email.return_value = None
    with pytest.raises(Internal):
        RoleAuthority(identity, ["boss@test.io"]).grant_creator_role(ADMIN, "nobody@test.io")
    identity.set_custom_claims.assert_not_called()


def test_identity_failure_is_internal() -> None:
    """Une panne du fournisseur d'identité est une erreur interne."""
    identity = Mock()
    identity.get_user_by_email.return_value = {"id": "u1"}
    identity.set_custom_claims.side_effect = ConnectionError("down")
    with pytest.raises(Internal):
        RoleAuthority(identity, ["boss@test.io"]).grant_creator_role(ADMIN, "jane@test.io")


def test_target_email_is_canonicalized() -> None:
    """L'email cible est comparé sous sa forme canonique (domaine en minuscules)."""
    repo = InMemoryUserRepo()
    repo.save({"id": "b1", "email": "Bob@example.com", "claims": {}})
    authority = RoleAuthority(RepoIdentityProvider(repo), admin_emails=["boss@test.io"])
    message = authority.grant_creator_role(ADMIN, "  Bob@Example.COM ")
    assert message == "Success! Bob@example.com has been made a creator."
    assert repo.get("b1")["claims"] == {"creator": True}


def test_malformed_email_is_invalid_argument() -> None:
    """Une valeur qui n'est pas une adresse email -> invalid-argument."""
    authority, _ = _authority()
    with pytest.raises(InvalidArgument):
        authority.grant_creator_role(ADMIN, "not-an-email")
