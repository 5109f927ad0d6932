"""Tests pour le registre de quotas (vérification, consommation, remise à zéro mensuelle)."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from ideaforge.domain.entities import SubscriptionTier
from ideaforge.domain.errors import Internal, QuotaExhausted
from ideaforge.domain.quota import QuotaLedger
from ideaforge.infra.repositories import InMemoryQuotaRepo

PAID_REMAINING = 7


def _ledger(**kwargs) -> QuotaLedger:
    return QuotaLedger(InMemoryQuotaRepo(), **kwargs)


def test_free_user_with_credit_is_allowed() -> None:
    """Un utilisateur gratuit avec un crédit est autorisé, sans écriture."""
    ledger = _ledger()
    ledger.open_account("u1", SubscriptionTier.FREE, 1)
    decision = ledger.check_and_reserve("u1")
    assert decision.allowed
    assert decision.remaining == 1
    assert ledger.get_state("u1").generations_remaining == 1


def test_free_user_without_credit_is_denied() -> None:
    """Solde nul -> refus avec la raison QuotaExhausted."""
    ledger = _ledger()
    ledger.open_account("u1", SubscriptionTier.FREE, 0)
    decision = ledger.check_and_reserve("u1")
    assert not decision.allowed
    assert decision.reason == "QuotaExhausted"


def test_commit_decrements_free_user() -> None:
    """Le commit consomme exactement un crédit."""
    ledger = _ledger()
    ledger.open_account("u1", SubscriptionTier.FREE, 1)
    assert ledger.commit("u1", SubscriptionTier.FREE) == 0
    assert ledger.get_state("u1").generations_remaining == 0


def test_commit_on_empty_balance_raises_quota_exhausted() -> None:
    """Un commit sans crédit (course perdue) lève QuotaExhausted sans passer en négatif."""
    ledger = _ledger()
    ledger.open_account("u1", SubscriptionTier.FREE, 0)
    with pytest.raises(QuotaExhausted):
        ledger.commit("u1")
    assert ledger.get_state("u1").generations_remaining == 0


def test_paid_user_is_never_limited_nor_decremented() -> None:
    """Le tier payant est toujours autorisé et le commit ne touche pas au solde."""
    ledger = _ledger()
    ledger.open_account("p1", SubscriptionTier.PAID, PAID_REMAINING)
    decision = ledger.check_and_reserve("p1")
    assert decision.allowed
    assert decision.remaining is None
    assert ledger.commit("p1") is None
    assert ledger.get_state("p1").generations_remaining == PAID_REMAINING


def test_missing_state_is_internal() -> None:
    """Un utilisateur sans état de quota est une erreur interne."""
    with pytest.raises(Internal):
        _ledger().check_and_reserve("ghost")


def test_repo_failure_on_read_is_internal() -> None:
    """Une panne de lecture du dépôt est une erreur interne."""
    repo = Mock()
    repo.get.side_effect = ConnectionError("down")
    with pytest.raises(Internal):
        QuotaLedger(repo).check_and_reserve("u1")


def test_repo_failure_on_commit_is_internal() -> None:
    """Une panne pendant le décrément est une erreur interne."""
    repo = Mock()
    repo.decrement_if_positive.side_effect = ConnectionError("down")
    with pytest.raises(Internal):
        QuotaLedger(repo).commit("u1", SubscriptionTier.FREE)


def test_reset_is_idempotent_and_skips_paid_users() -> None:
    """Deux remises successives donnent le même état; le tier payant n'est pas touché."""
    ledger = _ledger(reset_value=1)
    ledger.open_account("f1", SubscriptionTier.FREE, 0)
    ledger.open_account("f2", SubscriptionTier.FREE, 1)
    ledger.open_account("p1", SubscriptionTier.PAID, PAID_REMAINING)

    first = ledger.reset_all(SubscriptionTier.FREE)
    snapshot = {uid: ledger.get_state(uid).generations_remaining for uid in ("f1", "f2", "p1")}
    second = ledger.reset_all(SubscriptionTier.FREE)

    assert first.updated == 2
    assert second.updated == 2
    assert snapshot == {"f1": 1, "f2": 1, "p1": PAID_REMAINING}
    assert {uid: ledger.get_state(uid).generations_remaining for uid in snapshot} == snapshot


def test_reset_continues_after_failed_batch() -> None:
    """Un lot en échec est journalisé; les lots suivants sont traités."""
    repo = Mock()
    repo.user_ids_by_tier.return_value = ["a", "b", "c", "d"]
    repo.set_remaining_many.side_effect = [ConnectionError("boom"), 2]
    report = QuotaLedger(repo, reset_value=1, batch_size=2).reset_all(SubscriptionTier.FREE)

    assert report.updated == 2
    assert report.failed == ["a", "b"]
    assert repo.set_remaining_many.call_count == 2
    repo.set_remaining_many.assert_called_with(["c", "d"], 1, "free")


def test_reset_counts_only_written_states() -> None:
    """Les ids d'index sans état ne sont pas comptés comme mis à jour."""
    repo = Mock()
    repo.user_ids_by_tier.return_value = ["a", "stale"]
    repo.set_remaining_many.return_value = 1
    report = QuotaLedger(repo, reset_value=1).reset_all(SubscriptionTier.FREE)
    assert report.updated == 1
    assert report.failed == []
