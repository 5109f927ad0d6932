"""
Registre de quotas de génération par utilisateur.

Règles:
- tier `paid`: jamais limité, aucun décrément;
- tier `free`: autorisé tant que `generations_remaining > 0`;
- le décrément n'a lieu qu'après une génération réussie, via un décrément conditionnel atomique
  côté dépôt; deux requêtes concurrentes ne peuvent donc pas consommer plus que le solde.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ideaforge.app.metrics import QUOTA_DECISIONS, QUOTA_RESET_USERS
from ideaforge.domain.entities import QuotaState, SubscriptionTier
from ideaforge.domain.errors import Internal, QuotaExhausted

log = structlog.get_logger(__name__)


@dataclass
class QuotaDecision:
    """Résultat de `check_and_reserve`."""

    allowed: bool
    tier: SubscriptionTier
    remaining: int | None = None
    reason: str | None = None


@dataclass
class ResetReport:
    """Bilan d'une remise à zéro mensuelle."""

    tier: str
    updated: int = 0
    failed: list[str] = field(default_factory=list)


class QuotaLedger:
    """Vérifie, consomme et réinitialise les allocations de génération."""

    def __init__(self, repo, reset_value: int = 1, batch_size: int = 500):
        """
        Initialise le registre.

        Args:
            repo: Dépôt de quotas (InMemoryQuotaRepo ou RedisQuotaRepo).
            reset_value: Solde appliqué par la remise à zéro mensuelle.
            batch_size: Taille des lots de la remise à zéro.
        """
        self.repo = repo
        self.reset_value = int(reset_value)
        self.batch_size = max(1, int(batch_size))

    def get_state(self, user_id: str) -> QuotaState:
        """Charge l'état de quota; `Internal` s'il est absent ou illisible."""
        try:
            raw = self.repo.get(user_id)
        except Exception as exc:
            log.error("quota_read_failed", user_id=user_id, error=type(exc).__name__)
            raise Internal("quota_read_failed") from exc
        if raw is None:
            raise Internal("quota_state_missing")
        return QuotaState(
            user_id=user_id,
            tier=SubscriptionTier(raw["tier"]),
            generations_remaining=raw["remaining"],
        )

    def open_account(
        self, user_id: str, tier: SubscriptionTier = SubscriptionTier.FREE, remaining: int = 1
    ) -> QuotaState:
        """Crée l'état de quota à l'inscription."""
        self.repo.save(user_id, tier.value, remaining)
        return QuotaState(user_id=user_id, tier=tier, generations_remaining=remaining)

    def check_and_reserve(self, user_id: str) -> QuotaDecision:
        """Décide si l'utilisateur peut lancer une génération (aucune écriture)."""
        state = self.get_state(user_id)
        if state.tier is SubscriptionTier.PAID:
            QUOTA_DECISIONS.labels(tier="paid", result="allow").inc()
            return QuotaDecision(allowed=True, tier=state.tier)
        if state.generations_remaining > 0:
            QUOTA_DECISIONS.labels(tier="free", result="allow").inc()
            return QuotaDecision(
                allowed=True, tier=state.tier, remaining=state.generations_remaining
            )
        QUOTA_DECISIONS.labels(tier="free", result="deny").inc()
        return QuotaDecision(
            allowed=False, tier=state.tier, remaining=0, reason=QuotaExhausted.kind
        )

    def commit(self, user_id: str, tier: SubscriptionTier | None = None) -> int | None:
        """
        Consomme une génération après succès (tier gratuit uniquement).

        Le dépôt re-vérifie `remaining > 0` au moment du décrément; si un appel concurrent a
        consommé le dernier crédit entre-temps, lève `QuotaExhausted`.

        Returns:
            int | None: Nouveau solde, ou None pour un utilisateur payant.
        """
        if tier is None:
            tier = self.get_state(user_id).tier
        if tier is SubscriptionTier.PAID:
            return None
        try:
            remaining = self.repo.decrement_if_positive(user_id)
        except Exception as exc:
            log.error("quota_commit_failed", user_id=user_id, error=type(exc).__name__)
            raise Internal("quota_commit_failed") from exc
        if remaining is None:
            QUOTA_DECISIONS.labels(tier="free", result="lost_race").inc()
            raise QuotaExhausted("quota_exhausted_at_commit")
        return remaining

    def reset_all(self, tier: SubscriptionTier = SubscriptionTier.FREE) -> ResetReport:
        """
        Remet le solde de tous les utilisateurs du tier à `reset_value`.

        Traitement par lots: chaque lot est atomique, un lot en échec est journalisé et les
        lots suivants sont tout de même traités. Ré-exécutable sans effet cumulatif. Les membres
        d'index sans état de quota ne sont pas recréés et ne comptent pas dans `updated`.
        """
        report = ResetReport(tier=tier.value)
        user_ids = self.repo.user_ids_by_tier(tier.value)
        for start in range(0, len(user_ids), self.batch_size):
            batch = user_ids[start : start + self.batch_size]
            try:
                written = self.repo.set_remaining_many(batch, self.reset_value, tier.value)
            except Exception as exc:
                log.error(
                    "quota_reset_batch_failed",
                    tier=tier.value,
                    batch_start=start,
                    batch_size=len(batch),
                    error=type(exc).__name__,
                )
                report.failed.extend(batch)
                continue
            report.updated += written
        QUOTA_RESET_USERS.labels(tier=tier.value).inc(report.updated)
        log.info(
            "quota_reset_done",
            tier=tier.value,
            updated=report.updated,
            failed=len(report.failed),
            value=self.reset_value,
        )
        return report
