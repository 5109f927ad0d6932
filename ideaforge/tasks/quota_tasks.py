"""Tâche Celery de remise à zéro mensuelle des quotas du tier gratuit."""

from __future__ import annotations

from ideaforge.app.celery_app import celery_app
from ideaforge.core.container import container
from ideaforge.domain.entities import SubscriptionTier


@celery_app.task(name="ideaforge.tasks.reset_free_quota")
def reset_free_quota_task() -> dict:
    report = container.ledger.reset_all(SubscriptionTier.FREE)
    return {"tier": report.tier, "updated": report.updated, "failed": len(report.failed)}
