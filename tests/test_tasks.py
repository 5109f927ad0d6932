"""Tests pour les tâches Celery planifiées (classification quotidienne, remise à zéro mensuelle)."""

from __future__ import annotations

from celery.schedules import crontab

from ideaforge.app.celery_app import celery_app
from ideaforge.domain.entities import SourcePost, SubscriptionTier
from ideaforge.infra.feeds import StaticPostSource
from ideaforge.tasks.classify_tasks import classify_feed_task
from ideaforge.tasks.quota_tasks import reset_free_quota_task
from tests.fakes import idea_json, seed_user

PAID_REMAINING = 4


def test_classify_feed_task_summary(test_container, fake_llm, monkeypatch) -> None:
    """La tâche classe le flux et renvoie un résumé sérialisable."""
    fake_llm.responses = ["oops", idea_json(name="Deck Forge")]
    test_container.feed = StaticPostSource(
        [SourcePost(id="p1", title="a"), SourcePost(id="p2", title="b")]
    )
    monkeypatch.setattr("ideaforge.tasks.classify_tasks.container", test_container)

    summary = classify_feed_task()

    assert summary == {
        "attempted": 2,
        "succeeded": ["Deck Forge"],
        "failed": [{"post_id": "p1", "kind": "MalformedResponse"}],
    }
    assert test_container.catalog_repo.get("Deck Forge")["source"] == "external-feed"


def test_reset_free_quota_task(test_container, monkeypatch) -> None:
    """La remise à zéro ne touche que le tier gratuit."""
    free = seed_user(test_container, email="f@test.io", remaining=0)
    paid = seed_user(
        test_container, email="p@test.io", tier=SubscriptionTier.PAID, remaining=PAID_REMAINING
    )
    monkeypatch.setattr("ideaforge.tasks.quota_tasks.container", test_container)

    assert reset_free_quota_task() == {"tier": "free", "updated": 1, "failed": 0}
    assert reset_free_quota_task() == {"tier": "free", "updated": 1, "failed": 0}
    assert test_container.ledger.get_state(free["id"]).generations_remaining == 1
    assert test_container.ledger.get_state(paid["id"]).generations_remaining == PAID_REMAINING


def test_beat_schedule() -> None:
    """Classification chaque jour à minuit, remise à zéro le 1er du mois."""
    schedule = celery_app.conf.beat_schedule
    daily = schedule["classify-feed-daily"]
    monthly = schedule["reset-free-quota-monthly"]
    assert daily["task"] == "ideaforge.tasks.classify_feed"
    assert daily["schedule"] == crontab(minute=0, hour=0)
    assert monthly["task"] == "ideaforge.tasks.reset_free_quota"
    assert monthly["schedule"] == crontab(minute=0, hour=0, day_of_month=1)
    assert celery_app.conf.task_acks_late is True
