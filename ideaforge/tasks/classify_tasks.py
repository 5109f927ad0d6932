"""
Tâche Celery de classification du flux externe.

Récupère les posts candidats, les classe un par un et alimente le catalogue public. Les échecs
par post sont isolés: la tâche réussit dès que tous les posts ont été tentés.
"""

from __future__ import annotations

import structlog

from ideaforge.app.celery_app import celery_app
from ideaforge.core.container import container

log = structlog.get_logger(__name__)


@celery_app.task(name="ideaforge.tasks.classify_feed")
def classify_feed_task() -> dict:
    report = container.classifier.run_from_source(container.feed)
    summary = report.summary()
    log.info("classify_feed_task_done", attempted=summary["attempted"])
    return summary
