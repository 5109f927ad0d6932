"""Configuration centralisée Celery pour les tâches planifiées.

Ce module définit la configuration globale de Celery: acquittement tardif, timeouts et planning
beat des deux tâches périodiques. Les deux tâches sont idempotentes, une redélivrance après
timeout est donc sans effet cumulatif.
"""

from __future__ import annotations

from celery.schedules import crontab

# Acks & limites
task_acks_late = True
task_reject_on_worker_lost = True
worker_prefetch_multiplier = 1
task_time_limit = 900  # secondes
broker_pool_limit = 10
timezone = "UTC"
enable_utc = True

beat_schedule = {
    "classify-feed-daily": {
        "task": "ideaforge.tasks.classify_feed",
        "schedule": crontab(minute=0, hour=0),
    },
    "reset-free-quota-monthly": {
        "task": "ideaforge.tasks.reset_free_quota",
        "schedule": crontab(minute=0, hour=0, day_of_month=1),
    },
}
