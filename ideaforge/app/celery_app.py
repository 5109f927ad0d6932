"""
Module: celery_app.

But: Initialiser l'instance Celery de l'application, charger la config runtime et le planning
des tâches périodiques (classification quotidienne, remise à zéro mensuelle des quotas).
"""

from celery import Celery

from ideaforge.core.container import container
from ideaforge.core.logging import setup_logging

setup_logging()

celery_app = Celery(
    "ideaforge",
    broker=container.settings.CELERY_BROKER_URL,
    backend=container.settings.CELERY_RESULT_BACKEND,
    include=["ideaforge.tasks.classify_tasks", "ideaforge.tasks.quota_tasks"],
)
# Load configuration from module (acks, timeouts, beat schedule)
celery_app.config_from_object("ideaforge.app.celeryconfig")
celery_app.conf.task_routes = {"ideaforge.tasks.*": {"queue": "default"}}

__all__ = ["celery_app"]
