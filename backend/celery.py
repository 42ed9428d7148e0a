"""Celery application for the scholar portal workers."""
from __future__ import annotations

import os

from celery import Celery
from django.conf import settings

from backend import celery_settings

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

celery_app = Celery("backend")
celery_app.config_from_object("django.conf:settings", namespace="CELERY")
celery_app.autodiscover_tasks(lambda: settings.INSTALLED_APPS)
celery_app.conf.update(
    task_default_queue=celery_settings.CELERY_TASK_DEFAULT_QUEUE,
)
celery_app.set_default()
