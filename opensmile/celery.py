"""Celery application for interaction enrichment and retention jobs."""

from __future__ import annotations

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "opensmile.settings")

app = Celery("opensmile")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
