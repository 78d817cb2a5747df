# core/celery.py
from __future__ import annotations

import os

from celery import Celery

# Módulo de settings de Django por defecto
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "core.settings")

app = Celery("core")

# Configuración desde settings.py con prefijo CELERY_
# (CELERY_BROKER_URL, CELERY_BEAT_SCHEDULE, ...)
app.config_from_object("django.conf:settings", namespace="CELERY")

# Autodescubre tasks.py en las apps instaladas (inventario.tasks)
app.autodiscover_tasks()
