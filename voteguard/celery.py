import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "voteguard.settings.dev")

app = Celery("voteguard")
# toutes les clés CELERY_* des settings Django
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
