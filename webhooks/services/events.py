import logging
from typing import List

from django.db import transaction

from ..models import WebhookConfig

logger = logging.getLogger("voteguard.webhooks")

EVENTS = (
    "registration.duplicate_detected",
    "verification.locked",
    "manual_verification.requested",
    "manual_verification.resolved",
    "vote.cast",
    "test.ping",
)


def subscribers(event: str) -> List[WebhookConfig]:
    # filtrage en Python: __contains sur JSONField n'est pas portable (SQLite)
    return [c for c in WebhookConfig.objects.filter(active=True) if c.wants(event)]


def emit_event(event: str, data: dict) -> int:
    """
    Planifie la livraison de `event` à chaque abonné, APRÈS commit de la transaction
    en cours: un rollback n'émet rien. Retourne le nombre d'abonnés.
    """
    from ..tasks import deliver_webhook_task

    targets = subscribers(event)
    for cfg in targets:
        transaction.on_commit(
            lambda cfg_id=cfg.id: deliver_webhook_task.delay(cfg_id, event, data, attempt=1)
        )
    if targets:
        logger.info("event %s queued for %d subscriber(s)", event, len(targets))
    return len(targets)
