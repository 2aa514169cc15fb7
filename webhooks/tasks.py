import math

from celery import shared_task

from .models import WebhookConfig
from .services.sender import send_webhook


def backoff_delay(backoff_s: int, attempt: int) -> int:
    return int((backoff_s or 5) * math.pow(2, attempt - 1))  # 5,10,20,40...


@shared_task(bind=True, max_retries=10, default_retry_delay=5)
def deliver_webhook_task(self, config_id: int, event: str, data: dict, attempt: int = 1):
    """
    Tâche Celery avec retry exponentiel, bornée par config.max_retries.
    """
    try:
        config = WebhookConfig.objects.get(id=config_id, active=True)
    except WebhookConfig.DoesNotExist:
        return None

    delivery = send_webhook(config, event, data, attempt=attempt)
    if delivery.ok or attempt >= (config.max_retries or 0):
        return delivery.id

    # args repris tels quels: le message initial les porte en positionnel
    raise self.retry(countdown=backoff_delay(config.backoff_s, attempt),
                     args=(config_id, event, data), kwargs={"attempt": attempt + 1})
