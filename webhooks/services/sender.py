import json
import logging
import time
import uuid

import httpx
from cryptography.fernet import Fernet, InvalidToken
from django.conf import settings
from django.utils import timezone

from .signer import sign_payload, HDR_SIG, HDR_TS, HDR_EVT
from ..models import WebhookConfig, WebhookDelivery

logger = logging.getLogger("voteguard.webhooks")


class WebhookSecretError(Exception):
    pass


def reveal_secret(secret_field: str) -> bytes:
    """
    DEV: "plain:xxxxx". Sinon jeton Fernet déchiffré avec APIKEYS_ENC_KEY.
    """
    if secret_field.startswith("plain:"):
        return secret_field.split("plain:", 1)[1].encode("utf-8")
    aes_key = getattr(settings, "APIKEYS_ENC_KEY", None)
    if not aes_key:
        raise WebhookSecretError("Server misconfigured: missing APIKEYS_ENC_KEY")
    try:
        return Fernet(aes_key.encode("utf-8")).decrypt(secret_field.encode("utf-8"))
    except InvalidToken:
        raise WebhookSecretError("Cannot decrypt webhook secret")


def build_payload(event: str, data: dict) -> dict:
    return {
        "id": f"wh_{uuid.uuid4().hex}",
        "event": event,
        "data": data,
        "version": settings.SPECTACULAR_SETTINGS.get("VERSION", "1.0.0"),
        "sent_at": timezone.now().isoformat(),
    }


def send_webhook(config: WebhookConfig, event: str, data: dict, attempt: int = 1) -> WebhookDelivery:
    """
    Envoi synchrone (appelé par la tâche Celery). Chaque tentative est journalisée.
    """
    payload = build_payload(event, data)
    body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    ts_ms, sig = sign_payload(reveal_secret(config.secret), event, body)

    headers = {
        "Content-Type": "application/json",
        HDR_EVT: event,
        HDR_TS: ts_ms,
        HDR_SIG: sig,
        "User-Agent": "VoteGuard-Webhook/1.0",
    }

    t0 = time.perf_counter()
    status_code = None
    ok = False
    err = ""
    try:
        with httpx.Client(timeout=config.timeout_s, verify=True) as client:
            resp = client.post(config.url, headers=headers, content=body)
            status_code = resp.status_code
            ok = 200 <= resp.status_code < 300
            if not ok:
                err = f"HTTP {resp.status_code}: {resp.text[:500]}"
    except httpx.HTTPError as e:
        err = str(e) or e.__class__.__name__
    duration_ms = int((time.perf_counter() - t0) * 1000)

    if not ok:
        logger.warning("webhook %s -> %s failed (attempt %d): %s", event, config.url, attempt, err)

    return WebhookDelivery.objects.create(
        config=config,
        event=event,
        url=config.url,
        attempt=attempt,
        headers=headers,
        payload=payload,
        status_code=status_code,
        ok=ok,
        error=err,
        duration_ms=duration_ms,
    )
