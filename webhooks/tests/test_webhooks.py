import json
from unittest import mock

import httpx
from celery.exceptions import Retry
from django.contrib.auth import get_user_model
from django.test import TestCase

from webhooks.models import WebhookConfig, WebhookDelivery
from webhooks.services.events import emit_event, subscribers
from webhooks.services.sender import send_webhook
from webhooks.services.signer import verify_signature, HDR_SIG, HDR_TS, HDR_EVT
from webhooks.tasks import deliver_webhook_task, backoff_delay

REAL_CLIENT = httpx.Client


def fake_client(handler):
    return lambda **kw: REAL_CLIENT(transport=httpx.MockTransport(handler), **kw)


class SendWebhookTest(TestCase):
    def setUp(self):
        self.cfg = WebhookConfig.objects.create(name="dash", url="https://hooks.example.com/vg",
                                                secret="plain:whsecret", max_retries=3)
        self.seen = []

    def test_signed_delivery(self):
        def handler(request):
            self.seen.append(request)
            return httpx.Response(200, json={"ok": True})

        with mock.patch("webhooks.services.sender.httpx.Client", fake_client(handler)):
            delivery = send_webhook(self.cfg, "vote.cast", {"station": "hyd-01"})

        self.assertTrue(delivery.ok)
        self.assertEqual(delivery.status_code, 200)
        req = self.seen[0]
        body = req.content
        self.assertEqual(req.headers[HDR_EVT], "vote.cast")
        self.assertTrue(verify_signature(b"whsecret", "vote.cast", body, req.headers[HDR_TS], req.headers[HDR_SIG]))
        payload = json.loads(body)
        self.assertEqual(payload["event"], "vote.cast")
        self.assertEqual(payload["data"], {"station": "hyd-01"})
        self.assertEqual(payload["version"], "1.0.0")

    def test_http_error_is_journaled(self):
        with mock.patch("webhooks.services.sender.httpx.Client",
                        fake_client(lambda request: httpx.Response(500, text="down"))):
            delivery = send_webhook(self.cfg, "vote.cast", {}, attempt=2)
        self.assertFalse(delivery.ok)
        self.assertEqual(delivery.attempt, 2)
        self.assertIn("HTTP 500", delivery.error)

    def test_network_error_is_journaled(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with mock.patch("webhooks.services.sender.httpx.Client", fake_client(handler)):
            delivery = send_webhook(self.cfg, "vote.cast", {})
        self.assertFalse(delivery.ok)
        self.assertIsNone(delivery.status_code)
        self.assertIn("connection refused", delivery.error)


class DeliverTaskTest(TestCase):
    def setUp(self):
        self.cfg = WebhookConfig.objects.create(name="dash", url="https://hooks.example.com/vg",
                                                secret="plain:whsecret", max_retries=2, backoff_s=5)

    def test_backoff(self):
        self.assertEqual([backoff_delay(5, a) for a in (1, 2, 3, 4)], [5, 10, 20, 40])

    def test_success_no_retry(self):
        with mock.patch("webhooks.services.sender.httpx.Client",
                        fake_client(lambda request: httpx.Response(204))):
            deliver_webhook_task(self.cfg.id, "test.ping", {"msg": "hi"})
        self.assertEqual(WebhookDelivery.objects.filter(ok=True).count(), 1)

    def test_failure_schedules_retry(self):
        with mock.patch("webhooks.services.sender.httpx.Client",
                        fake_client(lambda request: httpx.Response(503))):
            with self.assertRaises(Retry):
                deliver_webhook_task(self.cfg.id, "test.ping", {}, attempt=1)

    def test_retry_redelivers_with_next_attempt(self):
        # apply() rejoue la signature de retry jusqu'à max_retries
        with mock.patch("webhooks.services.sender.httpx.Client",
                        fake_client(lambda request: httpx.Response(503))):
            result = deliver_webhook_task.apply(args=(self.cfg.id, "test.ping", {}), kwargs={"attempt": 1},
                                                throw=False)
        self.assertEqual(list(WebhookDelivery.objects.order_by("attempt").values_list("attempt", flat=True)), [1, 2])
        self.assertEqual(result.get(), WebhookDelivery.objects.get(attempt=2).id)

    def test_retry_succeeds_on_second_attempt(self):
        statuses = iter([503, 200])
        with mock.patch("webhooks.services.sender.httpx.Client",
                        fake_client(lambda request: httpx.Response(next(statuses)))):
            deliver_webhook_task.apply(args=(self.cfg.id, "test.ping", {"msg": "hi"}), kwargs={"attempt": 1},
                                       throw=False)
        rows = list(WebhookDelivery.objects.order_by("attempt").values_list("attempt", "ok"))
        self.assertEqual(rows, [(1, False), (2, True)])

    def test_gives_up_after_max_retries(self):
        with mock.patch("webhooks.services.sender.httpx.Client",
                        fake_client(lambda request: httpx.Response(503))):
            deliver_webhook_task(self.cfg.id, "test.ping", {}, attempt=2)
        self.assertEqual(WebhookDelivery.objects.filter(ok=False).count(), 1)

    def test_inactive_config_skipped(self):
        self.cfg.active = False
        self.cfg.save(update_fields=["active"])
        self.assertIsNone(deliver_webhook_task(self.cfg.id, "test.ping", {}))
        self.assertFalse(WebhookDelivery.objects.exists())


class EmitEventTest(TestCase):
    def setUp(self):
        self.all_events = WebhookConfig.objects.create(name="all", url="https://a.example.com", secret="plain:a")
        self.votes = WebhookConfig.objects.create(name="votes", url="https://b.example.com", secret="plain:b",
                                                  events=["vote.cast"])
        WebhookConfig.objects.create(name="off", url="https://c.example.com", secret="plain:c", active=False)

    def test_subscribers(self):
        self.assertEqual([c.name for c in subscribers("vote.cast")], ["all", "votes"])
        self.assertEqual([c.name for c in subscribers("verification.locked")], ["all"])

    def test_enqueued_after_commit(self):
        with mock.patch("webhooks.tasks.deliver_webhook_task.delay") as delay:
            with self.captureOnCommitCallbacks(execute=False) as callbacks:
                self.assertEqual(emit_event("vote.cast", {"station": "x"}), 2)
            delay.assert_not_called()
            for cb in callbacks:
                cb()
        ids = sorted(c.args[0] for c in delay.call_args_list)
        self.assertEqual(ids, sorted([self.all_events.id, self.votes.id]))


class WebhookAdminTest(TestCase):
    def setUp(self):
        self.client.force_login(get_user_model().objects.create_user("officer", password="pw", is_staff=True))

    def test_create_hides_secret(self):
        resp = self.client.post("/api/v1/admin/webhooks/configs/", data={
            "name": "siem", "url": "https://siem.example.com/in", "secret": "plain:abc",
            "events": ["vote.cast", "verification.locked"],
        }, content_type="application/json")
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertNotIn("secret", resp.json())

    def test_unknown_event_rejected(self):
        resp = self.client.post("/api/v1/admin/webhooks/configs/", data={
            "name": "siem", "url": "https://siem.example.com/in", "secret": "plain:abc", "events": ["job.done"],
        }, content_type="application/json")
        self.assertEqual(resp.status_code, 400)

    def test_ping_queued(self):
        cfg = WebhookConfig.objects.create(name="p", url="https://p.example.com", secret="plain:p")
        with mock.patch("webhooks.tasks.deliver_webhook_task.delay") as delay:
            resp = self.client.post(f"/api/v1/admin/webhooks/configs/{cfg.id}/test/", data={},
                                    content_type="application/json")
        self.assertEqual(resp.status_code, 202)
        delay.assert_called_once_with(cfg.id, "test.ping", {"msg": "hello from VoteGuard"}, attempt=1)

    def test_deliveries_filter(self):
        WebhookDelivery.objects.create(event="vote.cast", url="https://x.example.com", ok=True)
        WebhookDelivery.objects.create(event="vote.cast", url="https://x.example.com", ok=False)
        rows = self.client.get("/api/v1/admin/webhooks/deliveries/?ok=false").json()
        self.assertEqual(len(rows), 1)
        self.assertFalse(rows[0]["ok"])
