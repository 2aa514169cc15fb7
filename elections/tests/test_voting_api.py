from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings

from biometrics.tests.factories import jpeg_blob, mutate
from core.testing import make_station, SignedClientMixin
from elections.models import Candidate, VerificationAttempt, ManualVerificationRequest
from voters.models import Voter
from webhooks.models import WebhookConfig


class VotingFlowBase(SignedClientMixin, TestCase):
    def setUp(self):
        self.station, self.key, self.secret = make_station("hyd-poll-05")
        self.face = jpeg_blob(101)
        self.voter = Voter.objects.create(name="Asha Rao", aadhaar_number="123412341234", voter_id="A123456789",
                                          face_data=self.face, iris_data=jpeg_blob(102, length=12000))
        self.c1 = Candidate.objects.create(name="R. Sharma", party="Lotus", symbol="L")
        self.c2 = Candidate.objects.create(name="P. Reddy", party="Hand", symbol="H")

    def credentials(self, **extra):
        return {"name": "Asha Rao", "aadhaar_number": "123412341234", "voter_id": "A123456789", **extra}

    def verify(self, face):
        return self.post_signed("/api/v1/voting/verify", self.credentials(face_data=face))

    def ballot_token(self):
        resp = self.verify(mutate(self.face, 0.05, seed=1))
        self.assertEqual(resp.status_code, 200, resp.content)
        return resp.json()["ballot_token"]


class VerifyVoterApiTest(VotingFlowBase):

    def test_verified(self):
        resp = self.verify(mutate(self.face, 0.05, seed=1))
        self.assertEqual(resp.status_code, 200, resp.content)
        data = resp.json()
        self.assertEqual(data["code"], "VERIFIED")
        self.assertEqual(data["reason_code"], "MATCHED")
        self.assertGreaterEqual(data["score"], 0.65)
        self.assertTrue(data["ballot_token"])
        attempt = VerificationAttempt.objects.get(voter=self.voter)
        self.assertTrue(attempt.matched)
        self.assertEqual(attempt.station, self.station)

    def test_name_match_ignores_case_and_spaces(self):
        resp = self.post_signed("/api/v1/voting/verify", self.credentials(name="  asha RAO ", face_data=self.face))
        self.assertEqual(resp.status_code, 200, resp.content)

    def test_unknown_voter(self):
        resp = self.post_signed("/api/v1/voting/verify", self.credentials(name="Someone", face_data=self.face))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"]["code"], "VOTER_NOT_FOUND")
        self.assertFalse(VerificationAttempt.objects.exists())

    def test_attempt_budget_then_manual_verification(self):
        WebhookConfig.objects.create(name="ops", url="https://hooks.example.com/ops", secret="plain:wh", events=[])
        stranger = jpeg_blob(103)
        remaining = []
        with mock.patch("webhooks.tasks.deliver_webhook_task.delay") as delay, \
                self.captureOnCommitCallbacks(execute=True):
            for _ in range(3):
                resp = self.verify(stranger)
                self.assertEqual(resp.status_code, 403, resp.content)
                self.assertEqual(resp.json()["error"]["code"], "FACE_VERIFICATION_FAILED")
                remaining.append(resp.json()["error"]["attempts_remaining"])
        self.assertEqual(remaining, [2, 1, 0])
        events = [c.args[1] for c in delay.call_args_list]
        self.assertEqual(events, ["verification.locked"])

        # même le bon visage est refusé une fois le budget épuisé
        resp = self.verify(self.face)
        self.assertEqual(resp.status_code, 423)
        self.assertEqual(resp.json()["error"]["code"], "MANUAL_VERIFICATION_REQUIRED")
        self.assertEqual(VerificationAttempt.objects.filter(voter=self.voter).count(), 3)

    def test_bad_capture_counts_as_attempt(self):
        resp = self.verify("data:image/jpeg;base64,/9j/tiny")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"]["reason_code"], "INSUFFICIENT_QUALITY")
        self.assertEqual(resp.json()["error"]["attempts_remaining"], 2)

    @override_settings(VOTING_MAX_FACE_ATTEMPTS=1)
    def test_configurable_budget(self):
        self.assertEqual(self.verify(jpeg_blob(104)).json()["error"]["attempts_remaining"], 0)
        self.assertEqual(self.verify(self.face).status_code, 423)

    def test_already_voted(self):
        self.voter.mark_voted(self.station)
        resp = self.verify(self.face)
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"]["code"], "ALREADY_VOTED")


class CastVoteApiTest(VotingFlowBase):

    def test_cast_once(self):
        token = self.ballot_token()
        with mock.patch("webhooks.tasks.deliver_webhook_task.delay"), self.captureOnCommitCallbacks(execute=True):
            resp = self.post_signed("/api/v1/voting/cast", {"ballot_token": token, "candidate_id": self.c2.id})
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(resp.json()["code"], "VOTE_CAST")

        self.voter.refresh_from_db()
        self.c2.refresh_from_db()
        self.assertTrue(self.voter.has_voted)
        self.assertEqual(self.voter.voted_station, self.station)
        self.assertEqual(self.c2.vote_count, 1)

        resp = self.post_signed("/api/v1/voting/cast", {"ballot_token": token, "candidate_id": self.c1.id})
        self.assertEqual(resp.status_code, 409)
        self.c1.refresh_from_db()
        self.assertEqual(self.c1.vote_count, 0)

    def test_vote_cast_event_is_anonymous(self):
        WebhookConfig.objects.create(name="dash", url="https://hooks.example.com/d", secret="plain:wh",
                                     events=["vote.cast"])
        token = self.ballot_token()
        with mock.patch("webhooks.tasks.deliver_webhook_task.delay") as delay, \
                self.captureOnCommitCallbacks(execute=True):
            self.post_signed("/api/v1/voting/cast", {"ballot_token": token, "candidate_id": self.c1.id})
        delay.assert_called_once()
        data = delay.call_args.args[2]
        self.assertEqual(set(data), {"station", "cast_at"})

    def test_tampered_token(self):
        token = self.ballot_token()
        tampered = token[:-1] + ("A" if token[-1] != "A" else "B")
        resp = self.post_signed("/api/v1/voting/cast", {"ballot_token": tampered, "candidate_id": self.c1.id})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["error"]["code"], "INVALID_BALLOT_TOKEN")

    def test_expired_token(self):
        token = self.ballot_token()
        with override_settings(VOTING_BALLOT_TOKEN_MAX_AGE=-1):
            resp = self.post_signed("/api/v1/voting/cast", {"ballot_token": token, "candidate_id": self.c1.id})
        self.assertEqual(resp.status_code, 403)
        self.assertIn("expired", resp.json()["error"]["message"])

    def test_unknown_candidate(self):
        token = self.ballot_token()
        resp = self.post_signed("/api/v1/voting/cast", {"ballot_token": token, "candidate_id": 9999})
        self.assertEqual(resp.status_code, 404)
        self.voter.refresh_from_db()
        self.assertFalse(self.voter.has_voted)

    def test_no_voter_candidate_link(self):
        for model in (Voter, VerificationAttempt):
            related = {f.related_model for f in model._meta.get_fields() if f.is_relation}
            self.assertNotIn(Candidate, related)


class ResultsApiTest(VotingFlowBase):

    def test_no_votes(self):
        resp = self.client.get("/api/v1/voting/results")
        self.assertEqual(resp.status_code, 200, resp.content)
        data = resp.json()
        self.assertEqual(data["total_votes"], 0)
        self.assertEqual(data["registered_voters"], 1)
        self.assertEqual(data["turnout"], 0.0)
        self.assertIsNone(data["winner"])
        self.assertEqual([c["percentage"] for c in data["candidates"]], [0.0, 0.0])

    def test_counts_and_winner(self):
        Candidate.objects.filter(pk=self.c1.pk).update(vote_count=1)
        Candidate.objects.filter(pk=self.c2.pk).update(vote_count=3)
        data = self.client.get("/api/v1/voting/results").json()
        self.assertEqual(data["total_votes"], 4)
        self.assertEqual(data["winner"]["id"], self.c2.id)
        self.assertEqual([c["percentage"] for c in data["candidates"]], [25.0, 75.0])
        self.assertEqual(data["turnout"], 400.0)

    def test_tie_goes_to_first_candidate(self):
        Candidate.objects.update(vote_count=2)
        data = self.client.get("/api/v1/voting/results").json()
        self.assertEqual(data["winner"]["id"], self.c1.id)


class ManualVerificationApiTest(VotingFlowBase):
    def setUp(self):
        super().setUp()
        self.officer = get_user_model().objects.create_user("officer", password="pw", is_staff=True)

    def request_manual(self):
        return self.post_signed("/api/v1/voting/manual-verification",
                                self.credentials(remarks="Camera fails in low light"))

    def test_request_then_approve_then_cast(self):
        WebhookConfig.objects.create(name="ops", url="https://hooks.example.com/ops", secret="plain:wh",
                                     events=["manual_verification.requested"])
        with mock.patch("webhooks.tasks.deliver_webhook_task.delay") as delay, \
                self.captureOnCommitCallbacks(execute=True):
            resp = self.request_manual()
        self.assertEqual(resp.status_code, 201, resp.content)
        self.assertEqual(delay.call_args.args[1], "manual_verification.requested")
        req_id = resp.json()["request_id"]

        again = self.request_manual()
        self.assertEqual(again.status_code, 200)
        self.assertEqual(again.json()["request_id"], req_id)

        self.client.force_login(self.officer)
        resp = self.client.post(f"/api/v1/admin/manual-verifications/{req_id}/approve/",
                                data={"note": "ID card checked"}, content_type="application/json")
        self.assertEqual(resp.status_code, 200, resp.content)
        token = resp.json()["ballot_token"]
        req = ManualVerificationRequest.objects.get(pk=req_id)
        self.assertEqual(req.status, "approved")
        self.assertEqual(req.resolved_by, "officer")
        self.client.logout()

        resp = self.post_signed("/api/v1/voting/cast", {"ballot_token": token, "candidate_id": self.c1.id})
        self.assertEqual(resp.status_code, 200, resp.content)

    def test_reject_is_final(self):
        req_id = self.request_manual().json()["request_id"]
        self.client.force_login(self.officer)
        resp = self.client.post(f"/api/v1/admin/manual-verifications/{req_id}/reject/",
                                data={}, content_type="application/json")
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("ballot_token", resp.json())

        resp = self.client.post(f"/api/v1/admin/manual-verifications/{req_id}/approve/",
                                data={}, content_type="application/json")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"]["code"], "REQUEST_NOT_PENDING")

    def test_list_pending(self):
        self.request_manual()
        self.client.force_login(self.officer)
        rows = self.client.get("/api/v1/admin/manual-verifications/?status=pending").json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["voter_id"], "A123456789")
        self.assertEqual(rows[0]["station"], "hyd-poll-05")

    def test_unknown_voter(self):
        resp = self.post_signed("/api/v1/voting/manual-verification", self.credentials(voter_id="Z999999999"))
        self.assertEqual(resp.status_code, 404)


class CandidateAdminApiTest(TestCase):
    def setUp(self):
        self.officer = get_user_model().objects.create_user("officer", password="pw", is_staff=True)
        self.client.force_login(self.officer)

    def test_create_and_update(self):
        resp = self.client.post("/api/v1/admin/candidates/", data={"name": "K. Das", "party": "Wheel",
                                                                   "symbol": "W", "vote_count": 50},
                                content_type="application/json")
        self.assertEqual(resp.status_code, 201, resp.content)
        cid = resp.json()["id"]
        self.assertEqual(resp.json()["vote_count"], 0)

        resp = self.client.patch(f"/api/v1/admin/candidates/{cid}/", data={"party": "Wheel Party", "vote_count": 9},
                                 content_type="application/json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["party"], "Wheel Party")
        self.assertEqual(Candidate.objects.get(pk=cid).vote_count, 0)
