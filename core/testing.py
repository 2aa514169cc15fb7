"""
Aides de test partagées: création d'un bureau de vote + clé, requêtes signées HMAC.
"""
import hashlib
import hmac
import itertools
import json
import time

from apikeys.models import ApiKey
from stations.models import PollingStation

# Horodatages strictement croissants: l'anti-replay refuse deux fois le même (key_id, ts)
_ts_seq = itertools.count()


def make_station(code="hyd-north-01", name=None, key_id=None, secret="secret123"):
    station = PollingStation.objects.create(name=name or f"Station {code}", code=code, region="north")
    key = ApiKey.objects.create(station=station, key_id=key_id or f"kid_{code}", key_secret_enc=f"plain:{secret}")
    return station, key, secret


class SignedClientMixin:
    """À mélanger avec django.test.TestCase ; attend self.key et self.secret."""

    def _headers(self, method, path, body: bytes, secret=None):
        ts = str(int(time.time() * 1000) + next(_ts_seq))
        body_sha = hashlib.sha256(body).hexdigest()
        to_sign = f"{ts}\n{method}\n{path}\n{body_sha}".encode()
        sign = hmac.new((secret or self.secret).encode(), to_sign, hashlib.sha256).hexdigest()
        return {
            "HTTP_X_API_KEY": self.key.key_id,
            "HTTP_X_API_TIMESTAMP": ts,
            "HTTP_X_API_SIGN": sign,
        }

    def post_signed(self, path, payload):
        body = json.dumps(payload, separators=(",", ":")).encode()
        return self.client.post(path, data=body, content_type="application/json",
                                **self._headers("POST", path, body))

    def get_signed(self, path):
        return self.client.get(path, **self._headers("GET", path, b""))
