import logging
import time
import uuid
from contextlib import contextmanager

from django.conf import settings
from django.core.cache import caches
from django.core.cache.backends.redis import RedisCache
from redis.exceptions import LockNotOwnedError

logger = logging.getLogger("voteguard.voters")

ENROLLMENT_LOCK_KEY = "voters:enrollment-lock"


class EnrollmentBusy(Exception):
    pass


def _redis_lock(backend: RedisCache, timeout_s: float, ttl_s: int, poll_s: float):
    # redis-py: libération par script Lua (compare-and-delete atomique)
    client = backend._cache.get_client(ENROLLMENT_LOCK_KEY, write=True)
    return client.lock(backend.make_and_validate_key(ENROLLMENT_LOCK_KEY),
                       timeout=ttl_s, sleep=poll_s, blocking_timeout=timeout_s)


@contextmanager
def _with_redis_lock(backend, timeout_s, ttl_s, poll_s):
    lock = _redis_lock(backend, timeout_s, ttl_s, poll_s)
    if not lock.acquire():
        logger.error("enrollment lock: timeout after %.1fs", timeout_s)
        raise EnrollmentBusy("ENROLLMENT_BUSY")
    try:
        yield
    finally:
        try:
            lock.release()
        except LockNotOwnedError:
            # TTL dépassé pendant l'inscription: le verrou appartient déjà à un autre worker
            logger.warning("enrollment lock: expired before release (ttl=%ss)", ttl_s)


@contextmanager
def _with_cache_lock(backend, timeout_s, ttl_s, poll_s):
    token = uuid.uuid4().hex
    deadline = time.monotonic() + timeout_s

    while not backend.add(ENROLLMENT_LOCK_KEY, token, timeout=ttl_s):
        if time.monotonic() >= deadline:
            logger.error("enrollment lock: timeout after %.1fs", timeout_s)
            raise EnrollmentBusy("ENROLLMENT_BUSY")
        time.sleep(poll_s)
    try:
        yield
    finally:
        # get puis delete non atomiques: sûr en mono-processus (locmem) uniquement
        if backend.get(ENROLLMENT_LOCK_KEY) == token:
            backend.delete(ENROLLMENT_LOCK_KEY)


@contextmanager
def enrollment_lock(timeout_s: float = None, ttl_s: int = None, poll_s: float = 0.05):
    """
    Verrou global d'inscription: lecture du registre + contrôle doublon + insertion
    doivent être sérialisés, sinon deux captures similaires soumises en même temps
    passent toutes les deux. Porté par le cache partagé (Redis en prod).
    """
    timeout_s = timeout_s if timeout_s is not None else getattr(settings, "VOTER_ENROLLMENT_LOCK_WAIT", 30)
    ttl_s = ttl_s if ttl_s is not None else getattr(settings, "VOTER_ENROLLMENT_LOCK_TTL", 120)
    backend = caches["default"]

    if isinstance(backend, RedisCache):
        with _with_redis_lock(backend, timeout_s, ttl_s, poll_s):
            yield
    else:
        with _with_cache_lock(backend, timeout_s, ttl_s, poll_s):
            yield
