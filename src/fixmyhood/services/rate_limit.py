"""Per-user write cooldowns for FixMyHood.

Each action (creating a report, posting a comment, flagging content) may be
performed once per cooldown window. Cooldowns live in Redis so they hold across
workers; when Redis is unreachable the limiter falls back to an in-process
table owned by the limiter instance.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock

import redis

from fixmyhood.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a cooldown check."""

    allowed: bool
    retry_after_seconds: int = 0


class RateLimiter:
    """Cooldown tracker keyed by action and user."""

    def __init__(self, redis_client: redis.Redis | None = None, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self._redis = redis_client
        self._local: dict[str, float] = {}
        self._lock = Lock()

    def hit(self, action: str, user_id: str, cooldown_seconds: int) -> RateLimitResult:
        """Start a cooldown for ``action`` unless one is already running.

        Returns a denied result carrying the seconds left when the user is
        still cooling down.
        """
        if not self.enabled or cooldown_seconds <= 0:
            return RateLimitResult(allowed=True)
        key = f"ratelimit:{action}:{user_id}"
        if self._redis is not None:
            try:
                return self._hit_redis(self._redis, key, cooldown_seconds)
            except redis.RedisError as exc:
                logger.warning("Redis unavailable for rate limiting, using local table: %s", exc)
                self._redis = None
        return self._hit_local(key, cooldown_seconds)

    def reset(self, action: str, user_id: str) -> None:
        """Clear a cooldown, e.g. after the guarded write failed."""
        key = f"ratelimit:{action}:{user_id}"
        if self._redis is not None:
            try:
                self._redis.delete(key)
                return
            except redis.RedisError:
                self._redis = None
        with self._lock:
            self._local.pop(key, None)

    @staticmethod
    def _hit_redis(client: redis.Redis, key: str, cooldown_seconds: int) -> RateLimitResult:
        if client.set(key, "1", ex=int(cooldown_seconds), nx=True):
            return RateLimitResult(allowed=True)
        ttl = client.ttl(key)
        retry_after = int(ttl) if isinstance(ttl, int) and ttl > 0 else int(cooldown_seconds)
        return RateLimitResult(allowed=False, retry_after_seconds=retry_after)

    def _hit_local(self, key: str, cooldown_seconds: int) -> RateLimitResult:
        now = time.monotonic()
        with self._lock:
            expires_at = self._local.get(key)
            if expires_at is not None and expires_at > now:
                return RateLimitResult(
                    allowed=False,
                    retry_after_seconds=max(1, math.ceil(expires_at - now)),
                )
            self._local[key] = now + cooldown_seconds
        return RateLimitResult(allowed=True)


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    """Return the process-wide rate limiter built from settings."""
    if not settings.rate_limit_enabled:
        return RateLimiter(enabled=False)
    client = redis.Redis.from_url(settings.redis_url) if settings.redis_url else None
    return RateLimiter(client)
