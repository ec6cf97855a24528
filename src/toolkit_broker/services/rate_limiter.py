# Per-key token bucket rate limiter
# Lazy refill on each check; idle buckets are evicted when idle_ttl is set

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

ANONYMOUS_KEY = "__anonymous__"
# Levels within this distance of a whole token count as that token
TOKEN_EPSILON = 1e-9


@dataclass
class RateBucket:
    """Mutable token state for one caller."""
    tokens: float
    last_refill: float


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate-limit check."""
    allowed: bool
    remaining: int
    limit: int
    reset_in: int

    def headers(self) -> Dict[str, str]:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_in),
        }
        if not self.allowed:
            headers["Retry-After"] = str(max(1, self.reset_in))
        return headers


class TokenBucketRateLimiter:
    """Token bucket keyed by API key (or a shared anonymous key)."""

    def __init__(
        self,
        max_tokens: int = 100,
        refill_rate: float = 10.0,
        cost_per_request: int = 1,
        clock: Optional[Callable[[], float]] = None,
        idle_ttl: Optional[float] = None,
    ) -> None:
        if max_tokens <= 0 or refill_rate <= 0:
            raise ValueError("max_tokens and refill_rate must be positive")
        if idle_ttl is not None and idle_ttl <= 0:
            raise ValueError("idle_ttl must be positive")
        self.max_tokens = max_tokens
        self.refill_rate = refill_rate
        self.cost_per_request = cost_per_request
        self.idle_ttl = idle_ttl
        self._clock = clock or time.monotonic
        self._buckets: Dict[str, RateBucket] = {}
        self._lock = threading.Lock()
        self._last_prune = self._clock()

    def _get_or_create_bucket(self, key: str) -> RateBucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = RateBucket(tokens=float(self.max_tokens), last_refill=self._clock())
            self._buckets[key] = bucket
        return bucket

    def _level(self, tokens: float) -> float:
        # elapsed * rate rarely lands on a whole token exactly
        nearest = round(tokens)
        if abs(tokens - nearest) < TOKEN_EPSILON:
            return float(nearest)
        return tokens

    def _refill(self, bucket: RateBucket) -> None:
        now = self._clock()
        elapsed = max(0.0, now - bucket.last_refill)
        tokens = min(float(self.max_tokens), bucket.tokens + elapsed * self.refill_rate)
        bucket.tokens = self._level(tokens)
        bucket.last_refill = now

    def _reset_in(self, tokens: float) -> int:
        missing = max(0.0, self.max_tokens - tokens)
        return max(0, math.ceil(missing / self.refill_rate - TOKEN_EPSILON))

    def check(self, api_key: Optional[str] = None, cost: Optional[int] = None) -> RateLimitResult:
        """Refill the caller's bucket, then try to consume `cost` tokens."""
        key = api_key or ANONYMOUS_KEY
        cost = self.cost_per_request if cost is None else cost

        if self.idle_ttl is not None and self._clock() - self._last_prune >= self.idle_ttl:
            self.prune_idle(self.idle_ttl)

        with self._lock:
            bucket = self._get_or_create_bucket(key)
            self._refill(bucket)
            allowed = bucket.tokens >= cost
            if allowed:
                bucket.tokens = self._level(max(0.0, bucket.tokens - cost))
            tokens = bucket.tokens

        if not allowed:
            logger.info("Rate limit exceeded for key %s", self._mask(key))

        return RateLimitResult(
            allowed=allowed,
            remaining=math.floor(tokens),
            limit=self.max_tokens,
            reset_in=self._reset_in(tokens),
        )

    def stats(self) -> List[Dict[str, object]]:
        """Current token levels per bucket, with keys masked."""
        now = self._clock()
        with self._lock:
            stats = []
            for key, bucket in self._buckets.items():
                # projected level; reading must not count as activity
                elapsed = max(0.0, now - bucket.last_refill)
                tokens = self._level(min(float(self.max_tokens), bucket.tokens + elapsed * self.refill_rate))
                stats.append({
                    "apiKey": self._mask(key),
                    "tokens": math.floor(tokens),
                    "maxTokens": self.max_tokens,
                })
            return stats

    def prune_idle(self, max_idle_seconds: float) -> int:
        """Evict buckets untouched for longer than `max_idle_seconds`."""
        now = self._clock()
        with self._lock:
            self._last_prune = now
            stale = [k for k, b in self._buckets.items() if now - b.last_refill > max_idle_seconds]
            for key in stale:
                del self._buckets[key]
        if stale:
            logger.info("Evicted %d idle rate-limit buckets", len(stale))
        return len(stale)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __len__(self) -> int:
        return len(self._buckets)

    @staticmethod
    def _mask(key: str) -> str:
        if key == ANONYMOUS_KEY:
            return "anonymous"
        return key[:10] + "..."
