"""
Cost guards in front of the paid correction provider.

``SlidingWindowRateLimiter`` caps upstream calls per time window and
``RecentQueryCache`` reuses provider responses for recently seen text.
Both are plain instances owned by the correction service, so tests can
create independent guards. They are shared per process without locking;
under concurrent requests their bounds are best-effort.
"""
import time
from typing import Callable, Dict, List, Optional, Tuple

from proofline.config import settings
from proofline.services.fingerprint import fingerprint, normalize_query
from proofline.utils.logger import get_logger

logger = get_logger("services.query_guard")


class SlidingWindowRateLimiter:
    """
    Sliding-window limiter over recent call timestamps.

    Unlike a blocking limiter, callers that are over the limit are expected to
    degrade (return an empty result) rather than wait.

    Usage:
        limiter = SlidingWindowRateLimiter()
        if limiter.is_rate_limited():
            return []
        limiter.record()
        ...call upstream...
    """

    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Max accepted calls per window (defaults to config)
            window_seconds: Window length in seconds (defaults to config)
            clock: Monotonic time source in seconds
        """
        self.max_requests = max_requests or settings.CORRECTION_RATE_LIMIT_REQUESTS
        self.window_seconds = window_seconds or settings.CORRECTION_RATE_LIMIT_WINDOW
        self._clock = clock
        self._timestamps: List[float] = []

        logger.info(
            "Initialized sliding window rate limiter",
            max_requests=self.max_requests,
            window_seconds=self.window_seconds
        )

    def _purge(self, now: float) -> None:
        """Drop timestamps that fell out of the window."""
        self._timestamps = [ts for ts in self._timestamps if now - ts < self.window_seconds]

    def is_rate_limited(self) -> bool:
        """
        Check whether another call would exceed the limit.

        Returns:
            True if the window already holds max_requests calls
        """
        self._purge(self._clock())

        if len(self._timestamps) >= self.max_requests:
            logger.warning(
                "Correction rate limit reached, throttling requests",
                request_count=len(self._timestamps),
                window_seconds=self.window_seconds,
                limit=self.max_requests
            )
            return True

        return False

    def record(self) -> None:
        """Record an accepted call at the current time."""
        self._timestamps.append(self._clock())

    @property
    def current_count(self) -> int:
        """Number of calls inside the window right now."""
        self._purge(self._clock())
        return len(self._timestamps)


class RecentQueryCache:
    """
    Short-lived map from normalized request text to the provider response.

    Keys are fingerprints of ``normalize_query(text)``, so texts that differ
    only in case or spacing share an entry.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime (defaults to config, 10 minutes)
            max_entries: Size above which the oldest half is evicted (defaults to config)
            clock: Monotonic time source in seconds
        """
        self.ttl_seconds = ttl_seconds or settings.RECENT_QUERY_TTL_SECONDS
        self.max_entries = max_entries or settings.RECENT_QUERY_MAX_ENTRIES
        self._clock = clock
        self._entries: Dict[str, Tuple[object, float]] = {}

    @staticmethod
    def key_for(text: str) -> str:
        """Dedup key for a request text."""
        return fingerprint(normalize_query(text))

    def _cleanup(self) -> None:
        """Drop expired entries, then the oldest half if still over capacity."""
        now = self._clock()
        expired = [key for key, (_, ts) in self._entries.items() if now - ts > self.ttl_seconds]
        for key in expired:
            del self._entries[key]

        if len(self._entries) > self.max_entries:
            by_age = sorted(self._entries.items(), key=lambda item: item[1][1])
            to_remove = by_age[:len(by_age) // 2]
            for key, _ in to_remove:
                del self._entries[key]

            logger.info(
                "Recent query cache over capacity, evicted oldest half",
                removed=len(to_remove),
                remaining=len(self._entries)
            )

    def get(self, text: str) -> Optional[object]:
        """
        Look up a recent response for text.

        Returns:
            Cached response, or None when absent or expired
        """
        self._cleanup()
        entry = self._entries.get(self.key_for(text))
        if entry is None:
            return None

        logger.info("Using recently cached correction result")
        return entry[0]

    def put(self, text: str, response: object) -> None:
        """Store the provider response for text."""
        self._entries[self.key_for(text)] = (response, self._clock())
        self._cleanup()

    def __len__(self) -> int:
        return len(self._entries)
