"""Per-client token bucket rate limiting."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from guardmw.http import Handler, Request, ResponseWriter

Clock = Callable[[], float]


class TokenBucket:
    """Token bucket refilled at ``rate`` per second up to ``burst`` tokens."""

    def __init__(self, rate: float, burst: int, clock: Clock = time.monotonic) -> None:
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def _advance(self) -> None:
        now = self._clock()
        self._tokens = min(float(self.burst), self._tokens + max(0.0, now - self._last) * self.rate)
        self._last = now

    def allow(self) -> bool:
        """Take one token if available."""
        with self._lock:
            self._advance()
            if self._tokens < 1.0:
                return False
            self._tokens -= 1.0
            return True

    def tokens(self) -> float:
        with self._lock:
            self._advance()
            return self._tokens


class RateLimiter:
    """Holds one token bucket per key and prunes idle ones every minute."""

    def __init__(
        self,
        requests_per_second: float,
        burst: int,
        cleanup_interval: float = 60.0,
        clock: Clock = time.monotonic,
    ) -> None:
        self.rps = float(requests_per_second)
        self.burst = burst
        self.limiters: dict[str, TokenBucket] = {}
        self._clock = clock
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._interval = cleanup_interval
        threading.Thread(target=self._run_cleanup, daemon=True).start()

    def get_limiter(self, key: str) -> TokenBucket:
        with self._lock:
            if key not in self.limiters:
                self.limiters[key] = TokenBucket(self.rps, self.burst, self._clock)
            return self.limiters[key]

    def cleanup_stale_entries(self) -> None:
        """Drop buckets that are full again, i.e. unused lately."""
        with self._lock:
            for key in [k for k, b in self.limiters.items() if b.tokens() == float(self.burst)]:
                del self.limiters[key]

    def _run_cleanup(self) -> None:
        while not self._stop.wait(self._interval):
            self.cleanup_stale_entries()

    def close(self) -> None:
        """Stop the background cleanup."""
        self._stop.set()


def rate_limit(limiter: RateLimiter) -> Callable[[Handler], Handler]:
    """Answer 429 once a client address has used up its tokens."""

    def middleware(next_handler: Handler) -> Handler:
        def handler(writer: ResponseWriter, request: Request) -> None:
            if limiter.get_limiter(request.remote_addr).allow():
                next_handler(writer, request)
                return
            writer.headers.set("Content-Type", "application/json")
            writer.write_header(429)
            writer.write('{"error":"Rate limit exceeded","code":"RATE_LIMIT_EXCEEDED"}')

        return handler

    return middleware