"""In-process HTTP metrics and the middleware that records them."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from guardmw.access_log import StatusRecorder
from guardmw.http import Handler, Request, ResponseWriter

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class Counter:
    """A monotonically increasing value."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.value = 0.0

    def inc(self) -> None:
        with self._lock:
            self.value += 1


class Gauge:
    """A value that can go up and down."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.value = 0.0

    def inc(self) -> None:
        with self._lock:
            self.value += 1

    def dec(self) -> None:
        with self._lock:
            self.value -= 1


class Histogram:
    """Counts observations into cumulative buckets."""

    def __init__(self, buckets: Sequence[float] = DEFAULT_BUCKETS) -> None:
        self._lock = threading.Lock()
        self.buckets = tuple(sorted(buckets))
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0

    def observe(self, value: float) -> None:
        with self._lock:
            self.count += 1
            self.sum += value
            self.bucket_counts = [
                n + (value <= bound) for n, bound in zip(self.bucket_counts, self.buckets)
            ]


class _Vec:
    def __init__(self, label_names: Sequence[str], factory: Callable[[], object]) -> None:
        self.label_names = tuple(label_names)
        self._factory = factory
        self._children: dict[tuple[str, ...], object] = {}
        self._lock = threading.Lock()

    def labels(self, *args: str):
        if len(args) != len(self.label_names):
            raise ValueError(f"expected {len(self.label_names)} label values, got {len(args)}")
        with self._lock:
            child = self._children.get(args)
            if child is None:
                child = self._factory()
                self._children[args] = child
            return child


class CounterVec(_Vec):
    """Counters keyed by label values."""

    def __init__(self, label_names: Sequence[str]) -> None:
        super().__init__(label_names, Counter)

    def labels(self, *args: str) -> Counter:
        return super().labels(*args)


class HistogramVec(_Vec):
    """Histograms keyed by label values."""

    def __init__(self, label_names: Sequence[str], buckets: Sequence[float] = DEFAULT_BUCKETS) -> None:
        super().__init__(label_names, lambda: Histogram(buckets))

    def labels(self, *args: str) -> Histogram:
        return super().labels(*args)


@dataclass
class HTTPMetrics:
    http_requests_total: CounterVec = field(
        default_factory=lambda: CounterVec(("method", "path", "status"))
    )
    http_request_duration: HistogramVec = field(
        default_factory=lambda: HistogramVec(("method", "path"))
    )
    http_requests_in_flight: Gauge = field(default_factory=Gauge)


def metrics(collector: HTTPMetrics | None) -> Callable[[Handler], Handler]:
    """Record request counts, durations and in-flight requests."""

    def middleware(next_handler: Handler) -> Handler:
        if collector is None:
            return next_handler

        def handler(writer: ResponseWriter, request: Request) -> None:
            collector.http_requests_in_flight.inc()
            try:
                start = time.perf_counter()
                recorder = StatusRecorder(writer)
                next_handler(recorder, request)
                duration = time.perf_counter() - start
                collector.http_requests_total.labels(
                    request.method, request.path, str(recorder.status)
                ).inc()
                collector.http_request_duration.labels(request.method, request.path).observe(duration)
            finally:
                collector.http_requests_in_flight.dec()

        return handler

    return middleware