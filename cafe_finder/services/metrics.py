import threading

from cafe_finder.models.cafe_model import MetricsSnapshot


class PerformanceTracker:
    """Process-lifetime counters behind GET /api/cafes/metrics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.total_requests = 0
        self.cache_hits = 0
        self.errors = 0
        self._served = 0
        self._total_response_ms = 0.0

    def record_request(self, response_time_ms: float, cache_hit: bool) -> None:
        with self._lock:
            self.total_requests += 1
            self._served += 1
            self._total_response_ms += response_time_ms
            if cache_hit:
                self.cache_hits += 1

    def record_error(self) -> None:
        with self._lock:
            self.total_requests += 1
            self.errors += 1

    def snapshot(self, cache_size: int = 0) -> MetricsSnapshot:
        with self._lock:
            served = self._served
            return MetricsSnapshot(
                total_requests=self.total_requests,
                cache_hit_rate=self.cache_hits / served if served else 0.0,
                avg_response_time=self._total_response_ms / served if served else 0.0,
                error_rate=self.errors / self.total_requests if self.total_requests else 0.0,
                cache_size=cache_size,
            )
