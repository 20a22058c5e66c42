"""Per-client gateway request counters (diagnostics only)."""
import time
from collections.abc import MutableMapping
from threading import Lock


class ClientStats:
    def __init__(self) -> None:
        self._start_time = time.monotonic()
        self._counts: MutableMapping[str, int] = {}
        self._lock = Lock()

    def record_request(self, resource: str) -> None:
        with self._lock:
            self._counts[resource] = self._counts.get(resource, 0) + 1

    def total_requests(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    def snapshot(self) -> dict:
        with self._lock:
            counts = dict(self._counts)
        uptime_seconds = time.monotonic() - self._start_time
        return {
            "requests_total": sum(counts.values()),
            "requests_by_resource": counts,
            "uptime_seconds": round(uptime_seconds, 1),
        }
