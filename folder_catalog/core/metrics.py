# Copyright (c) 2026 TempoOS Contributors. All Rights Reserved.

"""
Metrics — In-memory counters and latency windows for the catalog.

Store adapters wrap each round-trip in ``track(operation)``, which counts
the call, counts it again as an error if it raises, and records its
latency. The HTTP layer counts responses by status class.
"""

from __future__ import annotations

import time
from collections import Counter, defaultdict, deque
from contextlib import contextmanager
from typing import Any, Deque, Dict, Iterator

LATENCY_WINDOW = 1000


def _percentile(ordered: list, fraction: float) -> float:
    index = min(len(ordered) - 1, int(round(fraction * (len(ordered) - 1))))
    return ordered[index]


class Metrics:
    """Counters plus a sliding window of latencies per name, in milliseconds."""

    def __init__(self, window: int = LATENCY_WINDOW):
        self._window = window
        self._counters: Counter = Counter()
        self._latencies: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=self._window))
        self._started = time.monotonic()

    def inc(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def observe(self, name: str, value_ms: float) -> None:
        self._latencies[name].append(value_ms)

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Count and time one store round-trip."""
        self.inc(f"store_call:{operation}")
        start = time.perf_counter()
        try:
            yield
        except Exception:
            self.inc(f"store_error:{operation}")
            raise
        finally:
            self.observe(f"store_latency:{operation}", (time.perf_counter() - start) * 1000)

    def reset(self) -> None:
        self._counters.clear()
        self._latencies.clear()

    def snapshot(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "uptime_seconds": round(time.monotonic() - self._started, 1),
            "counters": dict(self._counters),
        }
        for name, window in self._latencies.items():
            if not window:
                continue
            ordered = sorted(window)
            result[f"histogram_{name}"] = {
                "count": len(ordered),
                "avg": round(sum(ordered) / len(ordered), 2),
                "p50": round(_percentile(ordered, 0.5), 2),
                "p95": round(_percentile(ordered, 0.95), 2),
                "max": round(ordered[-1], 2),
            }
        return result


catalog_metrics = Metrics()
