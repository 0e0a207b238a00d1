"""Metrics collection for bridge invocations."""

import threading
import time
from typing import Dict, Any, List
from collections import defaultdict


class MetricsCollector:
    """
    Collects per-operation timings and outcome counters.
    Implements IMetricsCollector protocol.

    Concurrent invocations share one collector, so every mutation is
    taken under a lock.
    """

    def __init__(self):
        self._start_time = time.time()
        self._metrics: Dict[str, List[Any]] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def record_metric(self, name: str, value: Any) -> None:
        """Record a metric value."""
        with self._lock:
            self._metrics[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        with self._lock:
            self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        with self._lock:
            return self._counters.get(name, 0)

    def get_metric(self, name: str) -> List[Any]:
        """Get all values for a metric."""
        with self._lock:
            return list(self._metrics.get(name, []))

    def elapsed_time(self) -> float:
        """Get total elapsed time since start."""
        return time.time() - self._start_time

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of all metrics.

        Returns:
            Dictionary with counters, per-metric count/total/min/max/avg and
            elapsed time
        """
        with self._lock:
            summary: Dict[str, Any] = {
                'elapsed_seconds': self.elapsed_time(),
                'counters': dict(self._counters),
                'metrics': {},
            }
            for name, values in self._metrics.items():
                numeric = [v for v in values if isinstance(v, (int, float))]
                if not numeric:
                    continue
                summary['metrics'][name] = {
                    'count': len(numeric),
                    'total': sum(numeric),
                    'min': min(numeric),
                    'max': max(numeric),
                    'avg': sum(numeric) / len(numeric),
                }
        return summary

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self._start_time = time.time()
            self._metrics.clear()
            self._counters.clear()
