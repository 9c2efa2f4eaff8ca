"""Step timing and counters for a Bookflow run."""

import time
from typing import Dict, Any, List
from collections import defaultdict


class MetricsCollector:
    """
    Collects timings and counters for the workflow steps.
    Implements IMetricsCollector protocol.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._start_time = clock()
        self._timers: Dict[str, float] = {}
        self._metrics: Dict[str, List[Any]] = defaultdict(list)
        self._counters: Dict[str, int] = defaultdict(int)

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        self._timers[name] = self._clock()

    def stop_timer(self, name: str) -> float:
        """
        Stop a named timer and return elapsed time.

        Args:
            name: Timer name

        Returns:
            Elapsed time in seconds

        Raises:
            KeyError: If timer was not started
        """
        if name not in self._timers:
            raise KeyError(f"Timer '{name}' was not started")

        elapsed = self._clock() - self._timers.pop(name)
        self.record_metric(f"{name}_duration", elapsed)
        return elapsed

    def record_metric(self, name: str, value: Any) -> None:
        """Record a metric value."""
        self._metrics[name].append(value)

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_metric(self, name: str) -> list:
        return self._metrics.get(name, [])

    def get_summary(self) -> Dict[str, Any]:
        """
        Get summary of all metrics.

        Numeric series are reduced to count/sum/min/max, anything else
        is listed as recorded.
        """
        summary = {
            "total_elapsed": self.elapsed_time(),
            "counters": dict(self._counters),
            "metrics": {}
        }

        for name, values in self._metrics.items():
            if not values:
                continue
            if all(isinstance(v, (int, float)) for v in values):
                summary["metrics"][name] = {
                    "count": len(values),
                    "sum": sum(values),
                    "min": min(values),
                    "max": max(values),
                }
            else:
                summary["metrics"][name] = {"count": len(values), "values": list(values)}

        return summary

    def elapsed_time(self) -> float:
        """Get total elapsed time since initialization."""
        return self._clock() - self._start_time
