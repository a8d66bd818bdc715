"""Performance monitoring for calculator mutations."""
import threading
import logging
from typing import Any, Dict

logger = logging.getLogger("sitecalc-api.perf")


class PerformanceTracker:
    """
    Thread-safe in-memory tracker for mutation-level metrics.

    Tracks:
    - Total mutations applied, and per operation
    - Average load → apply → save duration per operation
    - Error count broken down by operation
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._durations: Dict[str, list] = {}   # operation -> [duration_ms, ...]
        self._error_counts: Dict[str, int] = {}  # operation -> count

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def record_mutation(self, operation: str, duration_ms: float) -> None:
        """Call once per mutation that was applied and saved."""
        with self._lock:
            self._durations.setdefault(operation, []).append(duration_ms)

    def record_error(self, operation: str) -> None:
        with self._lock:
            self._error_counts[operation] = self._error_counts.get(operation, 0) + 1

    # ------------------------------------------------------------------
    # Public read API
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns
        -------
        dict with keys:
            mutations_applied         : int
            mutations_by_operation    : dict  {operation: count}
            avg_duration_ms           : dict  {operation: avg_ms}
            error_count               : int   (total across all operations)
            error_count_by_operation  : dict  {operation: count}
        """
        with self._lock:
            counts = {op: len(d) for op, d in self._durations.items()}
            avgs = {
                op: round(sum(d) / len(d), 2) if d else 0.0
                for op, d in self._durations.items()
            }
            return {
                "mutations_applied": sum(counts.values()),
                "mutations_by_operation": counts,
                "avg_duration_ms": avgs,
                "error_count": sum(self._error_counts.values()),
                "error_count_by_operation": dict(self._error_counts),
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._durations.clear()
            self._error_counts.clear()


# Module-level singleton; import this instance everywhere else.
tracker = PerformanceTracker()
