"""Performance monitoring utilities for the labor analytics engines."""
import time
import logging
import threading
import functools
import inspect
from typing import Any, Callable, Dict

logger = logging.getLogger("shiftguard-api.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time for synchronous functions.

    Usage::

        @timed
        def aggregate_lost_hours(shifts, rules):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(
                "function timed",
                extra={
                    "function": func.__qualname__,
                    "duration_ms": duration_ms,
                },
            )
    return wrapper


class ReportTracker:
    """
    Thread-safe in-memory tracker for report-level metrics.

    Tracks, per report kind (``lost_hours``, ``trends``, ...):
    - number of reports computed
    - number of shift records consumed
    - cumulative and average computation time
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._reports: Dict[str, int] = {}
        self._records: Dict[str, int] = {}
        self._durations_ms: Dict[str, float] = {}

    def record_report(self, kind: str, record_count: int, duration_ms: float) -> None:
        """Call once per computed report."""
        with self._lock:
            self._reports[kind] = self._reports.get(kind, 0) + 1
            self._records[kind] = self._records.get(kind, 0) + record_count
            self._durations_ms[kind] = self._durations_ms.get(kind, 0.0) + duration_ms

    def get_metrics(self) -> Dict[str, Any]:
        """
        Return a snapshot of all collected metrics.

        Returns
        -------
        dict with keys:
            reports_computed      : int   (total across kinds)
            by_kind               : dict  {kind: {reports, records, avg_duration_ms}}
        """
        with self._lock:
            by_kind: Dict[str, Dict[str, Any]] = {}
            for kind, count in self._reports.items():
                by_kind[kind] = {
                    "reports": count,
                    "records": self._records.get(kind, 0),
                    "avg_duration_ms": round(self._durations_ms.get(kind, 0.0) / count, 2),
                }
            return {
                "reports_computed": sum(self._reports.values()),
                "by_kind": by_kind,
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._reports.clear()
            self._records.clear()
            self._durations_ms.clear()


def tracked(kind: str) -> Callable:
    """
    Decorator for engine entry points whose first argument is a record
    collection: times the call and records it on the module-level tracker.
    """
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)
        first_param = next(iter(signature.parameters))

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            result = func(*args, **kwargs)
            records = signature.bind(*args, **kwargs).arguments.get(first_param)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            try:
                count = len(records)
            except TypeError:
                count = 0
            tracker.record_report(kind, count, duration_ms)
            logger.debug(
                "report computed",
                extra={"report_kind": kind, "shift_count": count, "duration_ms": duration_ms},
            )
            return result
        return wrapper
    return decorator


# Module-level singleton — import this instance everywhere else.
tracker = ReportTracker()
