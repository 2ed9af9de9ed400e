"""
Resolution metrics.

Tracks cache hits, builds, build timings and failures per container.
"""

import time
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from collections import defaultdict
from .logging_config import get_logger

logger = get_logger(__name__)

CACHE_HITS = 'container.cache_hits'
BUILDS = 'container.builds'
BUILD = 'container.build'
GET = 'container.get'


@dataclass
class Metric:
    """Single metric value."""
    name: str
    value: float
    timestamp: float = field(default_factory=time.time)
    tags: Dict[str, str] = field(default_factory=dict)


class MetricsCollector:
    """
    Collects counters, timings and error counts.

    A container given a collector reports under the ``container.*`` names
    defined in this module; error tags carry the exception class name.
    """

    def __init__(self):
        self.counters: Dict[str, int] = defaultdict(int)
        self.timings: Dict[str, List[float]] = defaultdict(list)
        self.errors: Dict[str, int] = defaultdict(int)
        self.metrics: List[Metric] = []

    def increment(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """
        Increment a counter metric.

        Args:
            name: Metric name
            value: Increment value
            tags: Optional tags
        """
        self.counters[name] += value
        self.metrics.append(Metric(name=f"{name}_count", value=value, tags=tags or {}))

    def record_timing(self, name: str, duration: float, tags: Optional[Dict[str, str]] = None):
        """
        Record a timing metric.

        Args:
            name: Metric name
            duration: Duration in seconds
            tags: Optional tags, e.g. the service identifier
        """
        self.timings[name].append(duration)
        self.metrics.append(Metric(name=f"{name}_duration", value=duration, tags=tags or {}))

    def record_error(self, name: str, error_type: str = "unknown"):
        """
        Record an error.

        Args:
            name: Operation name
            error_type: Exception class name
        """
        self.errors[f"{name}:{error_type}"] += 1
        self.increment(f"{name}_errors", tags={"error_type": error_type})

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self.counters.get(name, 0)

    def get_avg_timing(self, name: str) -> Optional[float]:
        """Get average timing for a metric."""
        timings = self.timings.get(name, [])
        if not timings:
            return None
        return sum(timings) / len(timings)

    def get_error_count(self, name: str, error_type: Optional[str] = None) -> int:
        """Get error count for an operation, optionally for one error type."""
        if error_type is not None:
            return self.errors.get(f"{name}:{error_type}", 0)
        return sum(count for key, count in self.errors.items() if key.startswith(f"{name}:"))

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of all metrics."""
        return {
            'counters': dict(self.counters),
            'avg_timings': {
                name: self.get_avg_timing(name)
                for name in self.timings.keys()
            },
            'errors': dict(self.errors),
            'total_metrics': len(self.metrics)
        }

    def log_summary(self):
        """Log the summary at INFO level."""
        summary = self.get_summary()
        logger.info(
            f"Resolution metrics: {summary['counters'].get(BUILDS, 0)} builds, "
            f"{summary['counters'].get(CACHE_HITS, 0)} cache hits, "
            f"{sum(summary['errors'].values())} errors"
        )

    def reset(self):
        """Reset all metrics."""
        self.counters.clear()
        self.timings.clear()
        self.errors.clear()
        self.metrics.clear()


class Timer:
    """
    Context manager for timing operations.

    Usage:
        with Timer(BUILD, collector, {'service': service_id}):
            # build the service
    """

    def __init__(self, name: str, collector: Optional[MetricsCollector] = None, tags: Optional[Dict[str, str]] = None):
        self.name = name
        self.collector = collector
        self.tags = tags or {}
        self.start_time: Optional[float] = None

    def __enter__(self):
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timing and record metric, also when the build failed."""
        if self.start_time is not None and self.collector:
            self.collector.record_timing(self.name, self.elapsed(), self.tags)
        return False

    def elapsed(self) -> float:
        """Get elapsed time."""
        if self.start_time is not None:
            return time.perf_counter() - self.start_time
        return 0.0
