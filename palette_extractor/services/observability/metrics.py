"""
Observability metrics collection for the palette extraction pipeline.

Times each pipeline stage, keeps a bounded in-process history and exposes
aggregated per-operation statistics.
"""

import time
import threading
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, List

import numpy as np
import psutil
from loguru import logger


@dataclass
class PerformanceMetrics:
    """Performance metrics for one pipeline operation."""
    operation_name: str
    duration_ms: float
    memory_usage_mb: float
    pixel_count: int
    color_count: int
    timestamp: float
    error: Optional[str] = None


class MetricsCollector:
    """Thread-safe metrics collector for palette operations."""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self._lock = threading.Lock()
        self._metrics_history: deque = deque(maxlen=max_history)
        self._operation_counts = defaultdict(int)
        self._error_counts = defaultdict(int)
        self._durations = defaultdict(lambda: deque(maxlen=100))

    def record_performance(self, metrics: PerformanceMetrics) -> None:
        """Record performance metrics for an operation."""
        with self._lock:
            self._metrics_history.append(metrics)
            self._operation_counts[metrics.operation_name] += 1
            if metrics.error:
                self._error_counts[metrics.operation_name] += 1
            self._durations[metrics.operation_name].append(metrics.duration_ms)

    def _operation_stats(self, operation_name: str) -> Dict[str, Any]:
        durations = list(self._durations.get(operation_name, ()))
        if not durations:
            return {}

        calls = self._operation_counts[operation_name]
        return {
            'operation_name': operation_name,
            'total_calls': calls,
            'error_count': self._error_counts[operation_name],
            'error_rate': self._error_counts[operation_name] / max(1, calls),
            'duration_stats': {
                'mean_ms': float(np.mean(durations)),
                'median_ms': float(np.median(durations)),
                'p95_ms': float(np.percentile(durations, 95)),
                'min_ms': float(np.min(durations)),
                'max_ms': float(np.max(durations))
            }
        }

    def get_operation_stats(self, operation_name: str) -> Dict[str, Any]:
        """Get aggregated statistics for a specific operation."""
        with self._lock:
            return self._operation_stats(operation_name)

    def get_all_stats(self) -> Dict[str, Any]:
        """Get aggregated statistics for all operations."""
        with self._lock:
            total_calls = sum(self._operation_counts.values())
            total_errors = sum(self._error_counts.values())
            return {
                'operations': {name: self._operation_stats(name) for name in self._operation_counts},
                'total_operations': total_calls,
                'total_errors': total_errors,
                'overall_error_rate': total_errors / max(1, total_calls)
            }

    def get_recent_metrics(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Get the most recent performance metrics."""
        with self._lock:
            recent = list(self._metrics_history)[-limit:]
            return [asdict(metric) for metric in recent]

    def reset(self) -> None:
        """Drop all recorded metrics."""
        with self._lock:
            self._metrics_history.clear()
            self._operation_counts.clear()
            self._error_counts.clear()
            self._durations.clear()


# Global metrics collector instance
_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return _metrics_collector


def reset_metrics() -> None:
    """Reset global metrics (for testing)."""
    _metrics_collector.reset()


@contextmanager
def performance_monitor(operation_name: str, pixel_count: int = 0, color_count: int = 0):
    """Context manager for monitoring performance of operations."""
    start_time = time.time()
    start_memory = psutil.Process().memory_info().rss / 1024 / 1024  # MB

    error_msg = None

    try:
        yield
    except Exception as e:
        error_msg = str(e)
        raise
    finally:
        end_time = time.time()
        end_memory = psutil.Process().memory_info().rss / 1024 / 1024  # MB

        metrics = PerformanceMetrics(
            operation_name=operation_name,
            duration_ms=(end_time - start_time) * 1000,
            memory_usage_mb=max(end_memory, start_memory),
            pixel_count=pixel_count,
            color_count=color_count,
            timestamp=end_time,
            error=error_msg
        )

        _metrics_collector.record_performance(metrics)

        if error_msg:
            logger.error(f"Operation {operation_name} failed after {metrics.duration_ms:.1f}ms: {error_msg}")
        else:
            logger.info(f"Operation {operation_name} completed in {metrics.duration_ms:.1f}ms "
                        f"(memory: {metrics.memory_usage_mb:.1f}MB)")
