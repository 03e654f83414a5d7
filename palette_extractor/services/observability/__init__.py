"""
Observability module for the palette extraction pipeline.
"""

from .metrics import (
    PerformanceMetrics,
    MetricsCollector,
    get_metrics_collector,
    performance_monitor,
    reset_metrics
)

__all__ = [
    'PerformanceMetrics',
    'MetricsCollector',
    'get_metrics_collector',
    'performance_monitor',
    'reset_metrics'
]
