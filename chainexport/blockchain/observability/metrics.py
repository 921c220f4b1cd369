# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics for genesis exports.

Metrics:
- Export runs by path and outcome
- Export duration
- Size of the last written genesis
"""

from prometheus_client import Counter, Gauge, Histogram, CollectorRegistry

# Create registry for metrics
metrics_registry = CollectorRegistry()

exports_total = Counter(
    'chainexport_exports_total',
    'Total number of export runs',
    ['path', 'outcome'],
    registry=metrics_registry
)

export_duration_seconds = Histogram(
    'chainexport_export_duration_seconds',
    'Wall time of an export run in seconds',
    buckets=[0.1, 0.5, 1, 5, 15, 60, 300, 900],
    registry=metrics_registry
)

genesis_bytes_written = Gauge(
    'chainexport_genesis_bytes_written',
    'Size in bytes of the last genesis document written',
    registry=metrics_registry
)


def record_export(path: str, outcome: str, duration: float, bytes_written: int = 0):
    """
    Record one export run.

    Args:
        path: Export path taken (verbatim_copy / delegated_export / unknown)
        outcome: "success" or the error class name
        duration: Run time in seconds
        bytes_written: Output size (successful runs only)
    """
    exports_total.labels(path=path, outcome=outcome).inc()
    export_duration_seconds.observe(duration)
    if outcome == "success":
        genesis_bytes_written.set(bytes_written)
