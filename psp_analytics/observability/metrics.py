"""
Prometheus metrics for psp-analytics

Tracks ingestion volume, journey reconstruction outcomes and the duration
of each analysis pass. Metrics live in a dedicated registry so importing
the package never touches the process-wide default registry.
"""
import os
from pathlib import Path
from typing import Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()


# =======================
# INGESTION METRICS
# =======================

transactions_ingested_total = Counter(
    name="psp_transactions_ingested_total",
    documentation="Total number of transaction rows handed to the analysis",
    registry=REGISTRY,
)

attempts_defaulted_total = Counter(
    name="psp_attempts_defaulted_total",
    documentation="Attempts whose field was missing and resolved to a default",
    labelnames=["field"],  # field: psp_name, country, status, order_key, processing_date
    registry=REGISTRY,
)

# =======================
# JOURNEY METRICS
# =======================

journeys_built_total = Counter(
    name="psp_journeys_built_total",
    documentation="Total number of journeys reconstructed",
    labelnames=["status"],  # status: success, failed
    registry=REGISTRY,
)

exclusion_recalculations_total = Counter(
    name="psp_exclusion_recalculations_total",
    documentation="Total number of what-if recalculations with excluded PSPs",
    registry=REGISTRY,
)

weighted_success_rate = Gauge(
    name="psp_weighted_success_rate",
    documentation="Weighted success rate of the latest analysis",
    labelnames=["view"],  # view: psp_level, transaction_level
    registry=REGISTRY,
)

# =======================
# ANALYSIS PASS METRICS
# =======================

analysis_pass_duration_seconds = Histogram(
    name="psp_analysis_pass_duration_seconds",
    documentation="Time spent in each analysis pass in seconds",
    labelnames=["pass_name"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def write_metrics(path: str) -> None:
    """
    Write the current metrics to a file in Prometheus text format

    The file is replaced atomically.

    Args:
        path: Destination file, usually ending in .prom
    """
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    tmp.write_bytes(generate_metrics())
    tmp.replace(target)


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Imported lazily so the HTTP server module only loads when requested
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


class track_duration:
    """
    Context manager observing the duration of a block in a histogram

    Usage:
        with track_duration(analysis_pass_duration_seconds, pass_name="psp_metrics"):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        metric = self.histogram.labels(**self.labels) if self.labels else self.histogram
        self.timer = metric.time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if value <= 0:
        return
    metric = counter.labels(**labels) if labels else counter
    metric.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """Set a gauge metric value"""
    metric = gauge.labels(**labels) if labels else gauge
    metric.set(value)


def get_sample_value(name: str, labels: dict[str, str] | None = None) -> float:
    """
    Read the current value of a sample from the package registry

    Returns 0.0 when the sample has not been recorded yet.
    """
    value = REGISTRY.get_sample_value(name, labels or {})
    return value if value is not None else 0.0


# =======================
# ANALYSIS HELPERS
# =======================

def record_journeys_built(
    transaction_count: int,
    successful_journeys: int,
    failed_journeys: int,
    defaulted_fields: dict[str, int],
) -> None:
    """
    Record the outcome of one journey reconstruction.

    Args:
        transaction_count: Transaction rows consumed
        successful_journeys: Journeys with at least one approving attempt
        failed_journeys: Journeys without an approving attempt
        defaulted_fields: Count of defaulted values per field name
    """
    increment_counter(transactions_ingested_total, transaction_count)
    increment_counter(journeys_built_total, successful_journeys, status="success")
    increment_counter(journeys_built_total, failed_journeys, status="failed")
    for field, count in defaulted_fields.items():
        increment_counter(attempts_defaulted_total, count, field=field)
