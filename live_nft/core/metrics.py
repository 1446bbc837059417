"""
Prometheus Metrics for Observability

Tracks run outcomes, per-stage latency and chain spend. The cron mode can
expose them over HTTP for scraping (see METRICS_PORT).
"""

import time
from contextlib import contextmanager
from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    start_http_server,
    REGISTRY
)

# =============================================================================
# Metrics Definitions
# =============================================================================

runs_total = Counter(
    "live_nft_runs_total",
    "Total number of runs per mode",
    labelnames=["mode", "status"]
)

stage_latency_seconds = Histogram(
    "live_nft_stage_latency_seconds",
    "Time spent in each pipeline stage",
    labelnames=["stage", "status"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0]
)

last_success_timestamp = Gauge(
    "live_nft_last_success_timestamp",
    "Unix time of the last successful token update"
)

update_cost_gauge = Gauge(
    "live_nft_update_cost",
    "Chain balance spent by the last token update"
)

app_info = Info(
    "live_nft_app",
    "Application information"
)


# =============================================================================
# Helper Functions
# =============================================================================

def set_app_info(version: str, environment: str):
    """Set application info metric."""
    app_info.info({
        "version": version,
        "environment": environment
    })


@contextmanager
def track_stage_latency(stage: str):
    """
    Context manager to track stage latency.

    Usage:
        with track_stage_latency("upload"):
            # do work
    """
    start = time.time()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        duration = time.time() - start
        stage_latency_seconds.labels(stage=stage, status=status).observe(duration)


def record_run(mode: str, status: str):
    """Record the outcome of one run."""
    runs_total.labels(mode=mode, status=status).inc()


def record_token_update(cost: float, timestamp: Optional[float] = None):
    """Record a successful token update and what it cost."""
    update_cost_gauge.set(cost)
    last_success_timestamp.set(timestamp if timestamp is not None else time.time())


def start_metrics_server(port: int):
    """Expose metrics over HTTP for the long-running cron mode."""
    start_http_server(port)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest(REGISTRY)
