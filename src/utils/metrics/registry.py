"""
Registry helpers shared by the metric classes.

Provides safe metric registration and text file export for short-lived
processes that are not scraped over HTTP.
"""

import logging
import os
from typing import Callable, TypeVar

from prometheus_client import CollectorRegistry, REGISTRY, write_to_textfile

logger = logging.getLogger(__name__)

# Type variable for metric types
T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Create a metric or return the one already registered under its name.

    Args:
        metric_factory: Callable that creates the metric (e.g., lambda: Counter(...))
        metric_name: Name of the metric for lookup if already registered
        registry: Prometheus registry to use (default: global REGISTRY)

    Returns:
        The metric instance (either newly created or existing)

    Example:
        RUNS_TOTAL = get_or_create_metric(
            lambda: Counter("runs_total", "Total runs", ["status"]),
            "runs_total"
        )
    """
    try:
        return metric_factory()
    except ValueError:
        # Metric already registered, get existing one
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        raise


def write_metrics_file(
    path: str,
    registry: CollectorRegistry = REGISTRY,
) -> None:
    """
    Write the registry to a Prometheus text file.

    The file is written atomically, so a collector never reads a partial
    file.

    Args:
        path: Output path (conventionally ending in ``.prom``)
        registry: Registry to export (default: global REGISTRY)
    """
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    write_to_textfile(path, registry)
    logger.info(f"Metrics written to {path}")
