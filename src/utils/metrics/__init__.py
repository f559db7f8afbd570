"""
Prometheus metrics for replication runs

Replication runs are short-lived CLI invocations, so metrics are written to
a text file for the node exporter textfile collector instead of being served
over HTTP.

Usage:
    from utils.metrics import ReplicationMetrics, write_metrics_file

    registry = CollectorRegistry()
    metrics = ReplicationMetrics(registry=registry)
    diff = compute_diff(items, inventory, DiffOptions(metrics=metrics))
    write_metrics_file("/var/lib/node_exporter/replication.prom", registry)
"""

from .registry import get_or_create_metric, write_metrics_file
from .replication import ReplicationMetrics

__all__ = [
    "ReplicationMetrics",
    "get_or_create_metric",
    "write_metrics_file",
]
