"""
Metrics for replication diff runs.

Tracks diff runs, the operations and conflicts they produce, and how long
they take, so drift between the source of truth and the ledger can be
alerted on.
"""

import logging
import time
from typing import TYPE_CHECKING, Optional

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CollectorRegistry,
    REGISTRY,
)

from ocf.entity_types import normalize_entity_type

from .registry import get_or_create_metric

if TYPE_CHECKING:
    from replication.diff import ReplicationDiff

logger = logging.getLogger(__name__)


class ReplicationMetrics:
    """
    Metrics for replication diff computation

    Metrics are looked up on the registry when they already exist, so
    several instances can share one registry.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        Initialize replication metrics

        Args:
            registry: Custom Prometheus registry (default: global REGISTRY)
        """
        self.registry = registry or REGISTRY

        self.diff_runs_total = get_or_create_metric(
            lambda: Counter(
                "replication_diff_runs_total",
                "Total number of replication diff runs",
                ["status"],
                registry=self.registry,
            ),
            "replication_diff_runs_total",
            self.registry,
        )

        self.diff_duration_seconds = get_or_create_metric(
            lambda: Histogram(
                "replication_diff_duration_seconds",
                "Duration of replication diff computation in seconds",
                buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30),
                registry=self.registry,
            ),
            "replication_diff_duration_seconds",
            self.registry,
        )

        self.last_run_timestamp = get_or_create_metric(
            lambda: Gauge(
                "replication_last_run_timestamp",
                "Timestamp of the last replication diff run",
                registry=self.registry,
            ),
            "replication_last_run_timestamp",
            self.registry,
        )

        self.operations_total = get_or_create_metric(
            lambda: Counter(
                "replication_operations_total",
                "Total number of replication operations produced",
                ["entity_type", "operation"],
                registry=self.registry,
            ),
            "replication_operations_total",
            self.registry,
        )

        self.conflicts_total = get_or_create_metric(
            lambda: Counter(
                "replication_conflicts_total",
                "Total number of security_id conflicts detected",
                ["entity_type"],
                registry=self.registry,
            ),
            "replication_conflicts_total",
            self.registry,
        )

        self.pending_operations = get_or_create_metric(
            lambda: Gauge(
                "replication_pending_operations",
                "Operations produced by the last diff run",
                ["operation"],
                registry=self.registry,
            ),
            "replication_pending_operations",
            self.registry,
        )

        self.desired_items = get_or_create_metric(
            lambda: Gauge(
                "replication_desired_items",
                "Desired items submitted to the last diff run",
                registry=self.registry,
            ),
            "replication_desired_items",
            self.registry,
        )

        self.ledger_entities = get_or_create_metric(
            lambda: Gauge(
                "replication_ledger_entities",
                "Ledger entities in the inventory of the last diff run",
                registry=self.registry,
            ),
            "replication_ledger_entities",
            self.registry,
        )

    def record_diff(
        self,
        diff: "ReplicationDiff",
        duration: float,
        desired_count: int,
        actual_count: int,
    ) -> None:
        """
        Record a completed diff run

        Args:
            diff: Computed replication diff
            duration: Duration in seconds
            desired_count: Number of desired items submitted
            actual_count: Number of ledger entities in the inventory
        """
        status = "in_sync" if diff.total == 0 and not diff.conflicts else "drift"

        self.diff_runs_total.labels(status=status).inc()
        self.diff_duration_seconds.observe(duration)
        self.last_run_timestamp.set(time.time())
        self.desired_items.set(desired_count)
        self.ledger_entities.set(actual_count)

        for operation, items in (
            ("create", diff.creates),
            ("edit", diff.edits),
            ("delete", diff.deletes),
        ):
            self.pending_operations.labels(operation=operation).set(len(items))
            for item in items:
                self.operations_total.labels(
                    entity_type=normalize_entity_type(item.type),
                    operation=operation,
                ).inc()

        for conflict in diff.conflicts:
            self.conflicts_total.labels(entity_type=conflict.type).inc()

        logger.debug(
            f"Recorded replication diff: status={status}, total={diff.total}, "
            f"conflicts={len(diff.conflicts)}, duration={duration:.3f}s"
        )

    def record_failure(self, error_type: str, duration: float) -> None:
        """
        Record a diff run that raised

        Args:
            error_type: Exception class name
            duration: Duration in seconds until the failure
        """
        self.diff_runs_total.labels(status="failed").inc()
        self.diff_duration_seconds.observe(duration)
        self.last_run_timestamp.set(time.time())

        logger.warning(f"Recorded failed replication diff: error={error_type}")
