"""
Utility modules for replication tools

Provides:
- logging: Structured logging configuration
- metrics: Prometheus metrics for replication runs
- tracing: OpenTelemetry spans for inventory and diff computation
"""

__version__ = "0.1.0"
__all__ = ["logging", "metrics", "tracing"]
