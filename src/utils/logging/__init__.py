"""
Structured logging configuration for replication tools

Usage:
    from utils.logging import configure_from_env, get_logger

    # Setup logging (call once at application startup)
    configure_from_env()

    # Get logger for your module
    logger = get_logger(__name__)

    # Log with context
    logger.info("Diff computed", extra={
        "contract_anchor": "00abc",
        "creates": 3,
    })
"""

from .config import configure_from_env, get_logger, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
