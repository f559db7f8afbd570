"""
Pytest configuration and fixtures for replication tests.
Provides shared ledger snapshots and desired items.
"""

import logging
import logging.handlers
import os

import pytest

from replication.inventory import ActualStateInventory
from utils.logging import ConsoleFormatter, JSONFormatter


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "property: mark test as property-based test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def clear_replication_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration variables that would leak into tests."""
    for key in list(os.environ):
        if key.startswith(("OCF_", "LOG_")) or key in ("OTLP_ENDPOINT", "TRACE_CONSOLE"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Remove root handlers installed by setup_logging and restore the level."""
    root = logging.getLogger()
    level = root.level

    yield

    for handler in root.handlers[:]:
        if isinstance(handler, logging.handlers.RotatingFileHandler) or isinstance(
            handler.formatter, (ConsoleFormatter, JSONFormatter)
        ):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def stakeholder_payload() -> dict:
    """OCF stakeholder as stored by the source of truth."""
    return {
        "id": "sh-1",
        "object_type": "STAKEHOLDER",
        "name": {"legal_name": "Ada Lovelace"},
        "stakeholder_type": "INDIVIDUAL",
        "comments": [],
    }


@pytest.fixture
def issuance_payload() -> dict:
    """OCF stock issuance with numeric quantities."""
    return {
        "id": "si-1",
        "object_type": "TX_STOCK_ISSUANCE",
        "security_id": "sec-1",
        "stakeholder_id": "sh-1",
        "stock_class_id": "sc-1",
        "quantity": "1000",
        "share_price": {"amount": "1.50", "currency": "USD"},
        "date": "2024-01-15",
    }


@pytest.fixture
def empty_inventory() -> ActualStateInventory:
    """Inventory of an empty ledger."""
    return ActualStateInventory(
        contract_anchor="cid-empty",
        parent_anchor="issuer-1",
        ids_by_type={},
    )


@pytest.fixture
def contract_read_result() -> dict:
    """Cap table contract as returned by the ledger API."""
    return {
        "contractId": "00cap",
        "payload": {
            "issuer": "issuer-cid",
            "stakeholders": {"sh-1": "cid-sh-1", "sh-2": "cid-sh-2"},
            "stock_classes": [["sc-1", "cid-sc-1"]],
            "stock_issuances": {"si-1": "cid-si-1"},
            "stock_issuances_by_security_id": {"sec-1": "cid-si-1"},
        },
    }
