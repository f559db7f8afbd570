"""
Cap table replication.

Computes the create/edit/delete operations that replicate a desired set of
OCF entities onto a ledger-backed cap table, flags security_id conflicts,
and reports the result.

Submodules:
- inventory: actual-state snapshot built from ledger read results
- diff: the replication diff engine
- report: report generation and export
- cli: command-line interface
"""

from .diff import (
    ConflictRecord,
    DesiredItem,
    DiffOptions,
    Operation,
    ReplicationDiff,
    ReplicationItem,
    compute_diff,
    summarize_diff,
)
from .errors import (
    InventoryConsistencyError,
    ReplicationError,
    ReplicationSchemaError,
    UnsupportedEntityTypeError,
)
from .inventory import (
    ActualStateInventory,
    build_inventory_from_contract,
    build_payload_index,
    count_manifest_objects,
    entity_type_for_object_type,
)

__version__ = "0.1.0"

__all__ = [
    "ActualStateInventory",
    "build_inventory_from_contract",
    "build_payload_index",
    "count_manifest_objects",
    "entity_type_for_object_type",
    "DesiredItem",
    "DiffOptions",
    "Operation",
    "ReplicationItem",
    "ConflictRecord",
    "ReplicationDiff",
    "compute_diff",
    "summarize_diff",
    "ReplicationError",
    "ReplicationSchemaError",
    "UnsupportedEntityTypeError",
    "InventoryConsistencyError",
]
