"""
Replication diff computation.

Compares the desired OCF entities (the caller's source of truth) with the
actual-state inventory read from the ledger and produces the create, edit
and delete operations that bring the ledger in line, plus security_id
conflicts that would make a create fail downstream.

The engine never performs I/O and never mutates its inputs; the caller
decides when and in which order to submit the operations.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ocf.comparison import ComparisonOptions, compare, is_equal
from ocf.entity_types import is_entity_type, label, normalize_entity_type, normalize_ocf_data
from utils.metrics import ReplicationMetrics
from utils.tracing import add_span_attributes, trace_operation

from .errors import (
    InventoryConsistencyError,
    ReplicationError,
    ReplicationSchemaError,
    UnsupportedEntityTypeError,
)
from .inventory import ActualStateInventory

logger = logging.getLogger(__name__)

# Issuance types whose security_id must be unique on the ledger
ISSUANCE_ENTITY_TYPES: frozenset[str] = frozenset({
    "stockIssuance",
    "convertibleIssuance",
    "equityCompensationIssuance",
    "warrantIssuance",
})

SECONDARY_KEY_FIELD = "security_id"


class Operation:
    """Constants for replication operations."""

    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"


@dataclass(frozen=True)
class DesiredItem:
    """An entity the caller wants on the ledger."""

    id: str
    type: str
    payload: Any = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DesiredItem":
        """Create from a ``{"id", "type", "payload"}`` dictionary."""
        return cls(id=data.get("id"), type=data.get("type"), payload=data.get("payload"))


@dataclass
class ReplicationItem:
    """A single operation to submit to the ledger."""

    id: str
    type: str
    operation: str
    payload: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        result = {
            "id": self.id,
            "type": self.type,
            "operation": self.operation,
        }
        if self.operation != Operation.DELETE:
            result["payload"] = self.payload
        return result


@dataclass
class ConflictRecord:
    """A create whose security_id is already taken by another ledger object."""

    id: str
    type: str
    secondary_key: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "type": self.type,
            "secondary_key": self.secondary_key,
            "message": self.message,
        }


@dataclass
class ReplicationDiff:
    """
    Operations needed to replicate the desired state.

    A conflicted create stays in ``creates``; ``conflicts`` flags it so the
    caller can resolve it before submitting.
    """

    creates: list[ReplicationItem] = field(default_factory=list)
    edits: list[ReplicationItem] = field(default_factory=list)
    deletes: list[ReplicationItem] = field(default_factory=list)
    conflicts: list[ConflictRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of operations (conflicts are not counted separately)."""
        return len(self.creates) + len(self.edits) + len(self.deletes)

    @property
    def in_sync(self) -> bool:
        """True when there is nothing to submit and no conflict to resolve."""
        return self.total == 0 and not self.conflicts

    def operations(self) -> list[ReplicationItem]:
        """All operations: creates, then edits, then deletes."""
        return [*self.creates, *self.edits, *self.deletes]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "creates": [item.to_dict() for item in self.creates],
            "edits": [item.to_dict() for item in self.edits],
            "deletes": [item.to_dict() for item in self.deletes],
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "total": self.total,
        }


@dataclass(frozen=True)
class DiffOptions:
    """
    Options for :func:`compute_diff`.

    Attributes:
        comparison: Field policy for payload comparison
        report_differences: Log field-level differences of every edit
            (off by default, payloads may hold personal data)
        metrics: Prometheus metrics to update after each run
    """

    comparison: ComparisonOptions = field(default_factory=ComparisonOptions)
    report_differences: bool = False
    metrics: ReplicationMetrics | None = None


def _coerce_item(item: Any, position: int) -> DesiredItem:
    if isinstance(item, Mapping):
        item = DesiredItem.from_dict(item)
    elif not isinstance(item, DesiredItem):
        raise ReplicationSchemaError(
            f"Desired item at position {position} must be an object, "
            f"got {type(item).__name__}"
        )

    if not isinstance(item.id, str) or not item.id.strip():
        raise ReplicationSchemaError(
            f"Desired item at position {position} has a missing or empty id "
            f"(type={item.type!r})",
            entity_id=item.id if isinstance(item.id, str) else None,
            entity_type=item.type if isinstance(item.type, str) else None,
            field_path="id",
        )

    if not is_entity_type(item.type):
        raise UnsupportedEntityTypeError(
            f"Desired item id={item.id!r} has unsupported type {item.type!r}",
            value=item.type,
            entity_id=item.id,
            field_path="type",
        )

    return item


def _security_id(payload: Any) -> str | None:
    if not isinstance(payload, Mapping):
        return None
    value = payload.get(SECONDARY_KEY_FIELD)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _conflict_message(entity_type: str, entity_id: str, security_id: str) -> str:
    return (
        f"{label(entity_type, 1)} id=\"{entity_id}\" has "
        f"{SECONDARY_KEY_FIELD}=\"{security_id}\" which already exists on the ledger "
        f"under a different object ID. This indicates duplicate {SECONDARY_KEY_FIELD} "
        f"values in the source data."
    )


def _payloads_differ(
    item: DesiredItem,
    actual_payload: Mapping[str, Any],
    options: DiffOptions,
) -> bool:
    desired_payload = normalize_ocf_data(item.payload)
    actual_payload = normalize_ocf_data(actual_payload)

    if not options.report_differences:
        return not is_equal(desired_payload, actual_payload, options.comparison)

    result = compare(desired_payload, actual_payload, options.comparison)
    if not result.equal:
        logger.info(
            f"{label(item.type, 1)} id={item.id} differs in "
            f"{len(result.differences)} field(s)"
        )
        for difference in result.differences:
            logger.info(f"  - {difference}")
    return not result.equal


def compute_diff(
    desired_items: Iterable[DesiredItem | Mapping[str, Any]],
    inventory: ActualStateInventory,
    options: DiffOptions | None = None,
) -> ReplicationDiff:
    """
    Compute the operations that replicate the desired state onto the ledger.

    Desired items are deduplicated on (canonical type, id), first occurrence
    winning. Each surviving item becomes a create when the ledger does not
    know its id, an edit when the ledger payload differs semantically (only
    when the inventory carries payloads), or nothing. Ledger ids that no
    desired item claims become deletes, in inventory order.

    Creates and edits keep the type the caller submitted, so alias tags
    such as ``planSecurityIssuance`` survive into the output.

    Args:
        desired_items: DesiredItem instances or ``{"id", "type", "payload"}`` dicts
        inventory: Actual state snapshot
        options: Comparison and reporting options

    Returns:
        ReplicationDiff

    Raises:
        ReplicationSchemaError: For items with a missing id, an unknown type,
            or a non-object payload where comparison needs one
        InventoryConsistencyError: When the payload index lacks an id that
            the id inventory lists
    """
    options = options or DiffOptions()
    start_time = time.perf_counter()
    diff = ReplicationDiff()
    desired_count = 0

    with trace_operation(
        "compute_diff",
        contract_anchor=inventory.contract_anchor or "unknown",
        edit_detection=inventory.payloads_by_type is not None,
        conflict_detection=inventory.secondary_keys_by_type is not None,
    ):
        try:
            seen: set[tuple[str, str]] = set()
            desired_ids_by_type: dict[str, set[str]] = {}

            for position, raw_item in enumerate(desired_items):
                item = _coerce_item(raw_item, position)
                desired_count += 1
                entity_type = normalize_entity_type(item.type)

                key = (entity_type, item.id)
                if key in seen:
                    logger.debug(f"Skipping duplicate {entity_type} id={item.id}")
                    continue
                seen.add(key)
                desired_ids_by_type.setdefault(entity_type, set()).add(item.id)

                if not inventory.has(entity_type, item.id):
                    diff.creates.append(
                        ReplicationItem(item.id, item.type, Operation.CREATE, item.payload)
                    )
                    conflict = _check_secondary_key(item, entity_type, inventory)
                    if conflict is not None:
                        diff.conflicts.append(conflict)
                    continue

                if inventory.payloads_by_type is None:
                    continue

                actual_payload = inventory.payload_for(entity_type, item.id)
                if actual_payload is None:
                    raise InventoryConsistencyError(
                        f"Inconsistent payload index: missing payload for "
                        f"entity_type=\"{entity_type}\", id=\"{item.id}\" even though "
                        f"the id is listed in the inventory. Build the payload index "
                        f"from the same ledger snapshot.",
                        entity_id=item.id,
                        entity_type=entity_type,
                    )

                if not isinstance(item.payload, Mapping):
                    raise ReplicationSchemaError(
                        f"Invalid desired payload for entity_type=\"{item.type}\", "
                        f"id=\"{item.id}\": expected object, got "
                        f"{'null' if item.payload is None else type(item.payload).__name__}",
                        entity_id=item.id,
                        entity_type=item.type,
                        field_path="payload",
                    )

                if _payloads_differ(item, actual_payload, options):
                    diff.edits.append(
                        ReplicationItem(item.id, item.type, Operation.EDIT, item.payload)
                    )

            for entity_type, entity_ids in inventory.ids_by_type.items():
                claimed = desired_ids_by_type.get(entity_type, set())
                for entity_id in entity_ids:
                    if entity_id not in claimed:
                        diff.deletes.append(
                            ReplicationItem(entity_id, entity_type, Operation.DELETE)
                        )

        except ReplicationError as e:
            duration = time.perf_counter() - start_time
            logger.error(f"Replication diff failed after {duration:.3f}s: {e}")
            if options.metrics is not None:
                options.metrics.record_failure(type(e).__name__, duration)
            raise

        duration = time.perf_counter() - start_time

        add_span_attributes(
            desired_items=desired_count,
            actual_entities=inventory.entity_count,
            creates=len(diff.creates),
            edits=len(diff.edits),
            deletes=len(diff.deletes),
            conflicts=len(diff.conflicts),
        )

    for conflict in diff.conflicts:
        logger.warning(conflict.message)

    logger.info(
        f"Replication diff computed: {len(diff.creates)} create(s), "
        f"{len(diff.edits)} edit(s), {len(diff.deletes)} delete(s), "
        f"{len(diff.conflicts)} conflict(s) from {desired_count} desired item(s) "
        f"and {inventory.entity_count} ledger entities in {duration:.3f}s"
    )

    if options.metrics is not None:
        options.metrics.record_diff(
            diff,
            duration=duration,
            desired_count=desired_count,
            actual_count=inventory.entity_count,
        )

    return diff


def _check_secondary_key(
    item: DesiredItem,
    entity_type: str,
    inventory: ActualStateInventory,
) -> ConflictRecord | None:
    if entity_type not in ISSUANCE_ENTITY_TYPES:
        return None

    known_keys = inventory.secondary_keys_for(entity_type)
    if known_keys is None:
        return None

    security_id = _security_id(item.payload)
    if security_id is None or security_id not in known_keys:
        return None

    return ConflictRecord(
        id=item.id,
        type=entity_type,
        secondary_key=security_id,
        message=_conflict_message(entity_type, item.id, security_id),
    )


def summarize_diff(diff: ReplicationDiff) -> dict[str, dict[str, int]]:
    """
    Count operations per canonical entity type.

    Args:
        diff: Computed diff

    Returns:
        ``{entity_type: {"create": n, "edit": n, "delete": n, "conflict": n}}``
    """
    summary: dict[str, dict[str, int]] = {}

    def bump(entity_type: str, bucket: str) -> None:
        counts = summary.setdefault(
            normalize_entity_type(entity_type),
            {Operation.CREATE: 0, Operation.EDIT: 0, Operation.DELETE: 0, "conflict": 0},
        )
        counts[bucket] += 1

    for item in diff.operations():
        bump(item.type, item.operation)
    for conflict in diff.conflicts:
        bump(conflict.type, "conflict")

    return summary
