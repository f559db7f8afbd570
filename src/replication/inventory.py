"""
Actual-state inventory for replication.

The ledger collaborator hands back two read shapes: the cap table contract
payload (one map of OCF id -> contract id per entity family) and, for deep
comparison, a manifest of the OCF objects themselves. This module turns both
into an :class:`ActualStateInventory`, the snapshot the diff engine works
against. Nothing here performs I/O.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ocf.entity_types import (
    TRANSACTION_SUBTYPE_MAP,
    is_entity_type,
    normalize_entity_type,
    normalize_kind_discriminant,
)
from utils.tracing import add_span_event, trace_function

from .errors import ReplicationSchemaError, UnsupportedEntityTypeError

logger = logging.getLogger(__name__)

PayloadIndex = dict[str, dict[str, Mapping[str, Any]]]

# Cap table contract field -> entity type; each field maps OCF id to contract id
FIELD_TO_ENTITY_TYPE: Mapping[str, str] = MappingProxyType({
    # Core objects
    "stakeholders": "stakeholder",
    "stock_classes": "stockClass",
    "stock_plans": "stockPlan",
    "vesting_terms": "vestingTerms",
    "stock_legend_templates": "stockLegendTemplate",
    "documents": "document",
    "valuations": "valuation",

    # Stock class adjustments
    "stock_class_authorized_shares_adjustments": "stockClassAuthorizedSharesAdjustment",
    "stock_class_conversion_ratio_adjustments": "stockClassConversionRatioAdjustment",
    "stock_class_splits": "stockClassSplit",
    "issuer_authorized_shares_adjustments": "issuerAuthorizedSharesAdjustment",

    # Stock transactions
    "stock_issuances": "stockIssuance",
    "stock_cancellations": "stockCancellation",
    "stock_transfers": "stockTransfer",
    "stock_acceptances": "stockAcceptance",
    "stock_conversions": "stockConversion",
    "stock_repurchases": "stockRepurchase",
    "stock_reissuances": "stockReissuance",
    "stock_retractions": "stockRetraction",
    "stock_consolidations": "stockConsolidation",

    # Equity compensation
    "equity_compensation_issuances": "equityCompensationIssuance",
    "equity_compensation_cancellations": "equityCompensationCancellation",
    "equity_compensation_transfers": "equityCompensationTransfer",
    "equity_compensation_acceptances": "equityCompensationAcceptance",
    "equity_compensation_exercises": "equityCompensationExercise",
    "equity_compensation_releases": "equityCompensationRelease",
    "equity_compensation_repricings": "equityCompensationRepricing",
    "equity_compensation_retractions": "equityCompensationRetraction",

    # Convertibles
    "convertible_issuances": "convertibleIssuance",
    "convertible_cancellations": "convertibleCancellation",
    "convertible_transfers": "convertibleTransfer",
    "convertible_acceptances": "convertibleAcceptance",
    "convertible_conversions": "convertibleConversion",
    "convertible_retractions": "convertibleRetraction",

    # Warrants
    "warrant_issuances": "warrantIssuance",
    "warrant_cancellations": "warrantCancellation",
    "warrant_transfers": "warrantTransfer",
    "warrant_acceptances": "warrantAcceptance",
    "warrant_exercises": "warrantExercise",
    "warrant_retractions": "warrantRetraction",

    # Stock plan events
    "stock_plan_pool_adjustments": "stockPlanPoolAdjustment",
    "stock_plan_return_to_pools": "stockPlanReturnToPool",

    # Vesting events
    "vesting_accelerations": "vestingAcceleration",
    "vesting_events": "vestingEvent",
    "vesting_starts": "vestingStart",

    # Stakeholder events
    "stakeholder_relationship_change_events": "stakeholderRelationshipChangeEvent",
    "stakeholder_status_change_events": "stakeholderStatusChangeEvent",
})

# Issuance families keep a second map keyed by security_id
SECURITY_ID_FIELD_TO_ENTITY_TYPE: Mapping[str, str] = MappingProxyType({
    "stock_issuances_by_security_id": "stockIssuance",
    "convertible_issuances_by_security_id": "convertibleIssuance",
    "equity_compensation_issuances_by_security_id": "equityCompensationIssuance",
    "warrant_issuances_by_security_id": "warrantIssuance",
})

# Manifest list key -> entity type (transactions are typed by object_type)
MANIFEST_OBJECT_KEYS: Mapping[str, str] = MappingProxyType({
    "stakeholders": "stakeholder",
    "stockClasses": "stockClass",
    "stockPlans": "stockPlan",
    "vestingTerms": "vestingTerms",
    "valuations": "valuation",
    "documents": "document",
    "stockLegendTemplates": "stockLegendTemplate",
})


def _canonical_type(tag: Any, context: str) -> str:
    if not is_entity_type(tag):
        raise UnsupportedEntityTypeError(
            f"Unsupported entity type in {context}: {tag!r}",
            value=tag,
            entity_type=tag if isinstance(tag, str) else None,
        )
    return normalize_entity_type(tag)


@dataclass(frozen=True)
class ActualStateInventory:
    """
    Snapshot of what the system of record currently holds.

    ``ids_by_type`` keeps the caller's iteration order, which is the order
    deletes are reported in. ``payloads_by_type`` enables edit detection and
    ``secondary_keys_by_type`` enables security_id conflict detection; both
    are optional.

    Entity type keys are validated and alias-normalized on construction.
    """

    contract_anchor: str
    parent_anchor: str
    ids_by_type: Mapping[str, Iterable[str]]
    payloads_by_type: Mapping[str, Mapping[str, Any]] | None = None
    secondary_keys_by_type: Mapping[str, Iterable[str]] | None = None
    _id_sets: Mapping[str, frozenset[str]] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        ids: dict[str, dict[str, None]] = {}
        for tag, entity_ids in self.ids_by_type.items():
            entity_type = _canonical_type(tag, "ids_by_type")
            if isinstance(entity_ids, str):
                raise ReplicationSchemaError(
                    f"ids_by_type[{tag!r}] must be a collection of ids, not a string",
                    entity_type=entity_type,
                )
            bucket = ids.setdefault(entity_type, {})
            for entity_id in entity_ids:
                bucket[entity_id] = None

        frozen_ids = {entity_type: tuple(bucket) for entity_type, bucket in ids.items()}
        object.__setattr__(self, "ids_by_type", MappingProxyType(frozen_ids))
        object.__setattr__(
            self,
            "_id_sets",
            MappingProxyType({k: frozenset(v) for k, v in frozen_ids.items()}),
        )

        if self.payloads_by_type is not None:
            payloads: dict[str, dict[str, Any]] = {}
            for tag, by_id in self.payloads_by_type.items():
                entity_type = _canonical_type(tag, "payloads_by_type")
                payloads.setdefault(entity_type, {}).update(by_id)
            object.__setattr__(self, "payloads_by_type", MappingProxyType(payloads))

        if self.secondary_keys_by_type is not None:
            keys: dict[str, set[str]] = {}
            for tag, values in self.secondary_keys_by_type.items():
                entity_type = _canonical_type(tag, "secondary_keys_by_type")
                keys.setdefault(entity_type, set()).update(values)
            object.__setattr__(
                self,
                "secondary_keys_by_type",
                MappingProxyType({k: frozenset(v) for k, v in keys.items()}),
            )

    def has(self, entity_type: str, entity_id: str) -> bool:
        """Check whether an id is recorded under a canonical entity type."""
        return entity_id in self._id_sets.get(entity_type, frozenset())

    def ids_for(self, entity_type: str) -> tuple[str, ...]:
        """Ids recorded under a canonical entity type, in snapshot order."""
        return self.ids_by_type.get(entity_type, ())

    def payload_for(self, entity_type: str, entity_id: str) -> Any:
        """Indexed payload for an id, or None when it is not indexed."""
        if self.payloads_by_type is None:
            return None
        return self.payloads_by_type.get(entity_type, {}).get(entity_id)

    def secondary_keys_for(self, entity_type: str) -> frozenset[str] | None:
        """Secondary keys for a type, or None when no index was supplied."""
        if self.secondary_keys_by_type is None:
            return None
        return self.secondary_keys_by_type.get(entity_type, frozenset())

    @property
    def entity_count(self) -> int:
        """Total number of ids across all types."""
        return sum(len(ids) for ids in self.ids_by_type.values())

    def with_payloads(self, payloads_by_type: Mapping[str, Mapping[str, Any]]) -> "ActualStateInventory":
        """
        Return a copy of this inventory carrying a payload index.

        Args:
            payloads_by_type: Map of entity type -> (id -> payload)

        Returns:
            New ActualStateInventory
        """
        return dataclasses.replace(self, payloads_by_type=payloads_by_type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "contract_anchor": self.contract_anchor,
            "parent_anchor": self.parent_anchor,
            "entity_count": self.entity_count,
            "ids_by_type": {k: list(v) for k, v in self.ids_by_type.items()},
            "has_payloads": self.payloads_by_type is not None,
            "has_secondary_keys": self.secondary_keys_by_type is not None,
        }


def _map_keys(field_name: str, value: Any) -> list[str]:
    """
    Read the keys of a serialized ledger map.

    Maps arrive either as a JSON object or as a list of ``[key, value]``
    pairs depending on the ledger API version.
    """
    if value is None:
        return []

    if isinstance(value, Mapping):
        return list(value.keys())

    if isinstance(value, list):
        keys = []
        for index, pair in enumerate(value):
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ReplicationSchemaError(
                    f"Invalid map entry in contract field {field_name!r} at index {index}",
                    field_path=f"{field_name}[{index}]",
                )
            keys.append(pair[0])
        return keys

    raise ReplicationSchemaError(
        f"Contract field {field_name!r} must be a map, got {type(value).__name__}",
        field_path=field_name,
    )


@trace_function("build_inventory_from_contract", component="inventory")
def build_inventory_from_contract(
    contract: Mapping[str, Any],
    payloads_by_type: Mapping[str, Mapping[str, Any]] | None = None,
) -> ActualStateInventory:
    """
    Build an inventory from a cap table contract read result.

    Accepts both response layouts of the ledger API: ``{"contractId",
    "payload"}`` and ``{"contract_id", "contract": {"payload"}}``.

    Args:
        contract: Active contract as returned by the ledger collaborator
        payloads_by_type: Optional payload index from the same snapshot

    Returns:
        ActualStateInventory

    Raises:
        ReplicationSchemaError: If the contract or one of its maps is malformed
    """
    if not isinstance(contract, Mapping):
        raise ReplicationSchemaError(
            f"Contract must be an object, got {type(contract).__name__}"
        )

    contract_id = contract.get("contractId") or contract.get("contract_id") or ""
    payload = contract.get("payload")
    if payload is None and isinstance(contract.get("contract"), Mapping):
        payload = contract["contract"].get("payload")
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ReplicationSchemaError(
            f"Contract payload must be an object, got {type(payload).__name__}",
            field_path="payload",
        )

    ids_by_type: dict[str, list[str]] = {}
    for field_name, entity_type in FIELD_TO_ENTITY_TYPE.items():
        entity_ids = _map_keys(field_name, payload.get(field_name))
        if entity_ids:
            ids_by_type[entity_type] = entity_ids

    secondary_keys: dict[str, list[str]] | None = None
    for field_name, entity_type in SECURITY_ID_FIELD_TO_ENTITY_TYPE.items():
        if field_name in payload:
            if secondary_keys is None:
                secondary_keys = {}
            secondary_keys[entity_type] = _map_keys(field_name, payload[field_name])

    issuer = payload.get("issuer")
    inventory = ActualStateInventory(
        contract_anchor=contract_id,
        parent_anchor=issuer if isinstance(issuer, str) else "",
        ids_by_type=ids_by_type,
        payloads_by_type=payloads_by_type,
        secondary_keys_by_type=secondary_keys,
    )

    logger.info(
        f"Loaded inventory from contract {contract_id or '<unknown>'}: "
        f"{inventory.entity_count} entities across {len(inventory.ids_by_type)} types"
    )

    return inventory


def entity_type_for_object_type(object_type: str) -> str:
    """
    Resolve a transaction ``object_type`` to its entity type.

    Args:
        object_type: Value such as ``TX_STOCK_ISSUANCE`` (aliases accepted)

    Returns:
        Canonical entity type

    Raises:
        UnsupportedEntityTypeError: If the object type is unknown
    """
    entity_type = TRANSACTION_SUBTYPE_MAP.get(normalize_kind_discriminant(object_type))
    if entity_type is None:
        raise UnsupportedEntityTypeError(
            f"Unsupported transaction object_type: {object_type}",
            value=object_type,
            field_path="object_type",
        )
    return entity_type


def _add_indexed(
    index: PayloadIndex,
    entity_type: str,
    item: Any,
    context: str,
) -> None:
    if not isinstance(item, Mapping):
        raise ReplicationSchemaError(
            f"Invalid {context}: expected object, got {type(item).__name__}",
            entity_type=entity_type,
        )

    entity_id = item.get("id")
    if not isinstance(entity_id, str) or not entity_id:
        raise ReplicationSchemaError(
            f"Invalid {context}: missing or invalid 'id' field. Got: {entity_id!r}",
            entity_type=entity_type,
            field_path="id",
        )

    bucket = index.setdefault(entity_type, {})
    if entity_id in bucket and bucket[entity_id] != item:
        raise ReplicationSchemaError(
            f"Duplicate {context} id={entity_id!r} with different content",
            entity_id=entity_id,
            entity_type=entity_type,
        )
    bucket[entity_id] = item


def _manifest_list(manifest: Mapping[str, Any], key: str) -> list[Any]:
    items = manifest.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise ReplicationSchemaError(
            f"Manifest field {key!r} must be a list, got {type(items).__name__}",
            field_path=key,
        )
    return items


@trace_function("build_payload_index", component="inventory")
def build_payload_index(manifest: Mapping[str, Any]) -> PayloadIndex:
    """
    Index a manifest of ledger OCF objects by entity type and id.

    Every object must carry a string ``id``; transactions must carry an
    ``object_type`` that resolves after alias normalization. Nothing is
    dropped silently: an object the index cannot place would be invisible
    to delete detection.

    Args:
        manifest: ``{"issuer", "stakeholders", "stockClasses", "stockPlans",
            "vestingTerms", "valuations", "documents", "stockLegendTemplates",
            "transactions"}``

    Returns:
        Map of entity type -> (id -> OCF object)

    Raises:
        ReplicationSchemaError: For objects without a usable id or object_type
        UnsupportedEntityTypeError: For unknown transaction object types
    """
    index: PayloadIndex = {}

    issuer = manifest.get("issuer")
    if issuer:
        _add_indexed(index, "issuer", issuer, "issuer")

    for key, entity_type in MANIFEST_OBJECT_KEYS.items():
        for item in _manifest_list(manifest, key):
            _add_indexed(index, entity_type, item, entity_type)

    for tx in _manifest_list(manifest, "transactions"):
        object_type = tx.get("object_type") if isinstance(tx, Mapping) else None
        if not isinstance(object_type, str):
            raise ReplicationSchemaError(
                f"Invalid transaction: missing or invalid 'object_type' field. "
                f"Got: {object_type!r}",
                entity_id=tx.get("id") if isinstance(tx, Mapping) else None,
                field_path="object_type",
            )
        entity_type = entity_type_for_object_type(object_type)
        _add_indexed(index, entity_type, tx, f"transaction ({object_type})")

    indexed = sum(len(v) for v in index.values())
    add_span_event("manifest_indexed", objects=indexed, entity_types=len(index))
    logger.debug(f"Indexed {indexed} manifest objects across {len(index)} types")

    return index


def count_manifest_objects(manifest: Mapping[str, Any]) -> int:
    """Count the OCF objects in a manifest (issuer included)."""
    count = 1 if manifest.get("issuer") else 0
    for key in (*MANIFEST_OBJECT_KEYS, "transactions"):
        items = manifest.get(key)
        if isinstance(items, list):
            count += len(items)
    return count
