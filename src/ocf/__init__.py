"""
Open Cap Table Format (OCF) vocabulary and comparison helpers.

This package provides the canonical entity-type catalog (with alias and
category resolution) and the semantic equality comparator used to decide
whether two snapshots of the same OCF object actually differ.

Usage:
    from ocf import compare, normalize_entity_type

    normalize_entity_type("planSecurityIssuance")
    # 'equityCompensationIssuance'

    result = compare({"quantity": "100"}, {"quantity": 100.0})
    result.equal
    # True
"""

from .comparison import (
    DEFAULT_DEPRECATED_FIELDS,
    DEFAULT_INTERNAL_FIELDS,
    ComparisonOptions,
    ComparisonResult,
    compare,
    diff_payloads,
    is_equal,
    is_undefined_like,
    strip_internal_fields,
)
from .entity_types import (
    CANONICAL_ENTITY_TYPES,
    ENTITY_TYPES,
    PLAN_SECURITY_OBJECT_TYPE_MAP,
    PLAN_SECURITY_TO_EQUITY_COMPENSATION_MAP,
    TRANSACTION_SUBTYPE_MAP,
    Category,
    is_entity_type,
    is_plan_security_entity_type,
    is_plan_security_object_type,
    label,
    normalize_entity_type,
    normalize_kind_discriminant,
    normalize_ocf_data,
    resolve_category,
)

__all__ = [
    # Entity types
    "ENTITY_TYPES",
    "CANONICAL_ENTITY_TYPES",
    "PLAN_SECURITY_TO_EQUITY_COMPENSATION_MAP",
    "PLAN_SECURITY_OBJECT_TYPE_MAP",
    "TRANSACTION_SUBTYPE_MAP",
    "Category",
    "is_entity_type",
    "is_plan_security_entity_type",
    "is_plan_security_object_type",
    "normalize_entity_type",
    "normalize_kind_discriminant",
    "normalize_ocf_data",
    "resolve_category",
    "label",
    # Comparison
    "DEFAULT_INTERNAL_FIELDS",
    "DEFAULT_DEPRECATED_FIELDS",
    "ComparisonOptions",
    "ComparisonResult",
    "compare",
    "is_equal",
    "diff_payloads",
    "is_undefined_like",
    "strip_internal_fields",
]
