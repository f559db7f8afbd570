"""
OCF entity type catalog and normalization.

Defines the canonical entity-type vocabulary (camelCase tags such as
``stakeholder`` or ``stockIssuance``), the plan-security alias family that
the ledger stores identically to equity compensation, and the lookup tables
that translate categorized upstream encodings (``STAKEHOLDER``,
``OBJECT``/``DOCUMENT``, ``TRANSACTION``/``TX_STOCK_ISSUANCE``) onto
canonical tags.

All tables are read-only mappings built at import time and can be shared
freely between threads.
"""

from types import MappingProxyType
from typing import Any, Mapping


class Category:
    """Constants for upstream category codes."""

    ISSUER = "ISSUER"
    STAKEHOLDER = "STAKEHOLDER"
    STOCK_CLASS = "STOCK_CLASS"
    STOCK_PLAN = "STOCK_PLAN"
    DOCUMENT = "DOCUMENT"
    VESTING_TERMS = "VESTING_TERMS"
    STOCK_LEGEND_TEMPLATE = "STOCK_LEGEND_TEMPLATE"
    VALUATION = "VALUATION"

    # Generic wrappers that carry the real type in a subtype
    OBJECT = "OBJECT"
    TRANSACTION = "TRANSACTION"


# Singular and plural display labels, keyed by entity type tag
ENTITY_TYPE_LABELS: Mapping[str, tuple[str, str]] = MappingProxyType({
    # Core objects
    "issuer": ("Issuer", "Issuers"),
    "stakeholder": ("Stakeholder", "Stakeholders"),
    "stockClass": ("Stock Class", "Stock Classes"),
    "stockPlan": ("Stock Plan", "Stock Plans"),
    "vestingTerms": ("Vesting Terms", "Vesting Terms"),
    "stockLegendTemplate": ("Stock Legend Template", "Stock Legend Templates"),
    "document": ("Document", "Documents"),
    "valuation": ("Valuation", "Valuations"),

    # Stock transactions
    "stockIssuance": ("Stock Issuance", "Stock Issuances"),
    "stockCancellation": ("Stock Cancellation", "Stock Cancellations"),
    "stockTransfer": ("Stock Transfer", "Stock Transfers"),
    "stockAcceptance": ("Stock Acceptance", "Stock Acceptances"),
    "stockConversion": ("Stock Conversion", "Stock Conversions"),
    "stockRepurchase": ("Stock Repurchase", "Stock Repurchases"),
    "stockReissuance": ("Stock Reissuance", "Stock Reissuances"),
    "stockRetraction": ("Stock Retraction", "Stock Retractions"),
    "stockConsolidation": ("Stock Consolidation", "Stock Consolidations"),

    # Equity compensation
    "equityCompensationIssuance": (
        "Equity Compensation Issuance", "Equity Compensation Issuances"),
    "equityCompensationCancellation": (
        "Equity Compensation Cancellation", "Equity Compensation Cancellations"),
    "equityCompensationTransfer": (
        "Equity Compensation Transfer", "Equity Compensation Transfers"),
    "equityCompensationAcceptance": (
        "Equity Compensation Acceptance", "Equity Compensation Acceptances"),
    "equityCompensationExercise": (
        "Equity Compensation Exercise", "Equity Compensation Exercises"),
    "equityCompensationRelease": (
        "Equity Compensation Release", "Equity Compensation Releases"),
    "equityCompensationRepricing": (
        "Equity Compensation Repricing", "Equity Compensation Repricings"),
    "equityCompensationRetraction": (
        "Equity Compensation Retraction", "Equity Compensation Retractions"),

    # Plan security aliases
    "planSecurityIssuance": ("Plan Security Issuance", "Plan Security Issuances"),
    "planSecurityCancellation": (
        "Plan Security Cancellation", "Plan Security Cancellations"),
    "planSecurityTransfer": ("Plan Security Transfer", "Plan Security Transfers"),
    "planSecurityAcceptance": (
        "Plan Security Acceptance", "Plan Security Acceptances"),
    "planSecurityExercise": ("Plan Security Exercise", "Plan Security Exercises"),
    "planSecurityRelease": ("Plan Security Release", "Plan Security Releases"),
    "planSecurityRetraction": (
        "Plan Security Retraction", "Plan Security Retractions"),

    # Convertibles
    "convertibleIssuance": ("Convertible Issuance", "Convertible Issuances"),
    "convertibleCancellation": (
        "Convertible Cancellation", "Convertible Cancellations"),
    "convertibleTransfer": ("Convertible Transfer", "Convertible Transfers"),
    "convertibleAcceptance": ("Convertible Acceptance", "Convertible Acceptances"),
    "convertibleConversion": ("Convertible Conversion", "Convertible Conversions"),
    "convertibleRetraction": ("Convertible Retraction", "Convertible Retractions"),

    # Warrants
    "warrantIssuance": ("Warrant Issuance", "Warrant Issuances"),
    "warrantCancellation": ("Warrant Cancellation", "Warrant Cancellations"),
    "warrantTransfer": ("Warrant Transfer", "Warrant Transfers"),
    "warrantAcceptance": ("Warrant Acceptance", "Warrant Acceptances"),
    "warrantExercise": ("Warrant Exercise", "Warrant Exercises"),
    "warrantRetraction": ("Warrant Retraction", "Warrant Retractions"),

    # Stock class adjustments
    "stockClassAuthorizedSharesAdjustment": (
        "Stock Class Authorized Shares Adjustment",
        "Stock Class Authorized Shares Adjustments",
    ),
    "stockClassConversionRatioAdjustment": (
        "Stock Class Conversion Ratio Adjustment",
        "Stock Class Conversion Ratio Adjustments",
    ),
    "stockClassSplit": ("Stock Class Split", "Stock Class Splits"),
    "issuerAuthorizedSharesAdjustment": (
        "Issuer Authorized Shares Adjustment",
        "Issuer Authorized Shares Adjustments",
    ),

    # Stock plan events
    "stockPlanPoolAdjustment": (
        "Stock Plan Pool Adjustment", "Stock Plan Pool Adjustments"),
    "stockPlanReturnToPool": (
        "Stock Plan Return to Pool", "Stock Plan Returns to Pool"),

    # Vesting events
    "vestingAcceleration": ("Vesting Acceleration", "Vesting Accelerations"),
    "vestingEvent": ("Vesting Event", "Vesting Events"),
    "vestingStart": ("Vesting Start", "Vesting Starts"),

    # Stakeholder events
    "stakeholderRelationshipChangeEvent": (
        "Stakeholder Relationship Change", "Stakeholder Relationship Changes"),
    "stakeholderStatusChangeEvent": (
        "Stakeholder Status Change", "Stakeholder Status Changes"),
})

# planSecurityX -> equityCompensationX
PLAN_SECURITY_TO_EQUITY_COMPENSATION_MAP: Mapping[str, str] = MappingProxyType({
    "planSecurityIssuance": "equityCompensationIssuance",
    "planSecurityExercise": "equityCompensationExercise",
    "planSecurityCancellation": "equityCompensationCancellation",
    "planSecurityAcceptance": "equityCompensationAcceptance",
    "planSecurityRelease": "equityCompensationRelease",
    "planSecurityRetraction": "equityCompensationRetraction",
    "planSecurityTransfer": "equityCompensationTransfer",
})

# TX_PLAN_SECURITY_X -> TX_EQUITY_COMPENSATION_X
PLAN_SECURITY_OBJECT_TYPE_MAP: Mapping[str, str] = MappingProxyType({
    "TX_PLAN_SECURITY_ISSUANCE": "TX_EQUITY_COMPENSATION_ISSUANCE",
    "TX_PLAN_SECURITY_EXERCISE": "TX_EQUITY_COMPENSATION_EXERCISE",
    "TX_PLAN_SECURITY_CANCELLATION": "TX_EQUITY_COMPENSATION_CANCELLATION",
    "TX_PLAN_SECURITY_ACCEPTANCE": "TX_EQUITY_COMPENSATION_ACCEPTANCE",
    "TX_PLAN_SECURITY_RELEASE": "TX_EQUITY_COMPENSATION_RELEASE",
    "TX_PLAN_SECURITY_RETRACTION": "TX_EQUITY_COMPENSATION_RETRACTION",
    "TX_PLAN_SECURITY_TRANSFER": "TX_EQUITY_COMPENSATION_TRANSFER",
})

ENTITY_TYPES: frozenset[str] = frozenset(ENTITY_TYPE_LABELS)
CANONICAL_ENTITY_TYPES: frozenset[str] = (
    ENTITY_TYPES - frozenset(PLAN_SECURITY_TO_EQUITY_COMPENSATION_MAP)
)

# Object types may arrive either as a direct category or as OBJECT + subtype
_OBJECT_TYPES = {
    Category.DOCUMENT: "document",
    Category.VESTING_TERMS: "vestingTerms",
    Category.STOCK_LEGEND_TEMPLATE: "stockLegendTemplate",
    Category.VALUATION: "valuation",
}

DIRECT_TYPE_MAP: Mapping[str, str] = MappingProxyType({
    Category.ISSUER: "issuer",
    Category.STAKEHOLDER: "stakeholder",
    Category.STOCK_CLASS: "stockClass",
    Category.STOCK_PLAN: "stockPlan",
    **_OBJECT_TYPES,
})

OBJECT_SUBTYPE_MAP: Mapping[str, str] = MappingProxyType(dict(_OBJECT_TYPES))

TRANSACTION_SUBTYPE_MAP: Mapping[str, str] = MappingProxyType({
    # Stock transactions
    "TX_STOCK_ISSUANCE": "stockIssuance",
    "TX_STOCK_CANCELLATION": "stockCancellation",
    "TX_STOCK_TRANSFER": "stockTransfer",
    "TX_STOCK_ACCEPTANCE": "stockAcceptance",
    "TX_STOCK_CONVERSION": "stockConversion",
    "TX_STOCK_REPURCHASE": "stockRepurchase",
    "TX_STOCK_REISSUANCE": "stockReissuance",
    "TX_STOCK_RETRACTION": "stockRetraction",
    "TX_STOCK_CONSOLIDATION": "stockConsolidation",

    # Equity compensation
    "TX_EQUITY_COMPENSATION_ISSUANCE": "equityCompensationIssuance",
    "TX_EQUITY_COMPENSATION_CANCELLATION": "equityCompensationCancellation",
    "TX_EQUITY_COMPENSATION_TRANSFER": "equityCompensationTransfer",
    "TX_EQUITY_COMPENSATION_ACCEPTANCE": "equityCompensationAcceptance",
    "TX_EQUITY_COMPENSATION_EXERCISE": "equityCompensationExercise",
    "TX_EQUITY_COMPENSATION_RELEASE": "equityCompensationRelease",
    "TX_EQUITY_COMPENSATION_REPRICING": "equityCompensationRepricing",
    "TX_EQUITY_COMPENSATION_RETRACTION": "equityCompensationRetraction",

    # Convertibles
    "TX_CONVERTIBLE_ISSUANCE": "convertibleIssuance",
    "TX_CONVERTIBLE_CANCELLATION": "convertibleCancellation",
    "TX_CONVERTIBLE_TRANSFER": "convertibleTransfer",
    "TX_CONVERTIBLE_ACCEPTANCE": "convertibleAcceptance",
    "TX_CONVERTIBLE_CONVERSION": "convertibleConversion",
    "TX_CONVERTIBLE_RETRACTION": "convertibleRetraction",

    # Warrants
    "TX_WARRANT_ISSUANCE": "warrantIssuance",
    "TX_WARRANT_CANCELLATION": "warrantCancellation",
    "TX_WARRANT_TRANSFER": "warrantTransfer",
    "TX_WARRANT_ACCEPTANCE": "warrantAcceptance",
    "TX_WARRANT_EXERCISE": "warrantExercise",
    "TX_WARRANT_RETRACTION": "warrantRetraction",

    # Stock class adjustments
    "TX_STOCK_CLASS_AUTHORIZED_SHARES_ADJUSTMENT": "stockClassAuthorizedSharesAdjustment",
    "TX_STOCK_CLASS_CONVERSION_RATIO_ADJUSTMENT": "stockClassConversionRatioAdjustment",
    "TX_STOCK_CLASS_SPLIT": "stockClassSplit",
    "TX_ISSUER_AUTHORIZED_SHARES_ADJUSTMENT": "issuerAuthorizedSharesAdjustment",

    # Stock plan events
    "TX_STOCK_PLAN_POOL_ADJUSTMENT": "stockPlanPoolAdjustment",
    "TX_STOCK_PLAN_RETURN_TO_POOL": "stockPlanReturnToPool",

    # Vesting events
    "TX_VESTING_ACCELERATION": "vestingAcceleration",
    "TX_VESTING_EVENT": "vestingEvent",
    "TX_VESTING_START": "vestingStart",

    # Stakeholder events
    "TX_STAKEHOLDER_RELATIONSHIP_CHANGE_EVENT": "stakeholderRelationshipChangeEvent",
    "TX_STAKEHOLDER_STATUS_CHANGE_EVENT": "stakeholderStatusChangeEvent",
})


def is_entity_type(value: Any) -> bool:
    """Return True if value is a known entity type tag (canonical or alias)."""
    return isinstance(value, str) and value in ENTITY_TYPES


def is_plan_security_entity_type(value: str) -> bool:
    """Return True if value is a planSecurity* alias tag."""
    return value in PLAN_SECURITY_TO_EQUITY_COMPENSATION_MAP


def is_plan_security_object_type(value: str) -> bool:
    """Return True if value is a TX_PLAN_SECURITY_* object type."""
    return value in PLAN_SECURITY_OBJECT_TYPE_MAP


def normalize_entity_type(tag: str) -> str:
    """
    Resolve an entity type tag to its canonical form.

    Canonical tags (and unknown values) are returned unchanged.

    Args:
        tag: Entity type tag, possibly a plan security alias

    Returns:
        Canonical entity type tag

    Example:
        >>> normalize_entity_type("planSecurityIssuance")
        'equityCompensationIssuance'
    """
    return PLAN_SECURITY_TO_EQUITY_COMPENSATION_MAP.get(tag, tag)


def normalize_kind_discriminant(value: str) -> str:
    """
    Resolve a payload ``object_type`` value to its canonical form.

    Args:
        value: Object type such as ``TX_PLAN_SECURITY_ISSUANCE``

    Returns:
        Canonical object type (``TX_EQUITY_COMPENSATION_ISSUANCE``)
    """
    return PLAN_SECURITY_OBJECT_TYPE_MAP.get(value, value)


def normalize_ocf_data(data: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Normalize the ``object_type`` field of an OCF payload.

    Returns a shallow copy when the field changes; otherwise the input
    itself is returned (non-mapping values included). The input is never
    mutated.

    Args:
        data: OCF payload

    Returns:
        Payload with a canonical ``object_type``
    """
    if not isinstance(data, Mapping):
        return data

    object_type = data.get("object_type")
    if isinstance(object_type, str) and is_plan_security_object_type(object_type):
        normalized = dict(data)
        normalized["object_type"] = PLAN_SECURITY_OBJECT_TYPE_MAP[object_type]
        return normalized
    return data


def resolve_category(category: str, subtype: str | None = None) -> str | None:
    """
    Resolve a categorized upstream type into a canonical entity type.

    The category either names the type directly (``STAKEHOLDER``,
    ``DOCUMENT``) or is a generic wrapper (``OBJECT``, ``TRANSACTION``)
    whose real type lives in ``subtype``. Transaction subtypes are alias
    normalized first, so ``TX_PLAN_SECURITY_*`` resolves as well.

    Args:
        category: Category code
        subtype: Subtype for OBJECT and TRANSACTION categories

    Returns:
        Canonical entity type, or None when the combination is unsupported
    """
    if category in DIRECT_TYPE_MAP:
        return DIRECT_TYPE_MAP[category]

    if not subtype:
        return None

    if category == Category.OBJECT:
        return OBJECT_SUBTYPE_MAP.get(subtype)

    if category == Category.TRANSACTION:
        return TRANSACTION_SUBTYPE_MAP.get(normalize_kind_discriminant(subtype))

    return None


def label(tag: str, count: int) -> str:
    """
    Build a human-readable label for a number of entities.

    Only meant for operator-facing messages.

    Args:
        tag: Entity type tag
        count: Number of entities (1 selects the singular form)

    Returns:
        Label such as "1 Stock Class" or "3 Stock Classes"

    Raises:
        ValueError: If tag is not a known entity type
    """
    try:
        singular, plural = ENTITY_TYPE_LABELS[tag]
    except KeyError:
        raise ValueError(f"Unknown entity type: {tag!r}") from None

    return f"{count} {singular if count == 1 else plural}"
