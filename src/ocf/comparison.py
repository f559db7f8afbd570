"""
Semantic equality for OCF payloads.

Two snapshots of the same OCF object rarely match byte for byte: a database
stores ``22500`` where the ledger reads back ``"22500.0000000000"``, one side
omits an empty list the other side carries, text picks up stray whitespace.
This module compares payloads after normalizing those variations away and
reports the field paths that still differ.
"""

import json
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

# System bookkeeping fields that are not part of the OCF data model
DEFAULT_INTERNAL_FIELDS: frozenset[str] = frozenset({
    "__v",
    "_id",
    "_source",
    "issuer",
    "tx_hash",
    "createdAt",
    "updatedAt",
    "is_onchain_synced",
    "vestings",
})

# Deprecated OCF fields that may be upgraded or dropped on round trip
DEFAULT_DEPRECATED_FIELDS: frozenset[str] = frozenset({
    "option_grant_type",
})

NUMERIC_PRECISION = 10

_NUMERIC_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_ZERO = f"{Decimal(0):.{NUMERIC_PRECISION}f}"


@dataclass(frozen=True)
class ComparisonOptions:
    """
    Field policy for a comparison.

    Any iterable of field names is accepted and stored as a frozenset, so
    one options object can be shared between concurrent callers.
    """

    ignored_fields: frozenset[str] = DEFAULT_INTERNAL_FIELDS
    deprecated_fields: frozenset[str] = DEFAULT_DEPRECATED_FIELDS

    def __post_init__(self) -> None:
        for name in ("ignored_fields", "deprecated_fields"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise TypeError(f"{name} must be a collection of field names, not a string")
            object.__setattr__(self, name, frozenset(value))

    @property
    def excluded_fields(self) -> frozenset[str]:
        """Fields skipped entirely during comparison."""
        return self.ignored_fields | self.deprecated_fields

    @classmethod
    def from_fields(
        cls,
        ignored_fields: Iterable[str] | None = None,
        deprecated_fields: Iterable[str] | None = None,
    ) -> "ComparisonOptions":
        """
        Build options, falling back to the defaults for omitted lists.

        Args:
            ignored_fields: Internal fields to skip (None for the defaults)
            deprecated_fields: Deprecated fields to skip (None for the defaults)

        Returns:
            ComparisonOptions instance
        """
        return cls(
            ignored_fields=(
                DEFAULT_INTERNAL_FIELDS if ignored_fields is None else frozenset(ignored_fields)
            ),
            deprecated_fields=(
                DEFAULT_DEPRECATED_FIELDS
                if deprecated_fields is None
                else frozenset(deprecated_fields)
            ),
        )


DEFAULT_OPTIONS = ComparisonOptions()


@dataclass
class ComparisonResult:
    """Outcome of comparing two payloads."""

    equal: bool
    differences: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "equal": self.equal,
            "differences": list(self.differences),
        }


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _to_decimal(value: Any) -> Decimal | None:
    """Parse a number or numeric string into a finite Decimal."""
    if _is_number(value):
        try:
            number = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            return None
    elif isinstance(value, str) and _NUMERIC_PATTERN.match(value.strip()):
        number = Decimal(value.strip())
    else:
        return None

    return number if number.is_finite() else None


def _format_decimal(number: Decimal) -> str:
    text = f"{number:.{NUMERIC_PRECISION}f}"
    # -0 and values that round to zero compare as plain zero
    if text.lstrip("-") == _ZERO:
        return _ZERO
    return text


def _is_zero_share_range(value: Any) -> bool:
    if not isinstance(value, Mapping):
        return False
    if "starting_share_number" not in value or "ending_share_number" not in value:
        return False

    start = _to_decimal(value["starting_share_number"])
    end = _to_decimal(value["ending_share_number"])
    return start is not None and end is not None and start == 0 and end == 0


def is_undefined_like(value: Any) -> bool:
    """
    Check whether a value carries no information for comparison purposes.

    Undefined-like values are None, blank strings, empty arrays and objects,
    arrays or objects made only of undefined-like values, a share number
    range of 0-0, and arrays made only of 0-0 ranges. Booleans, including
    False, always carry information.

    Args:
        value: Value to check

    Returns:
        True if the value is undefined-like
    """
    if value is None:
        return True

    if isinstance(value, str):
        return value.strip() == ""

    if _is_array(value):
        if all(is_undefined_like(item) for item in value):
            return True
        return all(_is_zero_share_range(item) for item in value)

    if isinstance(value, Mapping):
        if _is_zero_share_range(value):
            return True
        return all(is_undefined_like(item) for item in value.values())

    return False


def normalize_scalar(value: Any) -> Any:
    """
    Normalize a primitive value for comparison.

    - Numbers and numeric strings become fixed 10-decimal strings
    - Other strings are trimmed, so dates and timestamps compare as text

    Args:
        value: Primitive value

    Returns:
        Normalized value
    """
    if isinstance(value, bool):
        return value

    if _is_number(value):
        number = _to_decimal(value)
        return _format_decimal(number) if number is not None else str(value)

    if isinstance(value, str):
        trimmed = value.strip()

        number = _to_decimal(trimmed)
        if number is not None:
            return _format_decimal(number)

        return trimmed

    return value


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if _is_array(value):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _render(value: Any) -> str:
    try:
        return json.dumps(value, default=str, sort_keys=True)
    except (TypeError, ValueError):
        return repr(value)


class _Comparator:
    """
    Lock-step walker over two payloads.

    When ``differences`` is None the walk stops at the first mismatch and
    no difference strings are built.
    """

    def __init__(self, options: ComparisonOptions, differences: list[str] | None):
        self.excluded = options.excluded_fields
        self.differences = differences

    def _record(self, path: str, message: str) -> None:
        if self.differences is not None:
            self.differences.append(f"{path or '(root)'}: {message}")

    @property
    def _stop_early(self) -> bool:
        return self.differences is None

    def _undefined(self, value: Any) -> bool:
        return is_undefined_like(value)

    def compare(self, a: Any, b: Any, path: str) -> bool:
        a_undefined = self._undefined(a)
        b_undefined = self._undefined(b)

        if a_undefined and b_undefined:
            return True

        if a_undefined or b_undefined:
            if self.differences is not None:
                self._record(path, f"{_render(a)} != {_render(b)}")
            return False

        if isinstance(a, Mapping) and isinstance(b, Mapping):
            return self._compare_objects(a, b, path)

        if _is_array(a) and _is_array(b):
            return self._compare_arrays(a, b, path)

        if isinstance(a, Mapping) or isinstance(b, Mapping) or _is_array(a) or _is_array(b):
            if self.differences is not None:
                self._record(path, f"type mismatch ({_type_name(a)} vs {_type_name(b)})")
            return False

        if normalize_scalar(a) != normalize_scalar(b):
            if self.differences is not None:
                self._record(path, f"{_render(a)} != {_render(b)}")
            return False

        return True

    def _compare_arrays(self, a: Any, b: Any, path: str) -> bool:
        if len(a) != len(b):
            kept_a = sum(1 for item in a if not self._undefined(item))
            kept_b = sum(1 for item in b if not self._undefined(item))
            if kept_a != kept_b:
                self._record(path, f"array length mismatch ({len(a)} vs {len(b)})")
                return False

        all_match = True
        for index in range(max(len(a), len(b))):
            item_a = a[index] if index < len(a) else None
            item_b = b[index] if index < len(b) else None
            if not self.compare(item_a, item_b, f"{path}[{index}]"):
                all_match = False
                if self._stop_early:
                    return False

        return all_match

    def _compare_objects(self, a: Mapping, b: Mapping, path: str) -> bool:
        keys = [key for key in a if key not in self.excluded]
        keys.extend(key for key in b if key not in self.excluded and key not in a)

        all_match = True
        for key in keys:
            child_a = a.get(key)
            child_b = b.get(key)
            child_path = f"{path}.{key}" if path else str(key)

            a_undefined = self._undefined(child_a)
            b_undefined = self._undefined(child_b)

            if a_undefined and b_undefined:
                continue

            if a_undefined != b_undefined:
                self._record(child_path, "one side is empty/undefined")
                matched = False
            else:
                matched = self.compare(child_a, child_b, child_path)

            if not matched:
                all_match = False
                if self._stop_early:
                    return False

        return all_match


def compare(
    desired: Any,
    actual: Any,
    options: ComparisonOptions | None = None,
) -> ComparisonResult:
    """
    Compare two OCF values and collect the differing field paths.

    Never raises for JSON-like input: anything that cannot be reconciled
    (object vs array, number vs text) becomes a difference.

    Args:
        desired: Expected value (typically the source of truth)
        actual: Observed value (typically read back from the ledger)
        options: Field policy (default: ``ComparisonOptions()``)

    Returns:
        ComparisonResult with the equality flag and difference descriptions

    Example:
        >>> compare({"amount": 22500}, {"amount": "22500"}).equal
        True
    """
    differences: list[str] = []
    equal = _Comparator(options or DEFAULT_OPTIONS, differences).compare(desired, actual, "")
    return ComparisonResult(equal=equal, differences=differences)


def is_equal(
    desired: Any,
    actual: Any,
    options: ComparisonOptions | None = None,
) -> bool:
    """
    Check semantic equality without collecting differences.

    Same rules as :func:`compare`, but stops at the first mismatch.

    Args:
        desired: Expected value
        actual: Observed value
        options: Field policy (default: ``ComparisonOptions()``)

    Returns:
        True if the values are semantically equal
    """
    return _Comparator(options or DEFAULT_OPTIONS, None).compare(desired, actual, "")


def diff_payloads(
    desired: Any,
    actual: Any,
    options: ComparisonOptions | None = None,
) -> list[str]:
    """Return the list of differences between two OCF values."""
    return compare(desired, actual, options).differences


def strip_internal_fields(
    obj: Mapping[str, Any],
    fields: Iterable[str] | None = None,
) -> dict[str, Any]:
    """
    Remove internal and deprecated fields from an OCF object, recursively.

    Args:
        obj: OCF object
        fields: Fields to remove (default: internal plus deprecated fields)

    Returns:
        New dictionary without the given fields
    """
    to_remove = (
        DEFAULT_INTERNAL_FIELDS | DEFAULT_DEPRECATED_FIELDS
        if fields is None
        else frozenset(fields)
    )
    return _strip(obj, to_remove)


def _strip(value: Any, to_remove: frozenset[str]) -> Any:
    if isinstance(value, Mapping):
        return {
            key: _strip(item, to_remove)
            for key, item in value.items()
            if key not in to_remove
        }
    if _is_array(value):
        return [_strip(item, to_remove) for item in value]
    return value
