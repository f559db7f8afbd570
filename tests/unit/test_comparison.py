"""
Unit tests for ocf.comparison

Tests for semantic equality of OCF payloads: numeric normalization,
undefined-like equivalence, field exclusion, array handling and the
difference descriptions.
"""

import pytest

from ocf.comparison import (
    DEFAULT_DEPRECATED_FIELDS,
    DEFAULT_INTERNAL_FIELDS,
    ComparisonOptions,
    ComparisonResult,
    compare,
    diff_payloads,
    is_equal,
    is_undefined_like,
    normalize_scalar,
    strip_internal_fields,
)


class TestComparisonOptions:
    """Test ComparisonOptions construction"""

    def test_defaults(self):
        """Test default field policy"""
        # Arrange & Act
        options = ComparisonOptions()

        # Assert
        assert options.ignored_fields == DEFAULT_INTERNAL_FIELDS
        assert options.deprecated_fields == DEFAULT_DEPRECATED_FIELDS
        assert "_id" in options.excluded_fields
        assert "option_grant_type" in options.excluded_fields

    def test_collections_are_frozen(self):
        """Test any iterable is stored as a frozenset"""
        options = ComparisonOptions(ignored_fields=["a", "b"], deprecated_fields=("c",))

        assert options.ignored_fields == frozenset({"a", "b"})
        assert options.deprecated_fields == frozenset({"c"})

    def test_string_is_rejected(self):
        """Test a bare string is not mistaken for a set of characters"""
        with pytest.raises(TypeError, match="ignored_fields"):
            ComparisonOptions(ignored_fields="_id")

    def test_from_fields_falls_back_to_defaults(self):
        """Test omitted lists keep the defaults"""
        options = ComparisonOptions.from_fields(ignored_fields=["custom"])

        assert options.ignored_fields == frozenset({"custom"})
        assert options.deprecated_fields == DEFAULT_DEPRECATED_FIELDS

    def test_options_are_immutable(self):
        """Test options cannot be modified after construction"""
        options = ComparisonOptions()
        with pytest.raises(AttributeError):
            options.ignored_fields = frozenset()


class TestNormalizeScalar:
    """Test scalar normalization"""

    @pytest.mark.parametrize("value", ["100", "100.00", 100, 100.0, "100.0000000000", " 100 "])
    def test_numeric_forms_normalize_identically(self, value):
        """Test numbers and numeric strings share one form"""
        assert normalize_scalar(value) == "100.0000000000"

    def test_exponent_notation(self):
        """Test exponent notation is numeric"""
        assert normalize_scalar("1e3") == "1000.0000000000"

    def test_negative_zero_is_zero(self):
        """Test -0 normalizes to plain zero"""
        assert normalize_scalar(-0.0) == normalize_scalar(0)
        assert normalize_scalar("-0.000") == "0.0000000000"

    def test_underscores_are_not_numeric(self):
        """Test digit separators are left as text"""
        assert normalize_scalar("1_000") == "1_000"

    def test_booleans_are_not_numbers(self):
        """Test booleans are kept as booleans"""
        assert normalize_scalar(True) is True
        assert normalize_scalar(False) is False

    def test_timestamp_keeps_time_of_day(self):
        """Test ISO timestamps are only trimmed, never cut to their date"""
        assert normalize_scalar(" 2024-01-15T00:00:00.000Z") == "2024-01-15T00:00:00.000Z"
        assert normalize_scalar("2024-01-15T10:30+02:00") == "2024-01-15T10:30+02:00"
        assert normalize_scalar("2024-01-15") == "2024-01-15"

    def test_text_starting_with_date_is_not_a_date(self):
        """Test strings that only start with a date stay text"""
        assert normalize_scalar("2024-01-15TICKET") == "2024-01-15TICKET"

    def test_text_is_trimmed(self):
        """Test plain strings are trimmed"""
        assert normalize_scalar("  Common Stock ") == "Common Stock"


class TestIsUndefinedLike:
    """Test undefined-like detection"""

    @pytest.mark.parametrize("value", [
        None,
        "",
        "   ",
        [],
        {},
        [None, ""],
        {"a": None, "b": []},
        {"starting_share_number": "0", "ending_share_number": "0"},
        [{"starting_share_number": 0, "ending_share_number": "0.00"}],
    ])
    def test_undefined_like_values(self, value):
        """Test values that carry no information"""
        assert is_undefined_like(value) is True

    @pytest.mark.parametrize("value", [
        0,
        False,
        "0",
        [0],
        {"a": 1},
        {"starting_share_number": "1", "ending_share_number": "100"},
        [{"starting_share_number": "0", "ending_share_number": "0"}, {"x": 1}],
    ])
    def test_defined_values(self, value):
        """Test values that carry information"""
        assert is_undefined_like(value) is False

    def test_false_field_is_defined(self):
        """Test an object holding False carries information"""
        assert is_undefined_like({"remainder": False}) is False
        assert is_undefined_like([False]) is False


class TestCompare:
    """Test compare and is_equal"""

    def test_number_equals_numeric_string(self):
        """Test a number and its string form are equal"""
        # Arrange
        desired = {"quantity": 22500, "share_price": {"amount": "1.5", "currency": "USD"}}
        actual = {"quantity": "22500.0000000000", "share_price": {"amount": 1.50, "currency": "USD"}}

        # Act
        result = compare(desired, actual)

        # Assert
        assert result.equal is True
        assert result.differences == []

    def test_numeric_difference_is_reported(self):
        """Test different numbers produce a difference at the field path"""
        result = compare({"quantity": "100"}, {"quantity": "101"})

        assert result.equal is False
        assert result.differences == ['quantity: "100" != "101"']

    def test_date_differs_from_timestamp(self):
        """Test a date and a timestamp on the same day are different values"""
        assert is_equal({"date": "2024-01-15"}, {"date": "2024-01-15T00:00:00.000Z"}) is False

    def test_same_day_timestamps_differ(self):
        """Test two timestamps on the same day are compared in full"""
        # Arrange
        desired = {"date": "2024-01-01T09:00:00Z"}
        actual = {"date": "2024-01-01T17:30:00Z"}

        # Act
        result = compare(desired, actual)

        # Assert
        assert result.equal is False
        assert result.differences == ['date: "2024-01-01T09:00:00Z" != "2024-01-01T17:30:00Z"']

    def test_timezone_offset_is_significant(self):
        """Test timestamps with different offsets are not collapsed"""
        assert is_equal({"ts": "2024-01-01T00:00:00Z"}, {"ts": "2024-01-01T23:59:59+05:00"}) is False

    def test_identical_timestamps_equal(self):
        """Test timestamps equal after trimming"""
        assert is_equal({"ts": "2024-01-01T09:00:00Z "}, {"ts": "2024-01-01T09:00:00Z"}) is True

    def test_different_dates_differ(self):
        """Test timestamps on different days are not equal"""
        assert is_equal({"date": "2024-01-15"}, {"date": "2024-01-16T00:00:00Z"}) is False

    def test_date_prefixed_text_is_not_a_date(self):
        """Test "2024-01-15TICKET" is not equal to "2024-01-15" """
        assert is_equal({"ref": "2024-01-15TICKET"}, {"ref": "2024-01-15"}) is False

    def test_remainder_false_differs_from_absent(self):
        """Test remainder=False does not match a payload without remainder"""
        # Arrange
        desired = {"portion": {"numerator": "1", "denominator": "4", "remainder": False}}
        actual = {"portion": {"numerator": "1", "denominator": "4"}}

        # Act
        result = compare(desired, actual)

        # Assert
        assert result.equal is False
        assert result.differences == ["portion.remainder: one side is empty/undefined"]
        assert is_equal(actual, desired) is False

    def test_false_fields_equal(self):
        """Test False on both sides is equal"""
        assert is_equal({"remainder": False}, {"remainder": False}) is True

    def test_remainder_true_differs_from_absent(self):
        """Test remainder=True is a real value"""
        result = compare({"portion": {"remainder": True}}, {"portion": {}})

        assert result.equal is False
        assert result.differences == ["portion: one side is empty/undefined"]

    def test_zero_share_range_equals_absent(self):
        """Test a 0-0 share number range matches a missing field"""
        desired = {
            "id": "si-1",
            "share_numbers_issued": [{"starting_share_number": "0", "ending_share_number": "0"}],
        }
        actual = {"id": "si-1"}

        assert is_equal(desired, actual) is True

    def test_empty_collections_equal_absent(self):
        """Test empty arrays, empty strings and None match missing fields"""
        desired = {"id": "sh-1", "comments": [], "email": "", "address": None}
        actual = {"id": "sh-1", "address": {}}

        assert is_equal(desired, actual) is True

    def test_missing_field_is_reported(self):
        """Test a field present on one side only is a difference"""
        result = compare({"name": "Ada"}, {})

        assert result.equal is False
        assert result.differences == ["name: one side is empty/undefined"]

    def test_ignored_fields_are_skipped(self):
        """Test internal bookkeeping fields never differ"""
        desired = {"id": "x", "_id": "abc", "createdAt": "2024-01-01", "issuer": "i-1"}
        actual = {"id": "x", "__v": 3, "updatedAt": "2025-01-01", "tx_hash": "0xff"}

        assert is_equal(desired, actual) is True

    def test_deprecated_fields_are_skipped(self):
        """Test deprecated fields never differ"""
        assert is_equal({"option_grant_type": "ISO"}, {"option_grant_type": "NSO"}) is True

    def test_custom_options_compare_internal_fields(self):
        """Test callers can narrow the ignored fields"""
        options = ComparisonOptions(ignored_fields=frozenset())

        assert is_equal({"_id": "a"}, {"_id": "b"}, options) is False

    def test_nested_difference_path(self):
        """Test differences use dotted and bracketed paths"""
        result = compare({"a": {"b": [{"c": 1}]}}, {"a": {"b": [{"c": 2}]}})

        assert result.differences == ["a.b[0].c: 1 != 2"]

    def test_type_mismatch_is_a_difference(self):
        """Test object vs array does not raise"""
        result = compare({"terms": {"x": 1}}, {"terms": [1]})

        assert result.equal is False
        assert result.differences == ["terms: type mismatch (object vs array)"]

    def test_number_vs_text_is_a_difference(self):
        """Test number vs non-numeric string does not raise"""
        result = compare({"quantity": 5}, {"quantity": "five"})

        assert result.equal is False
        assert len(result.differences) == 1
        assert result.differences[0].startswith("quantity: ")

    def test_boolean_vs_number_differ(self):
        """Test True is not equal to 1"""
        assert is_equal({"flag": True}, {"flag": 1}) is False

    def test_array_length_mismatch(self):
        """Test arrays of different meaningful length differ"""
        result = compare({"items": ["a", "b"]}, {"items": ["a"]})

        assert result.equal is False
        assert result.differences == ["items: array length mismatch (2 vs 1)"]

    def test_array_padding_with_undefined_elements(self):
        """Test trailing undefined-like elements do not cause a mismatch"""
        assert is_equal({"items": ["a", None]}, {"items": ["a"]}) is True
        assert is_equal({"items": ["a", ""]}, {"items": ["a"]}) is True

    def test_arrays_are_positional(self):
        """Test arrays compare by position"""
        assert is_equal({"items": ["a", "b"]}, {"items": ["b", "a"]}) is False

    def test_root_undefined_values(self):
        """Test undefined-like roots"""
        assert is_equal(None, {}) is True
        assert is_equal(None, {"a": 1}) is False

    def test_collects_every_difference(self):
        """Test compare reports all differing fields"""
        result = compare({"a": 1, "b": 2, "c": 3}, {"a": 9, "b": 2, "c": 8})

        assert result.differences == ["a: 1 != 9", "c: 3 != 8"]

    def test_is_equal_agrees_with_compare(self):
        """Test the early-stopping walk agrees with the full walk"""
        pairs = [
            ({"a": 1}, {"a": "1"}),
            ({"a": [1, 2]}, {"a": [1]}),
            ({"a": {"b": None}}, {}),
            ({"a": "x"}, {"a": "y"}),
        ]
        for desired, actual in pairs:
            assert is_equal(desired, actual) == compare(desired, actual).equal

    def test_inputs_are_not_mutated(self):
        """Test comparison leaves its inputs untouched"""
        desired = {"portion": {"remainder": False}, "_id": "x", "q": "1"}
        actual = {"q": 1}
        snapshot = ({"portion": {"remainder": False}, "_id": "x", "q": "1"}, {"q": 1})

        compare(desired, actual)

        assert (desired, actual) == snapshot

    def test_diff_payloads(self):
        """Test diff_payloads returns the difference list"""
        assert diff_payloads({"a": 1}, {"a": 2}) == ["a: 1 != 2"]
        assert diff_payloads({"a": 1}, {"a": "1.0"}) == []

    def test_result_to_dict(self):
        """Test ComparisonResult serialization"""
        result = ComparisonResult(equal=False, differences=["a: 1 != 2"])

        assert result.to_dict() == {"equal": False, "differences": ["a: 1 != 2"]}


class TestStripInternalFields:
    """Test strip_internal_fields"""

    def test_strips_recursively(self):
        """Test default fields are removed at every level"""
        # Arrange
        obj = {
            "id": "x",
            "_id": "mongo",
            "nested": {"__v": 0, "keep": 1},
            "items": [{"tx_hash": "0x1", "value": 1}],
            "option_grant_type": "ISO",
        }

        # Act
        result = strip_internal_fields(obj)

        # Assert
        assert result == {"id": "x", "nested": {"keep": 1}, "items": [{"value": 1}]}
        assert obj["_id"] == "mongo"

    def test_custom_fields(self):
        """Test a custom field list replaces the defaults"""
        result = strip_internal_fields({"_id": "a", "secret": "b"}, fields=["secret"])

        assert result == {"_id": "a"}
