"""Tests for input coercion."""

from datetime import date, datetime, timezone

import pytest

from dataknobs_schema import MISSING, Coercer, ErrorKind, s


class TestCoercer:
    """Test the Coercer directly."""

    @pytest.fixture
    def coercer(self):
        return Coercer()

    @pytest.mark.parametrize("value,target,expected", [
        (5, "string", "5"),
        (True, "string", "true"),
        (date(2024, 1, 2), "string", "2024-01-02"),
        ("42", "number", 42),
        (" 2.5 ", "number", 2.5),
        ("0x1f", "integer", 31),
        (3.0, "integer", 3),
        ("yes", "boolean", True),
        ("OFF", "boolean", False),
        (0, "boolean", False),
        ("2024-01-02", "date", datetime(2024, 1, 2)),
        ("2024-01-02T03:04:05Z", "date", datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)),
        ("02/01/2024", "date", datetime(2024, 1, 2)),
    ])
    def test_conversions(self, coercer, value, target, expected):
        """Test successful conversions."""
        assert coercer.coerce(value, target) == expected

    @pytest.mark.parametrize("value,target", [
        ("abc", "number"),
        ("", "number"),
        (2.5, "integer"),
        ("maybe", "boolean"),
        ("someday", "date"),
        ([1], "boolean"),
    ])
    def test_unconvertible_returned_unchanged(self, coercer, value, target):
        """Test that failed conversions return the input as-is."""
        assert coercer.coerce(value, target) is value

    def test_none_and_missing_untouched(self, coercer):
        """Test that null and absent values are never coerced."""
        assert coercer.coerce(None, "string") is None
        assert coercer.coerce(MISSING, "number") is MISSING

    def test_for_target(self, coercer):
        """Test single-argument coercion functions."""
        assert coercer.for_target("integer")("12") == 12
        with pytest.raises(ValueError):
            coercer.for_target("decimal")


class TestCoerceBuilders:
    """Test the s.coerce leaves."""

    def test_coerce_number(self):
        """Test that numeric text is accepted and checks still apply."""
        assert s.coerce.number().parse("12") == 12
        assert not s.coerce.number().min(20).is_valid("12")

    def test_coerce_failure_reports_type(self):
        """Test that unconvertible input fails the usual type check."""
        issue = s.coerce.number().safe_parse("abc").error.first_issue
        assert issue.kind is ErrorKind.INVALID_TYPE
        assert issue.context["received"] == "string"

    def test_coerce_string_and_boolean(self):
        """Test string and boolean coercion."""
        assert s.coerce.string().parse(10) == "10"
        assert s.coerce.boolean().parse("no") is False

    def test_coerce_integer(self):
        """Test integer coercion keeps integral semantics."""
        assert s.coerce.integer().parse("7") == 7
        assert not s.coerce.integer().is_valid("7.5")

    def test_coerce_date(self):
        """Test date coercion from text and timestamps."""
        assert s.coerce.date().parse("2024-03-04") == datetime(2024, 3, 4)
        assert s.coerce.date().parse(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_coerced_leaf_in_union(self):
        """Test that coercing leaves are never skipped by union type pre-checks."""
        schema = s.union(s.boolean(), s.coerce.number())
        assert schema.parse("5") == 5

    def test_coerce_absent_stays_absent(self):
        """Test that optional coercing fields stay absent."""
        schema = s.object({"n": s.coerce.number().optional()})
        assert schema.parse({}) == {}
