"""Tests for union, discriminated union and xor validators."""

from enum import Enum

import pytest

from dataknobs_schema import ErrorKind, SchemaDefinitionError, Validator, ValidatorKind, s
from dataknobs_schema.leaves import StringValidator


class Kind(Enum):
    A = "a"
    B = "b"


class CountingString(StringValidator):
    """String validator that records how often it runs."""

    def __init__(self, calls):
        super().__init__()
        self.calls = calls

    @property
    def fast_check(self):
        return None

    def _parse(self, value, ctx):
        self.calls.append(value)
        return super()._parse(value, ctx)


class TestUnion:
    """Test ordered first-match unions."""

    def test_first_match_wins(self):
        """Test that the first succeeding option's output is returned."""
        schema = s.union(s.string().transform(lambda v: "first"), s.string().transform(lambda v: "second"))
        assert schema.parse("x") == "first"

    def test_matches_any_option(self):
        """Test that each option can match."""
        schema = s.union(s.string(), s.number())
        assert schema.parse("a") == "a"
        assert schema.parse(1) == 1

    def test_single_aggregated_issue(self):
        """Test that no match yields exactly one issue with every option's reason."""
        result = s.union(s.string(), s.number()).safe_parse(True)
        assert len(result.issues) == 1
        issue = result.error.first_issue
        assert issue.kind is ErrorKind.INVALID_UNION
        assert issue.context["reasons"] == [
            "Expected string, received boolean",
            "Expected number, received boolean",
        ]
        assert "Expected string" in issue.message
        assert "Expected number" in issue.message

    def test_nested_reasons_carry_paths(self):
        """Test that object option failures mention where they failed."""
        schema = s.union(s.object({"a": s.string()}), s.number())
        issue = schema.safe_parse({"a": 1}).error.first_issue
        assert issue.context["reasons"][0] == "Expected string, received integer at a"
        assert issue.context["errors"][0][0].path == ("a",)

    def test_type_precheck_skips_options(self):
        """Test that options ruled out by type are not run when another matches."""
        calls = []
        schema = s.union(CountingString(calls), s.number())
        assert schema.parse(5) == 5
        assert calls == []

    def test_skipped_options_reported_on_failure(self):
        """Test that skipped options still contribute to the diagnostic."""
        calls = []
        schema = s.union(CountingString(calls), s.number().positive())
        result = schema.safe_parse(-1)
        assert calls == [-1]
        assert len(result.error.first_issue.context["reasons"]) == 2

    def test_or_operator(self):
        """Test building unions with the | operator."""
        schema = s.string() | s.number() | s.none()
        assert schema.kind is ValidatorKind.UNION
        assert len(schema.options) == 3
        assert schema.is_valid(None)

    def test_empty_union_rejected(self):
        """Test that a union needs at least one option."""
        with pytest.raises(SchemaDefinitionError):
            s.union()

    def test_list_of_options(self):
        """Test passing options as a single list."""
        assert s.union([s.string(), s.number()]).is_valid(1)


class TestDiscriminatedUnion:
    """Test discriminator-keyed dispatch."""

    def test_dispatch(self, shape_schema):
        """Test that the discriminator selects the option."""
        assert shape_schema.parse({"type": "circle", "radius": 1}) == {"type": "circle", "radius": 1}
        assert shape_schema.parse({"type": "square", "side": 2}) == {"type": "square", "side": 2}

    def test_option_errors_path_qualified(self, shape_schema):
        """Test that the selected option's field errors surface normally."""
        issue = shape_schema.safe_parse({"type": "square", "side": -1}).error.first_issue
        assert issue.kind is ErrorKind.TOO_SMALL
        assert issue.path == ("side",)

    def test_unknown_discriminator(self, shape_schema):
        """Test that an unmatched discriminator lists the valid values."""
        issue = shape_schema.safe_parse({"type": "triangle"}).error.first_issue
        assert issue.kind is ErrorKind.INVALID_DISCRIMINATOR
        assert issue.path == ("type",)
        assert issue.context["options"] == ["circle", "square"]
        assert issue.context["received"] == "triangle"

    def test_non_object_input(self, shape_schema):
        """Test that non-mappings are rejected like the object validator does."""
        issue = shape_schema.safe_parse(["circle"]).error.first_issue
        assert issue.kind is ErrorKind.INVALID_TYPE
        assert issue.context["expected"] == "object"

    def test_duplicate_discriminator_fails_at_construction(self):
        """Test that duplicate discriminator values raise immediately."""
        a = s.object({"type": s.literal("x"), "a": s.string()})
        b = s.object({"type": s.literal("x"), "b": s.string()})
        with pytest.raises(SchemaDefinitionError) as exc_info:
            s.discriminated_union("type", a, b)
        assert exc_info.value.context["value"] == "x"

    def test_bool_and_int_discriminators_distinct(self):
        """Test that True and 1 are different discriminator values."""
        schema = s.discriminated_union(
            "flag",
            s.object({"flag": s.literal(True), "a": s.string()}),
            s.object({"flag": s.literal(1), "b": s.string()}),
        )
        assert schema.parse({"flag": 1, "b": "x"}) == {"flag": 1, "b": "x"}
        assert not schema.is_valid({"flag": True, "b": "x"})

    @pytest.mark.parametrize("option,message", [
        (s.string(), "not an object"),
        (s.object({"other": s.string()}), "has no 'type' field"),
        (s.object({"type": s.string()}), "must be a literal or enum"),
    ])
    def test_invalid_options_rejected(self, option, message):
        """Test construction-time checks on each option."""
        with pytest.raises(SchemaDefinitionError) as exc_info:
            s.discriminated_union("type", s.object({"type": s.literal("ok")}), option)
        assert message in str(exc_info.value)

    def test_enum_discriminator(self):
        """Test enum discriminators, including Python Enum members as input."""
        schema = s.discriminated_union(
            "kind",
            s.object({"kind": s.enum(Kind), "value": s.number()}),
            s.object({"kind": s.literal("c"), "text": s.string()}),
        )
        assert schema.parse({"kind": "a", "value": 1}) == {"kind": Kind.A, "value": 1}
        assert schema.parse({"kind": Kind.B, "value": 2})["kind"] is Kind.B
        assert schema.discriminator_values == ["a", "b", "c"]

    def test_dispatch_runs_one_option(self):
        """Test that only the selected option validates the input."""
        calls = []
        options = [
            s.object({"type": s.literal(f"t{i}"), "v": CountingString(calls)})
            for i in range(50)
        ]
        schema = s.discriminated_union("type", *options)
        schema.parse({"type": "t42", "v": "x"})
        assert calls == ["x"]
        assert schema.option_for("t42") is options[42]


class TestXor:
    """Test exclusive unions."""

    def test_exactly_one_match(self):
        """Test that a single match succeeds."""
        schema = s.xor(s.string(), s.number())
        assert schema.parse("a") == "a"

    def test_multiple_matches_fail(self):
        """Test that matching several options fails."""
        schema = s.xor(s.number(), s.number().int())
        issue = schema.safe_parse(3).error.first_issue
        assert issue.kind is ErrorKind.INVALID_UNION
        assert issue.context["matches"] == 2
        assert schema.parse(2.5) == 2.5

    def test_no_match_fails(self):
        """Test that matching nothing fails with every reason."""
        issue = s.xor(s.string(), s.number()).safe_parse(None).error.first_issue
        assert len(issue.context["reasons"]) == 2


def test_custom_validator_subclass_is_validator():
    """Test that user subclasses participate in unions."""
    assert isinstance(CountingString([]), Validator)
