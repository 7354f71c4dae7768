"""Tests for the exception hierarchy and issue model."""

import pytest

from dataknobs_schema import (
    ConfigurationError,
    ErrorKind,
    Issue,
    LocaleNotFoundError,
    SchemaDefinitionError,
    SchemaError,
    ValidationError,
    format_path,
)


class TestExceptionHierarchy:
    """Test exception inheritance and context."""

    def test_all_errors_share_root(self):
        """Test that every error derives from SchemaError."""
        for error_class in (SchemaDefinitionError, LocaleNotFoundError, ConfigurationError, ValidationError):
            assert issubclass(error_class, SchemaError)

    def test_schema_error_context(self):
        """Test that context is stored and defaults to empty."""
        error = SchemaDefinitionError("bad schema", context={"key": "type"})
        assert str(error) == "bad schema"
        assert error.context == {"key": "type"}
        assert SchemaError("x").context == {}

    def test_locale_not_found_context(self):
        """Test that the missing locale and available ones are reported."""
        error = LocaleNotFoundError("fr", ["en"])
        assert error.locale == "fr"
        assert error.context["available_locales"] == ["en"]
        assert "fr" in str(error)


class TestValidationError:
    """Test ValidationError construction and views."""

    def test_empty_issue_list_rejected(self):
        """Test that a ValidationError can never hold zero issues."""
        with pytest.raises(ValueError):
            ValidationError([])

    def test_single_issue_message(self):
        """Test that one issue's message becomes the error message."""
        error = ValidationError([Issue(ErrorKind.CUSTOM, message="Nope")])
        assert str(error) == "Nope"
        assert error.first_issue.message == "Nope"

    def test_multiple_issue_message(self):
        """Test that several issues are summarized by count."""
        error = ValidationError([
            Issue(ErrorKind.CUSTOM, ("a",), "first"),
            Issue(ErrorKind.CUSTOM, ("b",), "second"),
        ])
        assert str(error) == "2 validation errors"
        assert error.messages == ["first", "second"]

    def test_to_dict(self):
        """Test the serializable form."""
        error = ValidationError([Issue(ErrorKind.TOO_SMALL, ("n",), "small", {"minimum": 3})])
        data = error.to_dict()
        assert data["message"] == "small"
        assert data["issues"] == [{
            "kind": "too_small",
            "path": ["n"],
            "message": "small",
            "context": {"minimum": 3},
        }]


class TestIssue:
    """Test Issue behavior."""

    def test_issue_is_immutable(self):
        """Test that issues and their context cannot be modified."""
        issue = Issue(ErrorKind.CUSTOM, ["a"], "m", {"k": 1})
        assert issue.path == ("a",)
        with pytest.raises(AttributeError):
            issue.message = "other"
        with pytest.raises(TypeError):
            issue.context["k"] = 2

    def test_prefixed(self):
        """Test that prefixing re-homes the issue under new segments."""
        issue = Issue(ErrorKind.CUSTOM, ("name",), "m")
        moved = issue.prefixed("items", 0)
        assert moved.path == ("items", 0, "name")
        assert issue.path == ("name",)
        assert issue.prefixed() is issue

    @pytest.mark.parametrize("path,expected", [
        ((), ""),
        (("name",), "name"),
        (("items", 0, "name"), "items[0].name"),
        ((0, 1), "[0][1]"),
        (("a", "b", 2), "a.b[2]"),
    ])
    def test_format_path(self, path, expected):
        """Test dotted/bracketed path rendering."""
        assert format_path(path) == expected
