"""Tests for error views: treeify, flatten, prettify and JSON."""

import json
import re

from dataknobs_schema import ErrorKind, Issue, ValidationError, flatten_error, prettify_error, s, treeify_error

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def _error():
    return ValidationError([
        Issue(ErrorKind.CUSTOM, (), "Form is invalid"),
        Issue(ErrorKind.INVALID_TYPE, ("items", 0, "name"), "Expected string, received integer"),
        Issue(ErrorKind.TOO_SMALL, ("items", 0, "name"), "Too short"),
        Issue(ErrorKind.INVALID_TYPE, ("email",), "Expected string, received null"),
    ])


class TestTreeify:
    """Test the tree view."""

    def test_root_errors(self):
        """Test that empty-path issues land in the root bucket."""
        tree = treeify_error(_error())
        assert tree.errors == ["Form is invalid"]

    def test_nested_nodes(self):
        """Test properties and items children."""
        tree = _error().treeify()
        name = tree.properties["items"].items[0].properties["name"]
        assert name.errors == ["Expected string, received integer", "Too short"]
        assert tree.get("email").errors == ["Expected string, received null"]
        assert tree.get("missing") is None

    def test_to_dict(self):
        """Test the plain representation."""
        data = treeify_error(_error()).to_dict()
        assert data["errors"] == ["Form is invalid"]
        assert data["properties"]["items"]["items"][0]["properties"]["name"]["errors"][1] == "Too short"

    def test_items_holes(self):
        """Test that unreported indexes are None in the plain representation."""
        error = s.number().array().safe_parse([1, "x", 2, "y"]).error
        items = error.treeify().to_dict()["items"]
        assert items[0] is None
        assert items[1]["errors"]
        assert items[2] is None


class TestFlatten:
    """Test the flattened view."""

    def test_form_and_field_errors(self):
        """Test that issues split by first path segment."""
        flat = flatten_error(_error())
        assert flat.form_errors == ["Form is invalid"]
        assert flat.field_errors == {
            "items": ["Expected string, received integer", "Too short"],
            "email": ["Expected string, received null"],
        }

    def test_custom_mapper(self):
        """Test mapping issues to something other than their message."""
        flat = flatten_error(_error(), mapper=lambda issue: issue.kind.value)
        assert flat.field_errors["email"] == ["invalid_type"]

    def test_to_dict(self):
        """Test the plain representation."""
        assert _error().flatten().to_dict()["form_errors"] == ["Form is invalid"]


class TestPrettify:
    """Test the pretty text view."""

    def test_path_line(self):
        """Test the message and path lines."""
        text = prettify_error(_error(), color=False)
        assert text.splitlines()[:3] == [
            "✖ Form is invalid",
            "✖ Expected string, received integer",
            "  → at items[0].name",
        ]

    def test_from_parse(self):
        """Test prettify on a real parse failure."""
        schema = s.object({"items": s.object({"name": s.string()}).array()})
        error = schema.safe_parse({"items": [{"name": 5}]}).error
        assert error.prettify(color=False) == "✖ Expected string, received integer\n  → at items[0].name"

    def test_pure(self):
        """Test that views are identical across calls."""
        error = _error()
        assert error.prettify(color=False) == error.prettify(color=False)
        assert error.treeify() == error.treeify()
        assert error.flatten() == error.flatten()

    def test_color_is_decoration(self):
        """Test that colored output reduces to the plain text."""
        error = _error()
        colored = error.prettify(color=True)
        assert "\x1b[" in colored
        assert ANSI.sub("", colored) == error.prettify(color=False)

    def test_messages_with_brackets(self):
        """Test that message text is never read as markup."""
        error = ValidationError([Issue(ErrorKind.CUSTOM, ("a",), "[bold]literal[/bold]")])
        assert ANSI.sub("", error.prettify(color=True)) == "✖ [bold]literal[/bold]\n  → at a"


class TestJson:
    """Test JSON serialization."""

    def test_to_json(self):
        """Test that JSON reflects issues and stringifies odd context values."""
        error = s.object({"n": s.number().min(3)}).safe_parse({"n": 1}).error
        data = json.loads(error.to_json())
        assert data["issues"][0]["kind"] == "too_small"
        assert data["issues"][0]["path"] == ["n"]
        assert data["issues"][0]["context"]["minimum"] == 3

    def test_union_errors_serialized(self):
        """Test that nested union errors serialize to dicts."""
        error = s.union(s.string(), s.number()).safe_parse(None).error
        data = json.loads(error.to_json())
        nested = data["issues"][0]["context"]["errors"]
        assert nested[0][0]["kind"] == "invalid_type"
