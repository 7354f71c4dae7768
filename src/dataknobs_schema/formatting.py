"""Derived views of a ValidationError: tree, flattened, pretty text and JSON.

All views are pure functions of the error's issue list.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Dict, List

from rich.console import Console
from rich.text import Text

from .exceptions import ValidationError
from .issues import Issue, PathSegment, format_path

ERROR_MARK = "✖"
PATH_MARK = "→"


@dataclass
class ErrorTree:
    """Issues arranged by path.

    ``errors`` holds the messages of issues whose path ends at this node;
    ``properties`` and ``items`` hold child nodes for string and integer
    path segments.
    """

    errors: List[str] = field(default_factory=list)
    properties: Dict[str, ErrorTree] = field(default_factory=dict)
    items: Dict[int, ErrorTree] = field(default_factory=dict)

    def child(self, segment: PathSegment) -> ErrorTree:
        if isinstance(segment, int) and not isinstance(segment, bool):
            return self.items.setdefault(segment, ErrorTree())
        return self.properties.setdefault(str(segment), ErrorTree())

    def get(self, *path: PathSegment) -> ErrorTree | None:
        """Node at ``path``, or None if no issue lives at or below it."""
        node: ErrorTree | None = self
        for segment in path:
            if node is None:
                return None
            if isinstance(segment, int) and not isinstance(segment, bool):
                node = node.items.get(segment)
            else:
                node = node.properties.get(str(segment))
        return node

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation; ``items`` becomes a list with ``None`` holes."""
        data: Dict[str, Any] = {"errors": list(self.errors)}
        if self.properties:
            data["properties"] = {key: node.to_dict() for key, node in self.properties.items()}
        if self.items:
            size = max(self.items) + 1
            data["items"] = [
                self.items[index].to_dict() if index in self.items else None
                for index in range(size)
            ]
        return data


@dataclass
class FlattenedError:
    """Issues split into form-level and per-field messages."""

    form_errors: List[str] = field(default_factory=list)
    field_errors: Dict[PathSegment, List[str]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "form_errors": list(self.form_errors),
            "field_errors": {key: list(messages) for key, messages in self.field_errors.items()},
        }


def _message(issue: Issue) -> str:
    return issue.message


def treeify_error(error: ValidationError, mapper: Callable[[Issue], str] = _message) -> ErrorTree:
    """Build a tree keyed by path; root-level issues land in the root's ``errors``."""
    root = ErrorTree()
    for issue in error.issues:
        node = root
        for segment in issue.path:
            node = node.child(segment)
        node.errors.append(mapper(issue))
    return root


def flatten_error(error: ValidationError, mapper: Callable[[Issue], str] = _message) -> FlattenedError:
    """Split issues by their first path segment.

    Issues with an empty path are form errors; deeper paths are still
    attributed to their first segment.
    """
    flattened = FlattenedError()
    for issue in error.issues:
        if issue.path:
            flattened.field_errors.setdefault(issue.path[0], []).append(mapper(issue))
        else:
            flattened.form_errors.append(mapper(issue))
    return flattened


def _pretty_lines(error: ValidationError) -> list[tuple[str, str | None]]:
    return [
        (issue.message, format_path(issue.path) if issue.path else None)
        for issue in error.issues
    ]


def prettify_error(error: ValidationError, color: bool | None = None) -> str:
    """Render each issue as its message plus, if it has a path, an ``→ at`` line.

    Example output::

        ✖ Expected string, received integer
          → at items[0].name

    Args:
        error: The error to render
        color: Add ANSI colors (via rich); None uses the configured default

    Returns:
        Plain text unless ``color`` is enabled
    """
    if color is None:
        from .settings import get_settings
        color = get_settings().color
    lines = _pretty_lines(error)
    if not color:
        blocks = []
        for message, path in lines:
            block = f"{ERROR_MARK} {message}"
            if path is not None:
                block += f"\n  {PATH_MARK} at {path}"
            blocks.append(block)
        return "\n".join(blocks)

    text = Text()
    for index, (message, path) in enumerate(lines):
        if index:
            text.append("\n")
        text.append(f"{ERROR_MARK} ", style="bold red")
        text.append(message)
        if path is not None:
            text.append(f"\n  {PATH_MARK} at ", style="dim")
            text.append(path, style="cyan")
    console = Console(force_terminal=True, color_system="standard", soft_wrap=True, highlight=False)
    with console.capture() as capture:
        console.print(text, end="")
    return capture.get()


def error_to_json(error: ValidationError, **kwargs: Any) -> str:
    """JSON text of ``error.to_dict()``; non-JSON context values are stringified."""
    kwargs.setdefault("default", str)
    return json.dumps(error.to_dict(), **kwargs)
