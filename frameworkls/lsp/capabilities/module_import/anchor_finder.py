"""
Anchor line lookup for module boilerplate insertion.

File: frameworkls/lsp/capabilities/module_import/anchor_finder.py

Anchors are found with line patterns, not by parsing Lua. Callers only
depend on find_first_line(), so the patterns can be swapped for a real
structural scan later.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Sequence

LinePredicate = Callable[[str], bool]

LINE_SPLIT_PATTERN = re.compile(r"\r?\n")


def split_lines(text: str) -> list[str]:
    """Split document text on LF or CRLF."""
    return LINE_SPLIT_PATTERN.split(text)


def find_first_line(lines: Sequence[str], predicate: LinePredicate) -> int | None:
    """Return the index of the first line satisfying ``predicate``."""
    for index, line in enumerate(lines):
        if predicate(line):
            return index
    return None


def local_binding(name: str) -> LinePredicate:
    """Matches ``local <name> =`` at the start of a line."""
    pattern = re.compile(rf"^\s*local\s+{re.escape(name)}\s*=")
    return lambda line: pattern.search(line) is not None


def function_declaration(name: str) -> LinePredicate:
    """Matches ``function <name>`` at the start of a line (``module.Init``)."""
    pattern = re.compile(rf"^\s*function\s+{re.escape(name)}\b")
    return lambda line: pattern.search(line) is not None
