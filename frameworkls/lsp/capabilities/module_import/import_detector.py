"""
Detects whether a Lua document already declares a Framework module.

File: frameworkls/lsp/capabilities/module_import/import_detector.py

A module counts as imported when the document contains either of

    local GridType: ...
    local Grid: GridType

at the start of a line. Scope is not parsed, so a declaration inside a
nested block counts the same as a top-level one.
"""
from __future__ import annotations

import re
from functools import lru_cache


@lru_cache(maxsize=256)
def _declaration_pattern(name: str) -> re.Pattern[str]:
    escaped = re.escape(name)
    return re.compile(
        rf"^[ \t]*local\s+(?:{escaped}Type|{escaped})\s*:",
        re.MULTILINE,
    )


def is_module_imported(text: str, name: str) -> bool:
    """Check for a ``local <name>Type:`` or ``local <name>:`` declaration."""
    return _declaration_pattern(name).search(text) is not None
