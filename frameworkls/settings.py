"""
Server settings.

Defaults follow the layout of a Framework project:

    src/
      Client/<namespace...>/C_<Name>.lua
      Server/<namespace...>/S_<Name>.lua

Clients can override any value through ``initializationOptions`` using
camelCase keys (e.g. ``{"sourceDir": "game", "extension": ".luau"}``).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import Any


@dataclass(frozen=True)
class Settings:
    """Naming conventions used by the scanner and the completion engine."""

    # Directory under each workspace folder that holds the partitions
    source_dir: str = "src"
    client_marker: str = "Client"
    server_marker: str = "Server"

    # Module files are named <prefix>_<Name><extension>
    prefixes: tuple[str, ...] = ("C", "S")
    extension: str = ".lua"

    # Typed before the module name to request completions
    trigger: str = "auto."

    # Root tokens used in generated code
    object_root: str = "FrameworkObject"
    framework_root: str = "Framework"
    init_function: str = "module.Init"
    indent: str = "    "

    @classmethod
    def from_initialization_options(cls, options: Any) -> Settings:
        """
        Build settings from LSP ``initializationOptions``.

        Unknown keys and values of the wrong type are ignored.
        """
        if not isinstance(options, dict):
            return cls()

        overrides: dict[str, Any] = {}
        for f in fields(cls):
            key = _camel_case(f.name)
            if key not in options and f.name not in options:
                continue
            value = options.get(key, options.get(f.name))

            if f.name == "prefixes":
                if isinstance(value, (list, tuple)) and all(
                    isinstance(p, str) and len(p) == 1 for p in value
                ):
                    overrides[f.name] = tuple(value)
            elif isinstance(value, str) and value:
                overrides[f.name] = value

        return cls(**overrides)

    @property
    def markers(self) -> tuple[str, str]:
        return (self.client_marker, self.server_marker)

    @property
    def trigger_pattern(self) -> re.Pattern[str]:
        """Matches the trigger plus a partial identifier at the end of a line prefix."""
        return re.compile(re.escape(self.trigger) + r"(\w*)$")


def _camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)
