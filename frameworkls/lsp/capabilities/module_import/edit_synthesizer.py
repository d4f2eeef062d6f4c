"""
Boilerplate edits for importing a Framework module into a Lua document.

File: frameworkls/lsp/capabilities/module_import/edit_synthesizer.py

For a module ``Grid`` in ``src/Client/UI/C_Grid.lua`` the synthesizer
produces two insertions:

    local FrameworkObject = ...
    local GridType = typeof(require(FrameworkObject.UI.C_Grid))   <- inserted
    local Grid: GridType                                          <- inserted
    ...
    function module.Init()
        Grid = Framework.UI.Grid                                  <- inserted
"""
from __future__ import annotations

from dataclasses import dataclass

from lsprotocol.types import Position, Range, TextEdit

from frameworkls.lsp.capabilities.module_import.anchor_finder import (
    find_first_line,
    function_declaration,
    local_binding,
    split_lines,
)
from frameworkls.settings import Settings
from frameworkls.workspace.modules_cache import ModuleDescriptor


class AnchorConflictError(ValueError):
    """Raised when two insertions would land at the same position."""


@dataclass(frozen=True)
class ModuleEdit:
    """A single text insertion."""

    line: int
    character: int
    text: str

    @property
    def position(self) -> tuple[int, int]:
        return self.line, self.character

    def to_text_edit(self) -> TextEdit:
        position = Position(line=self.line, character=self.character)
        return TextEdit(range=Range(start=position, end=position), new_text=self.text)


def insert_after(lines: list[str], anchor: int, text: str) -> ModuleEdit:
    """
    Insert ``text`` on a new line below ``lines[anchor]``.

    When the anchor is the last line and the document has no trailing
    newline there is no line below it; the text then goes to the end of
    the anchor line, preceded by a line break.
    """
    if anchor + 1 < len(lines):
        return ModuleEdit(line=anchor + 1, character=0, text=text)
    return ModuleEdit(line=anchor, character=len(lines[anchor]), text="\n" + text)


class EditSynthesizer:
    """Builds the insertions that declare and wire up a module."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._is_object_anchor = local_binding(self.settings.object_root)
        self._is_init_anchor = function_declaration(self.settings.init_function)

    def generate_edits(self, module: ModuleDescriptor, text: str) -> list[ModuleEdit]:
        """
        Generate the insertions for ``module``, ordered by position.

        Missing anchors degrade gracefully: declarations go to line 0 when
        there is no ``local FrameworkObject =`` line, and the assignment is
        skipped when there is no ``function module.Init``.

        Raises:
            AnchorConflictError: if both insertions target the same position.
        """
        lines = split_lines(text)
        edits = [self._declaration_edit(module, lines)]

        assignment = self._assignment_edit(module, lines)
        if assignment is not None:
            if assignment.position == edits[0].position:
                raise AnchorConflictError(
                    f"'{self.settings.object_root}' and "
                    f"'{self.settings.init_function}' anchors overlap at line "
                    f"{assignment.line}"
                )
            edits.append(assignment)

        edits.sort(key=lambda e: e.position)
        return edits

    def _declaration_edit(self, module: ModuleDescriptor, lines: list[str]) -> ModuleEdit:
        require_path = self._join(self.settings.object_root, module.subpath, module.module_stem)
        text = (
            f"local {module.name}Type = typeof(require({require_path}))\n"
            f"local {module.name}: {module.name}Type\n"
        )

        anchor = find_first_line(lines, self._is_object_anchor)
        if anchor is None:
            return ModuleEdit(line=0, character=0, text=text)
        return insert_after(lines, anchor, text)

    def _assignment_edit(
        self, module: ModuleDescriptor, lines: list[str]
    ) -> ModuleEdit | None:
        anchor = find_first_line(lines, self._is_init_anchor)
        if anchor is None:
            return None

        target = self._join(self.settings.framework_root, module.subpath, module.name)
        return insert_after(
            lines, anchor, f"{self.settings.indent}{module.name} = {target}\n"
        )

    @staticmethod
    def _join(*parts: str) -> str:
        return ".".join(part for part in parts if part)
