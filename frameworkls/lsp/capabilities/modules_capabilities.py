"""
Module-related LSP capabilities.

Provides completion of Framework module names after the ``auto.`` trigger.
Accepting a completion inserts the module name at the cursor and, when the
module is not declared yet, the declarations that import it.
"""
from __future__ import annotations

import re

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionParams,
    LogMessageParams,
    MarkupContent,
    MarkupKind,
    MessageType,
    Position,
    Range,
    ShowMessageParams,
    TextEdit,
)

from frameworkls.context.partition_classifier import PartitionClassifier
from frameworkls.lsp.capabilities.capabilities import CompletionCapability
from frameworkls.lsp.capabilities.module_import.candidate_ranker import (
    ModuleCandidate,
    rank_candidates,
)
from frameworkls.lsp.capabilities.module_import.edit_synthesizer import (
    AnchorConflictError,
    EditSynthesizer,
)
from frameworkls.settings import Settings
from frameworkls.workspace.modules_cache import ModulesCache


class ModulesCompletionCapability(CompletionCapability):
    """Provides completion for Framework module names."""

    @property
    def name(self) -> str:
        return "modules_completion"

    @property
    def description(self) -> str:
        return "Autocomplete Framework module names after 'auto.' and import them"

    @property
    def settings(self) -> Settings:
        return self.server.settings

    def _match_trigger(self, params: CompletionParams) -> re.Match[str] | None:
        """Match the trigger sequence right before the cursor."""
        doc = self.server.workspace.get_text_document(params.text_document.uri)
        if params.position.line >= len(doc.lines):
            return None

        line: str = doc.lines[params.position.line]
        prefix = line[:params.position.character]
        return self.settings.trigger_pattern.search(prefix)

    async def can_handle(self, params: CompletionParams) -> bool:
        """Check if the cursor follows the trigger in a module-language file."""
        if not params.text_document.uri.endswith(self.settings.extension):
            return False
        return self._match_trigger(params) is not None

    async def complete(self, params: CompletionParams) -> CompletionList:
        """Provide module completions with their import edits."""
        match = self._match_trigger(params)
        if match is None or not self.workspace_cache:
            return CompletionList(is_incomplete=False, items=[])

        modules_cache: ModulesCache | None = self.workspace_cache.caches.get("modules")  # pyright: ignore
        if not modules_cache:
            return CompletionList(is_incomplete=False, items=[])

        doc = self.server.workspace.get_text_document(params.text_document.uri)
        text = doc.source
        partition = PartitionClassifier(self.settings).classify(doc.path)
        query = match.group(1)

        self._log(
            f"Completion at {params.position.line}:{params.position.character}, "
            f"file context: {partition.value}, query: '{query}'"
        )

        # The replaced span is the trigger plus whatever was typed after it
        replace_range = Range(
            start=Position(
                line=params.position.line,
                character=params.position.character - len(match.group(0)),
            ),
            end=params.position,
        )

        result = rank_candidates(modules_cache.registry, partition, query, text)
        synthesizer = EditSynthesizer(self.settings)

        items: list[CompletionItem] = []
        for candidate in result.candidates:
            additional_edits = None
            if not candidate.already_imported:
                try:
                    edits = synthesizer.generate_edits(candidate.module, text)
                except AnchorConflictError as e:
                    self._log(
                        f"Skipping {candidate.module.name}: {e}", MessageType.Warning
                    )
                    continue
                additional_edits = [edit.to_text_edit() for edit in edits]

            items.append(
                self._create_completion_item(candidate, replace_range, additional_edits)
            )

        # Candidates dropped on anchor conflicts count as no match
        if not items and result.query:
            self.server.window_show_message(
                ShowMessageParams(
                    type=MessageType.Info,
                    message=f"No matching Framework services found for '{result.query}'",
                )
            )
        else:
            self._log(f"Returning {len(items)} completion items")

        return CompletionList(is_incomplete=False, items=items)

    def _create_completion_item(
        self,
        candidate: ModuleCandidate,
        replace_range: Range,
        additional_edits: list[TextEdit] | None,
    ) -> CompletionItem:
        module = candidate.module
        imported, name = candidate.sort_key

        detail = module.qualified_name(self.settings.framework_root)
        local_path = ".".join([*module.namespace, module.name])
        documentation = (
            f"{self.settings.framework_root} {module.partition.value} service: {local_path}"
        )
        if imported:
            detail += " (already imported)"
            documentation += "\n\n**Note:** This service is already imported in this file."

        return CompletionItem(
            label=name,
            kind=CompletionItemKind.Reference if imported else CompletionItemKind.Class,
            detail=detail,
            documentation=MarkupContent(kind=MarkupKind.Markdown, value=documentation),
            text_edit=TextEdit(range=replace_range, new_text=name),
            sort_text=f"{int(imported)}{name}",
            filter_text=f"{self.settings.trigger}{name.lower()}",
            preselect=candidate.preselect,
            additional_text_edits=additional_edits,
        )

    def _log(self, message: str, type: MessageType = MessageType.Log) -> None:
        self.server.window_log_message(LogMessageParams(type=type, message=message))
