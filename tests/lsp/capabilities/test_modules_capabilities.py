"""
Tests for frameworkls/lsp/capabilities/modules_capabilities.py

Covers the completion flow end to end: trigger detection, partition
filtering, import detection and the attached boilerplate edits.
"""
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from lsprotocol.types import (
    CompletionItemKind,
    CompletionParams,
    MarkupContent,
    MessageType,
    Position,
    Range,
    ShowMessageParams,
    TextDocumentIdentifier,
    TextEdit,
)
from pygls.workspace.text_document import TextDocument

from frameworkls.context.types import Partition
from frameworkls.lsp.capabilities.module_import.edit_synthesizer import (
    AnchorConflictError,
)
from frameworkls.lsp.capabilities.modules_capabilities import (
    ModulesCompletionCapability,
)
from frameworkls.settings import Settings
from frameworkls.workspace.cache import WorkspaceCache
from frameworkls.workspace.modules_cache import ModuleDescriptor, ModuleRegistry


CLIENT_URI = "file:///game/src/Client/UI/C_Menu.lua"
SERVER_URI = "file:///game/src/Server/S_Shop.lua"

SCRIPT_TEMPLATE = """\
local FrameworkObject = require(game.ReplicatedStorage.Framework)
local Framework = FrameworkObject.new()
{declarations}
local module = {{}}

function module.Init()
end

function module.Start()
    local grid = {typed}
end

return module
"""

# Line holding the cursor and line of "function module.Init()"
CURSOR_LINE = 9
INIT_LINE = 5


def _module(name: str, partition: Partition, namespace=("UI",)) -> ModuleDescriptor:
    prefix = "C" if partition == Partition.CLIENT else "S"
    return ModuleDescriptor(
        name=name,
        partition=partition,
        namespace=namespace,
        file_name=f"{prefix}_{name}.lua",
        location=Path(f"/game/src/{partition.value}/{prefix}_{name}.lua"),
    )


@pytest.fixture
def mock_server() -> MagicMock:
    """Provides a mock FrameworkLanguageServer with a real modules registry."""
    server = MagicMock()
    server.settings = Settings()
    server.window_log_message = MagicMock()
    server.window_show_message = MagicMock()

    workspace_cache = WorkspaceCache([], settings=server.settings)
    workspace_cache.caches["modules"]._registry = ModuleRegistry((
        _module("Grid", Partition.CLIENT),
        _module("Grid", Partition.SERVER, namespace=()),
        _module("Inventory", Partition.CLIENT, namespace=()),
        _module("DataStore", Partition.SERVER, namespace=("Storage",)),
    ))
    server.workspace_cache = workspace_cache
    return server


@pytest.fixture
def capability(mock_server) -> ModulesCompletionCapability:
    return ModulesCompletionCapability(mock_server)


@pytest.fixture
def open_document(mock_server):
    """Opens a document and returns CompletionParams with the cursor at the end of the typed text."""
    def _open(typed: str, uri: str = CLIENT_URI, declarations: str = "") -> CompletionParams:
        source = SCRIPT_TEMPLATE.format(declarations=declarations, typed=typed)
        doc = TextDocument(uri, source=source)
        mock_server.workspace.get_text_document.return_value = doc

        line = doc.lines[CURSOR_LINE].rstrip("\n")
        return CompletionParams(
            text_document=TextDocumentIdentifier(uri=uri),
            position=Position(line=CURSOR_LINE, character=len(line)),
        )
    return _open


class TestCanHandle:

    def test_name_and_description(self, capability):
        assert capability.name == "modules_completion"
        assert "auto." in capability.description

    @pytest.mark.asyncio
    @pytest.mark.parametrize("typed", ["auto.", "auto.Gr", "auto.grid_1"])
    async def test_trigger_after_cursor(self, capability, open_document, typed):
        assert await capability.can_handle(open_document(typed)) is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("typed", ["auto", "Framework.Gr", "auto.Gr()", "automatic"])
    async def test_no_trigger(self, capability, open_document, typed):
        assert await capability.can_handle(open_document(typed)) is False

    @pytest.mark.asyncio
    async def test_other_file_types_are_ignored(self, capability, open_document):
        params = open_document("auto.Gr", uri="file:///game/src/Client/notes.txt")
        assert await capability.can_handle(params) is False

    @pytest.mark.asyncio
    async def test_cursor_past_last_line(self, capability, open_document):
        params = open_document("auto.Gr")
        params.position = Position(line=999, character=0)
        assert await capability.can_handle(params) is False


class TestComplete:

    @pytest.mark.asyncio
    async def test_new_module_candidate(self, capability, open_document):
        params = open_document("auto.Gr")
        result = await capability.complete(params)

        assert result.is_incomplete is False
        assert len(result.items) == 1
        item = result.items[0]

        assert item.label == "Grid"
        assert item.kind == CompletionItemKind.Class
        assert item.detail == "Framework.Client.UI.Grid"
        assert isinstance(item.documentation, MarkupContent)
        assert item.documentation.value == "Framework Client service: UI.Grid"
        assert item.sort_text == "0Grid"
        assert item.filter_text == "auto.grid"
        assert item.preselect is True

        # The whole "auto.Gr" span is replaced with the bare name
        end = params.position.character
        assert item.text_edit == TextEdit(
            range=Range(
                start=Position(line=CURSOR_LINE, character=end - len("auto.Gr")),
                end=Position(line=CURSOR_LINE, character=end),
            ),
            new_text="Grid",
        )

    @pytest.mark.asyncio
    async def test_new_module_gets_import_edits(self, capability, open_document):
        result = await capability.complete(open_document("auto.Gr"))
        declaration, assignment = result.items[0].additional_text_edits

        assert declaration.range.start == Position(line=1, character=0)
        assert declaration.range.end == declaration.range.start
        assert declaration.new_text == (
            "local GridType = typeof(require(FrameworkObject.UI.C_Grid))\n"
            "local Grid: GridType\n"
        )
        assert assignment.range.start == Position(line=INIT_LINE + 1, character=0)
        assert assignment.new_text == "    Grid = Framework.UI.Grid\n"

    @pytest.mark.asyncio
    async def test_already_imported_module(self, capability, open_document):
        params = open_document("auto.Gr", declarations="local Grid: GridType")
        result = await capability.complete(params)

        (item,) = result.items
        assert item.label == "Grid"
        assert item.kind == CompletionItemKind.Reference
        assert item.sort_text == "1Grid"
        assert item.preselect is False
        assert item.additional_text_edits is None
        assert item.detail == "Framework.Client.UI.Grid (already imported)"
        assert "already imported" in item.documentation.value

    @pytest.mark.asyncio
    async def test_empty_query_offers_whole_partition(self, capability, open_document, mock_server):
        result = await capability.complete(open_document("auto."))

        assert [item.label for item in result.items] == ["Grid", "Inventory"]
        assert result.items[1].detail == "Framework.Client.Inventory"
        mock_server.window_show_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_document_gets_server_modules(self, capability, open_document):
        result = await capability.complete(open_document("auto.", uri=SERVER_URI))

        assert [item.detail for item in result.items] == [
            "Framework.Server.Grid",
            "Framework.Server.Storage.DataStore",
        ]
        assert result.items[0].additional_text_edits[1].new_text == "    Grid = Framework.Grid\n"

    @pytest.mark.asyncio
    async def test_no_matches_shows_notice(self, capability, open_document, mock_server):
        result = await capability.complete(open_document("auto.xyz"))

        assert result.items == []
        mock_server.window_show_message.assert_called_once()
        notice = mock_server.window_show_message.call_args[0][0]
        assert isinstance(notice, ShowMessageParams)
        assert notice.type == MessageType.Info
        assert notice.message == "No matching Framework services found for 'xyz'"

    @pytest.mark.asyncio
    async def test_query_is_lowercased(self, capability, open_document):
        result = await capability.complete(open_document("auto.INV"))
        assert [item.label for item in result.items] == ["Inventory"]

    @pytest.mark.asyncio
    async def test_document_outside_partitions_gets_nothing(self, capability, open_document, mock_server):
        result = await capability.complete(
            open_document("auto.", uri="file:///game/src/Shared/Util.lua")
        )
        assert result.items == []
        mock_server.window_show_message.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_trigger_returns_empty(self, capability, open_document):
        result = await capability.complete(open_document("Grid"))
        assert result.items == []

    @pytest.mark.asyncio
    async def test_no_workspace_cache(self, capability, open_document, mock_server):
        mock_server.workspace_cache = None
        result = await capability.complete(open_document("auto.Gr"))
        assert result.items == []

    @pytest.mark.asyncio
    async def test_missing_anchors_still_offer_candidate(self, capability, mock_server):
        doc = TextDocument(CLIENT_URI, source="local g = auto.Gr\n")
        mock_server.workspace.get_text_document.return_value = doc
        params = CompletionParams(
            text_document=TextDocumentIdentifier(uri=CLIENT_URI),
            position=Position(line=0, character=len("local g = auto.Gr")),
        )

        result = await capability.complete(params)

        (item,) = result.items
        (declaration,) = item.additional_text_edits
        assert declaration.range.start == Position(line=0, character=0)

    @pytest.mark.asyncio
    async def test_anchor_conflict_drops_candidate(self, capability, open_document, mock_server):
        with patch(
            "frameworkls.lsp.capabilities.modules_capabilities.EditSynthesizer.generate_edits",
            side_effect=AnchorConflictError("overlap"),
        ):
            result = await capability.complete(open_document("auto."))

        assert result.items == []
        warnings = [
            c.args[0]
            for c in mock_server.window_log_message.call_args_list
            if c.args[0].type == MessageType.Warning
        ]
        assert len(warnings) == 2
        assert "overlap" in warnings[0].message

    @pytest.mark.asyncio
    async def test_all_candidates_conflicting_shows_notice(self, capability, open_document, mock_server):
        with patch(
            "frameworkls.lsp.capabilities.modules_capabilities.EditSynthesizer.generate_edits",
            side_effect=AnchorConflictError("overlap"),
        ):
            result = await capability.complete(open_document("auto.Gr"))

        assert result.items == []
        notice = mock_server.window_show_message.call_args[0][0]
        assert notice.message == "No matching Framework services found for 'gr'"

    @pytest.mark.asyncio
    async def test_custom_trigger(self, capability, open_document, mock_server):
        mock_server.settings = Settings(trigger="fw:")
        result = await capability.complete(open_document("fw:Inv"))

        (item,) = result.items
        assert item.filter_text == "fw:inventory"
        assert item.text_edit.range.start.character == (
            item.text_edit.range.end.character - len("fw:Inv")
        )
