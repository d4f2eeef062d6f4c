from pathlib import Path

from lsprotocol.types import (
    INITIALIZE,
    INITIALIZED,
    TEXT_DOCUMENT_COMPLETION,
    WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DidChangeWorkspaceFoldersParams,
    InitializedParams,
    InitializeParams,
    LogMessageParams,
    MessageType,
    ShowMessageParams,
)
from pygls.uris import to_fs_path

from frameworkls.lsp.capabilities.capabilities import CapabilityManager
from frameworkls.lsp.framework_language_server import FrameworkLanguageServer
from frameworkls.lsp.text_sync_manager import TextSyncManager
from frameworkls.settings import Settings
from frameworkls.workspace.cache import WorkspaceCache

RESCAN_COMMAND = "framework-completion.rescan"
SHOW_OUTPUT_COMMAND = "framework-completion.showOutput"


def workspace_roots(ls: FrameworkLanguageServer) -> list[Path]:
    """Filesystem paths of all workspace folders, or of the root if there are none."""
    roots: list[Path] = []
    for folder in ls.workspace.folders.values():
        fs_path = to_fs_path(folder.uri)
        if fs_path:
            roots.append(Path(fs_path))

    if not roots and ls.workspace.root_path:
        roots.append(Path(ls.workspace.root_path))

    return roots


def create_server() -> FrameworkLanguageServer:
    """
    Creates and returns a configured Language Server instance.

    The LanguageServer class from pygls handles:
    - JSON-RPC communication with clients (editors)
    - Request/response lifecycle
    - Notifications and event handling
    """
    server = FrameworkLanguageServer("frameworkls", "0.1.0")

    # Text sync first so caches can add hooks when they are created
    server.text_sync_manager = TextSyncManager(server)
    server.text_sync_manager.register_handlers()

    server.capability_manager = CapabilityManager(server)
    server.capability_manager.register_all()

    @server.feature(INITIALIZE)
    def initialize(ls: FrameworkLanguageServer, params: InitializeParams):
        """Read client settings before anything is scanned."""
        ls.settings = Settings.from_initialization_options(
            params.initialization_options
        )

    @server.feature(INITIALIZED)
    async def initialized(ls: FrameworkLanguageServer, params: InitializedParams):
        """Build the module registry once the workspace folders are known."""
        ls.window_log_message(
            LogMessageParams(
                MessageType.Info, "Framework Service Completion server activated"
            )
        )

        ls.workspace_cache = WorkspaceCache(
            workspace_roots(ls), settings=ls.settings, server=ls
        )
        await ls.workspace_cache.initialize()

    @server.feature(
        TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=["."])
    )
    async def completion(ls: FrameworkLanguageServer, params: CompletionParams):
        if ls.capability_manager:
            return await ls.capability_manager.handle_completion(params)
        return CompletionList(is_incomplete=False, items=[])

    @server.feature(WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)
    async def did_change_workspace_folders(
        ls: FrameworkLanguageServer, params: DidChangeWorkspaceFoldersParams
    ):
        if ls.workspace_cache is None:
            return

        ls.window_log_message(
            LogMessageParams(MessageType.Info, "Workspace changed, rescanning...")
        )
        await ls.workspace_cache.set_workspace_roots(workspace_roots(ls))

    @server.command(RESCAN_COMMAND)
    async def rescan(ls: FrameworkLanguageServer, *args):
        """Rebuild the module registry."""
        ls.window_log_message(
            LogMessageParams(MessageType.Info, "Manual rescan requested")
        )
        if ls.workspace_cache is None:
            ls.workspace_cache = WorkspaceCache(
                workspace_roots(ls), settings=ls.settings, server=ls
            )
            await ls.workspace_cache.initialize()
        else:
            await ls.workspace_cache.rescan()

        ls.window_show_message(
            ShowMessageParams(MessageType.Info, "Framework modules rescanned")
        )

    @server.command(SHOW_OUTPUT_COMMAND)
    def show_output(ls: FrameworkLanguageServer, *args):
        """Point the user at the log written through window/logMessage."""
        ls.window_show_message(
            ShowMessageParams(
                MessageType.Info,
                "Debug output is written to the frameworkls language server log "
                "in the Output panel.",
            )
        )

    return server
