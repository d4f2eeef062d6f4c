from pygls.lsp.server import LanguageServer

from frameworkls.lsp.capabilities.capabilities import CapabilityManager
from frameworkls.lsp.text_sync_manager import TextSyncManager
from frameworkls.settings import Settings
from frameworkls.workspace.cache import WorkspaceCache


class FrameworkLanguageServer(LanguageServer):
    """
    Custom Language Server with Framework-specific attributes.

    Attributes:
        settings: Naming conventions, read from initializationOptions
        workspace_cache: Registry of discovered modules, created once the
            client finished initialization
    """

    def __init__(self, name: str, version: str):
        super().__init__(name, version)

        self.settings = Settings()
        self.workspace_cache: WorkspaceCache | None = None
        self.capability_manager: CapabilityManager | None = None
        self.text_sync_manager: TextSyncManager | None = None
