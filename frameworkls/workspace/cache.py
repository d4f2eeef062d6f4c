"""
Workspace Cache Manager for FrameworkLS

This module owns everything the server knows about the workspace.
Each cache is rebuilt by a full rescan; nothing is persisted to disk
and nothing is updated incrementally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from lsprotocol.types import LogMessageParams, MessageType

from frameworkls.settings import Settings

if TYPE_CHECKING:
    from frameworkls.lsp.framework_language_server import FrameworkLanguageServer


class ScanError(Exception):
    """Raised by a cache when enumerating the workspace fails."""


class CachedWorkspace(ABC):
    """Abstract base class for workspace caches."""

    def __init__(
        self,
        workspace_cache: WorkspaceCache,
        server: FrameworkLanguageServer | None = None
    ) -> None:
        self.workspace_cache = workspace_cache
        self.server = server or workspace_cache.server
        self.settings = workspace_cache.settings

    @property
    def workspace_roots(self) -> list[Path]:
        return self.workspace_cache.workspace_roots

    def register_text_sync_hooks(self) -> None:
        """
        Register text sync hooks to keep the cache up-to-date.

        Override in subclasses that need to react to document events.
        """
        pass

    @abstractmethod
    async def initialize(self):
        pass

    @abstractmethod
    async def scan(self) -> bool:
        """
        Rebuild the cache from the workspace.

        Returns True if the new data was published. Raises ScanError if
        the workspace could not be enumerated; the previous data must then
        stay in place.
        """
        pass

    def log(self, message: str, type: MessageType = MessageType.Log) -> None:
        if self.server:
            self.server.window_log_message(
                LogMessageParams(type=type, message=message)
            )


class WorkspaceCache:
    """
    Central cache for all workspace data.

    Usage:
        cache = WorkspaceCache([workspace_root])
        await cache.initialize()

        modules = cache.caches["modules"].registry

        # After the workspace changed
        await cache.rescan()
    """

    def __init__(
        self,
        workspace_roots: Sequence[Path],
        settings: Settings | None = None,
        caches: dict[str, CachedWorkspace] | None = None,
        server: FrameworkLanguageServer | None = None,
    ):
        from frameworkls.workspace.modules_cache import ModulesCache

        self.workspace_roots = list(workspace_roots)
        self.settings = settings or Settings()
        self.server = server

        self.caches = caches or {
            "modules": ModulesCache(self),
        }

        # State
        self._initialized = False
        self._last_scan: datetime | None = None

    @property
    def last_scan(self) -> datetime | None:
        return self._last_scan

    async def initialize(self):
        """
        Register hooks and run the first scan.

        This is called once when the workspace is opened.
        """
        if self._initialized:
            return

        self._register_text_sync_hooks()

        for c in self.caches.values():
            if isinstance(c, CachedWorkspace):
                await c.initialize()

        await self.rescan()
        self._initialized = True

    async def rescan(self) -> bool:
        """
        Rescan the workspace and replace every cache.

        Scan failures are logged here and never propagate further; a cache
        that failed keeps its previous snapshot.
        """
        published = True
        for name, c in self.caches.items():
            if not isinstance(c, CachedWorkspace):
                continue
            try:
                if not await c.scan():
                    published = False
            except ScanError as e:
                published = False
                self._log(f"Scan of {name} failed: {e}", MessageType.Error)

        self._last_scan = datetime.now()
        return published

    async def set_workspace_roots(self, workspace_roots: Sequence[Path]) -> bool:
        """Replace the scanned folders and rescan."""
        self.workspace_roots = list(workspace_roots)
        return await self.rescan()

    def _register_text_sync_hooks(self) -> None:
        """Register text sync hooks for all caches."""
        for cache in self.caches.values():
            if isinstance(cache, CachedWorkspace):
                cache.register_text_sync_hooks()

    def _log(self, message: str, type: MessageType) -> None:
        if self.server:
            self.server.window_log_message(
                LogMessageParams(type=type, message=message)
            )
