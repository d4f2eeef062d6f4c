"""
LSP Capabilities Manager

This module manages LSP feature handlers using a plugin architecture
similar to WorkspaceCache.

Design Principles:
1. Plugin-based (add capabilities without modifying core)
2. Type-safe (abstract base class)
3. Composable (multiple handlers for same feature)
4. Testable (isolated capability handlers)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from lsprotocol.types import (
    CompletionList,
    CompletionParams,
    LogMessageParams,
    MessageType,
)


if TYPE_CHECKING:
    from frameworkls.lsp.framework_language_server import FrameworkLanguageServer


class Capability(ABC):
    """
    Base class for all LSP capability handlers.

    Each capability handles one LSP feature and decides whether it can
    handle a specific request based on context.
    """

    def __init__(self, server: FrameworkLanguageServer) -> None:
        self.server = server

    @property
    def workspace_cache(self):
        # Looked up on every access, the cache is created after capabilities
        return self.server.workspace_cache

    def register(self) -> None:
        """
        Register extra handlers or text sync hooks with the server.

        Called once during server initialization.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this capability."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this capability does."""
        pass

    @abstractmethod
    async def can_handle(self, params) -> bool:
        """Check if the capability can handle the request."""
        pass


class CompletionCapability(Capability):
    """Base class for completion capabilities."""

    @abstractmethod
    async def can_handle(self, params: CompletionParams) -> bool:
        """
        Check if this capability can handle the completion request.

        Returns True if this capability should provide completions
        for the current context.
        """
        pass

    @abstractmethod
    async def complete(self, params: CompletionParams) -> CompletionList:
        """
        Provide completion items.

        Only called if can_handle() returns True.
        """
        pass


class CapabilityManager:
    """
    Central manager for all LSP capabilities.

    Usage:
        # In server initialization
        manager = CapabilityManager(server)
        manager.register_all()

        # In the completion handler
        return await manager.handle_completion(params)
    """

    def __init__(
        self,
        server: FrameworkLanguageServer,
        capabilities: dict[str, Capability] | None = None,
    ):
        self.server = server

        # Default capabilities
        if capabilities is None:
            from frameworkls.lsp.capabilities.modules_capabilities import (
                ModulesCompletionCapability,
            )

            capabilities = {
                "modules_completion": ModulesCompletionCapability(server),
            }

        self.capabilities = capabilities
        self._registered = False

    def register_all(self) -> None:
        """Register all capabilities with the server."""
        if self._registered:
            return

        for capability in self.capabilities.values():
            capability.register()

        self._registered = True

    def get_capability(self, name: str) -> Capability | None:
        """Get a specific capability by name"""
        return self.capabilities.get(name)

    def get_capabilities_by_type(self, capability_type: type) -> list[Capability]:
        """Get all capabilities of a specific type (e.g., all CompletionCapability)."""
        return [
            cap
            for cap in self.capabilities.values()
            if isinstance(cap, capability_type)
        ]

    async def handle_completion(self, params: CompletionParams) -> CompletionList:
        """
        Handle completion requests by delegating to capable handlers.

        Results of all capable handlers are aggregated. A failing handler
        is logged and skipped.
        """
        all_items = []

        for capability in self.get_capabilities_by_type(CompletionCapability):
            try:
                if await capability.can_handle(params):
                    result = await capability.complete(params)  # pyright: ignore
                    all_items.extend(result.items)
            except Exception as e:
                self.server.window_log_message(
                    LogMessageParams(
                        type=MessageType.Error,
                        message=f"Completion error in {capability.name}: {e}"
                    )
                )

        return CompletionList(is_incomplete=False, items=all_items)
