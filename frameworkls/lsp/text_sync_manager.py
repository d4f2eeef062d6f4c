"""
Text Synchronization Manager

Registers the LSP text sync handlers the server needs beyond pygls'
built-in document tracking and broadcasts them to hooks registered by
caches and capabilities.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

from lsprotocol.types import (
    DidSaveTextDocumentParams,
    LogMessageParams,
    MessageType,
    TEXT_DOCUMENT_DID_SAVE,
)

if TYPE_CHECKING:
    from frameworkls.lsp.framework_language_server import FrameworkLanguageServer


OnSaveHook = Callable[[DidSaveTextDocumentParams], Awaitable[None]]


class TextSyncManager:
    """
    Broadcasts document save events to registered hooks.

    Hooks run in registration order. A failing hook is logged and does not
    keep the remaining hooks from running.

    Usage:
        # During server initialization (before caches/capabilities)
        text_sync = TextSyncManager(server)
        text_sync.register_handlers()
        server.text_sync_manager = text_sync

        # Caches register hooks to keep themselves up-to-date
        class ModulesCache(CachedWorkspace):
            def register_text_sync_hooks(self):
                text_sync = self.server.text_sync_manager
                text_sync.add_on_save_hook(self._on_module_file_saved)
    """

    def __init__(self, server: FrameworkLanguageServer) -> None:
        self.server = server
        self._on_save_hooks: list[OnSaveHook] = []

    def add_on_save_hook(self, hook: OnSaveHook) -> None:
        """Register an async hook called when a document is saved."""
        self._on_save_hooks.append(hook)

    async def _broadcast_on_save(self, params: DidSaveTextDocumentParams) -> None:
        for hook in self._on_save_hooks:
            try:
                await hook(params)
            except Exception as e:
                self.server.window_log_message(
                    LogMessageParams(
                        type=MessageType.Error,
                        message=f"Error in on_save hook {hook.__name__}: "
                                f"{type(e).__name__}: {e}"
                    )
                )

    def register_handlers(self) -> None:
        """
        Register LSP text synchronization handlers with the server.

        Must be called once, before caches register their hooks.
        """

        @self.server.feature(TEXT_DOCUMENT_DID_SAVE)
        async def did_save(
            ls: FrameworkLanguageServer,
            params: DidSaveTextDocumentParams,
        ) -> None:
            ls.window_log_message(
                LogMessageParams(
                    type=MessageType.Log,
                    message=f"Document saved: {params.text_document.uri}"
                )
            )
            await self._broadcast_on_save(params)
