"""
ModulesCache: registry of Framework modules found in the workspace.

Modules are discovered from path structure alone:

    src/Client/UI/C_Grid.lua   -> Grid   (Client, namespace UI)
    src/Server/S_Data.lua      -> Data   (Server, no namespace)

The registry is an immutable snapshot. Every scan builds a complete new
snapshot and publishes it by swapping a single reference, so readers never
see a half-built list.
"""
from __future__ import annotations

import asyncio
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path, PurePath

from lsprotocol.types import DidSaveTextDocumentParams, MessageType
from pygls.uris import to_fs_path

from frameworkls.context.types import Partition
from frameworkls.utils.find_files import (
    find_module_files,
    find_source_root,
    parse_module_file_name,
)
from frameworkls.workspace.cache import CachedWorkspace, ScanError, WorkspaceCache


@dataclass(frozen=True)
class ModuleDescriptor:
    """A discovered module file."""

    name: str
    partition: Partition
    namespace: tuple[str, ...]
    file_name: str
    # Only used as an identity key, the file is never re-read
    location: Path

    @property
    def subpath(self) -> str:
        """Dotted namespace, empty for modules directly under the partition."""
        return ".".join(self.namespace)

    @property
    def module_stem(self) -> str:
        """File name without its extension (``C_Grid``)."""
        return PurePath(self.file_name).stem

    @property
    def display_path(self) -> str:
        """``Client.UI.Grid``; an empty namespace is left out."""
        return ".".join([self.partition.value, *self.namespace, self.name])

    def qualified_name(self, root: str = "Framework") -> str:
        return f"{root}.{self.display_path}"

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match; an empty query matches everything."""
        return not query or query.lower() in self.name.lower()


@dataclass(frozen=True)
class ModuleRegistry:
    """Read-only snapshot of the modules found by one scan."""

    modules: tuple[ModuleDescriptor, ...] = ()
    generation: int = 0

    def __len__(self) -> int:
        return len(self.modules)

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(self.modules)

    def for_partition(self, partition: Partition) -> list[ModuleDescriptor]:
        return [m for m in self.modules if m.partition == partition]

    def contains_location(self, location: Path) -> bool:
        return any(m.location == location for m in self.modules)


class ModulesCache(CachedWorkspace):
    """
    Cache of Framework modules.

    Overlapping scans are ordered by a generation counter: a scan does not
    publish once a newer scan has published its own snapshot.
    """

    def __init__(self, workspace_cache: WorkspaceCache) -> None:
        super().__init__(workspace_cache)
        self._registry = ModuleRegistry()
        self._generation = 0

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    async def initialize(self):
        self._registry = ModuleRegistry()

    async def scan(self) -> bool:
        self._generation += 1
        generation = self._generation
        roots = list(self.workspace_roots)

        self.log("Starting Framework scan...", MessageType.Info)

        # The walk is the only blocking step, keep it off the event loop
        try:
            modules = await asyncio.to_thread(self._collect_modules, roots)
        except OSError as e:
            raise ScanError(f"could not enumerate workspace: {e}") from e

        # Stale only once a newer scan has published
        if generation < self._registry.generation:
            self.log(
                f"Discarding scan #{generation}, superseded by scan "
                f"#{self._registry.generation}",
                MessageType.Info,
            )
            return False

        self._registry = ModuleRegistry(tuple(modules), generation)

        for module in modules:
            self.log(f"  Indexed: {module.display_path}")
        self.log(
            f"Scan complete. Found {len(modules)} framework modules",
            MessageType.Info,
        )
        return True

    def _collect_modules(self, roots: list[Path]) -> list[ModuleDescriptor]:
        modules: list[ModuleDescriptor] = []
        for root in roots:
            for partition, namespace, path in find_module_files(root, self.settings):
                name = parse_module_file_name(path.name, self.settings)
                if name is None:
                    continue
                modules.append(
                    ModuleDescriptor(
                        name=name,
                        partition=partition,
                        namespace=namespace,
                        file_name=path.name,
                        location=path,
                    )
                )
        return modules

    # ===== Text sync =====

    def register_text_sync_hooks(self) -> None:
        if not self.server or not getattr(self.server, "text_sync_manager", None):
            return
        self.server.text_sync_manager.add_on_save_hook(self._on_module_file_saved)

    def is_module_path(self, path: Path) -> bool:
        """Whether ``path`` is a file the scanner would index."""
        if parse_module_file_name(path.name, self.settings) is None:
            return False

        for root in self.workspace_roots:
            source_root = find_source_root(root, self.settings)
            if source_root is None:
                continue
            for marker in self.settings.markers:
                if path.is_relative_to(source_root / marker):
                    return True
        return False

    async def _on_module_file_saved(self, params: DidSaveTextDocumentParams) -> None:
        """Rescan when a module file that is not indexed yet gets saved."""
        fs_path = to_fs_path(params.text_document.uri)
        if fs_path is None:
            return

        path = Path(fs_path)
        if not self.is_module_path(path) or self._registry.contains_location(path):
            return

        self.log(f"New module file saved: {path.name}, rescanning...", MessageType.Info)
        await self.workspace_cache.rescan()
