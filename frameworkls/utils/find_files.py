"""
Directory walking for Framework module files.

Modules are classified from path structure alone; file contents are
never opened here.
"""
from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

from frameworkls.context.types import Partition
from frameworkls.settings import Settings


def module_file_pattern(settings: Settings) -> re.Pattern[str]:
    """Regex for ``<prefix>_<Name><extension>`` with the module name in group 1."""
    prefixes = "".join(re.escape(p) for p in settings.prefixes)
    return re.compile(
        rf"^[{prefixes}]_(\w+){re.escape(settings.extension)}$"
    )


def parse_module_file_name(file_name: str, settings: Settings) -> str | None:
    """
    Extract the module name from a file name.

    ``S_Grid.lua`` -> ``Grid``. Returns None when the name does not follow
    the convention.
    """
    if not settings.prefixes:
        return None

    match = module_file_pattern(settings).match(file_name)
    if match is None:
        return None
    return match.group(1)


def find_source_root(workspace_root: Path, settings: Settings) -> Path | None:
    """Return ``<workspace_root>/<source_dir>`` if it exists."""
    candidate = workspace_root / settings.source_dir
    if candidate.is_dir():
        return candidate
    return None


def find_module_files(
    workspace_root: Path,
    settings: Settings,
) -> Iterator[tuple[Partition, tuple[str, ...], Path]]:
    """
    Walk the partition directories of a workspace.

    Yields ``(partition, namespace, path)`` for every file that follows the
    module naming convention. ``namespace`` holds the directory names
    between the partition directory and the file.

    The partition is the directory the walk started from; a nested folder
    that happens to share a marker name is just another namespace segment.

    OSError raised while listing a directory is propagated to the caller.
    """
    source_root = find_source_root(workspace_root, settings)
    if source_root is None:
        return

    partitions = (
        (settings.client_marker, Partition.CLIENT),
        (settings.server_marker, Partition.SERVER),
    )
    for marker, partition in partitions:
        partition_root = source_root / marker
        if not partition_root.is_dir():
            continue

        for namespace, path in _walk(partition_root, ()):
            if parse_module_file_name(path.name, settings) is not None:
                yield partition, namespace, path


def _walk(
    directory: Path, namespace: tuple[str, ...]
) -> Iterator[tuple[tuple[str, ...], Path]]:
    for item in sorted(directory.iterdir()):
        if item.name.startswith("."):
            continue
        if item.is_dir():
            yield from _walk(item, namespace + (item.name,))
        elif item.is_file():
            yield namespace, item
