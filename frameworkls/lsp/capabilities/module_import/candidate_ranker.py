"""
Candidate selection for module completion.

File: frameworkls/lsp/capabilities/module_import/candidate_ranker.py
"""
from __future__ import annotations

from dataclasses import dataclass, field

from frameworkls.context.types import Partition
from frameworkls.lsp.capabilities.module_import.import_detector import (
    is_module_imported,
)
from frameworkls.workspace.modules_cache import ModuleDescriptor, ModuleRegistry


@dataclass(frozen=True)
class ModuleCandidate:
    """A module offered for completion."""

    module: ModuleDescriptor
    already_imported: bool

    @property
    def sort_key(self) -> tuple[bool, str]:
        """Not-imported modules first, then alphabetical."""
        return (self.already_imported, self.module.name)

    @property
    def preselect(self) -> bool:
        return not self.already_imported


@dataclass
class RankingResult:
    query: str
    candidates: list[ModuleCandidate] = field(default_factory=list)


def rank_candidates(
    registry: ModuleRegistry,
    partition: Partition,
    query: str,
    text: str,
) -> RankingResult:
    """
    Select the modules to offer in a document.

    Only modules from the document's own partition are considered, so a
    document outside both partitions gets nothing. Registry order is kept;
    clients order by ``sort_key``.
    """
    query = query.lower()
    result = RankingResult(query=query)

    for module in registry.for_partition(partition):
        if not module.matches(query):
            continue
        result.candidates.append(
            ModuleCandidate(
                module=module,
                already_imported=is_module_imported(text, module.name),
            )
        )

    return result
