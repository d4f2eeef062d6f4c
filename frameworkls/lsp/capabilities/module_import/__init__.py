"""Module import completion engine."""
from frameworkls.lsp.capabilities.module_import.import_detector import (
    is_module_imported,
)
from frameworkls.lsp.capabilities.module_import.anchor_finder import (
    find_first_line,
    function_declaration,
    local_binding,
    split_lines,
)
from frameworkls.lsp.capabilities.module_import.edit_synthesizer import (
    AnchorConflictError,
    EditSynthesizer,
    ModuleEdit,
)
from frameworkls.lsp.capabilities.module_import.candidate_ranker import (
    ModuleCandidate,
    RankingResult,
    rank_candidates,
)

__all__ = [
    "is_module_imported",
    "find_first_line",
    "function_declaration",
    "local_binding",
    "split_lines",
    "AnchorConflictError",
    "EditSynthesizer",
    "ModuleEdit",
    "ModuleCandidate",
    "RankingResult",
    "rank_candidates",
]
