from .patch import (
    ApplyResult,
    FilePatch,
    MatchTier,
    Operation,
    apply_operations,
    parse_patch,
)

__all__ = [
    "ApplyResult",
    "FilePatch",
    "MatchTier",
    "Operation",
    "apply_operations",
    "parse_patch",
]
