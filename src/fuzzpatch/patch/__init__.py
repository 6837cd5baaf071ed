from __future__ import annotations

from .applier import apply_operations, format_match_error
from .instructions import EDIT_SCRIPT_INSTRUCTION, get_instruction
from .matcher import PREVIEW_CHARS, match_operation
from .models import ApplyResult, FilePatch, MatchResult, MatchTier, Operation
from .parser import DEFAULT_FILE_PATH, extract_operations, parse_patch

__all__ = [
    "ApplyResult",
    "DEFAULT_FILE_PATH",
    "EDIT_SCRIPT_INSTRUCTION",
    "FilePatch",
    "MatchResult",
    "MatchTier",
    "Operation",
    "PREVIEW_CHARS",
    "apply_operations",
    "extract_operations",
    "format_match_error",
    "get_instruction",
    "match_operation",
    "parse_patch",
]
