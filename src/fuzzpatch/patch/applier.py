from __future__ import annotations

from typing import List, Optional, Sequence

from ..logger import logger
from .matcher import match_operation, preview
from .models import ApplyResult, MatchTier, Operation


def format_match_error(op: Operation, reason: Optional[str]) -> str:
    msg = f"Failed to apply block starting with: {preview(op.original_block)!r}"
    if reason:
        msg = f"{msg} ({reason})"
    return msg


def apply_operations(
    original: str, operations: Sequence[Operation], *, strict: bool = False
) -> ApplyResult:
    """
    Apply operations in order, each against the buffer left by the previous one.
    A failed operation is recorded in errors and leaves the buffer untouched;
    the remaining operations still run.
    """
    buffer = original
    errors: List[str] = []
    matches: List[Optional[MatchTier]] = []

    for op in operations:
        res = match_operation(buffer, op, strict=strict)
        if res.ok:
            assert res.buffer is not None
            buffer = res.buffer
            matches.append(res.tier)
            continue
        errors.append(format_match_error(op, res.reason))
        matches.append(None)

    if errors:
        logger.debug(
            "patch.apply", operations=len(operations), failed=len(errors)
        )
    return ApplyResult(modified=buffer, errors=errors, matches=matches)
