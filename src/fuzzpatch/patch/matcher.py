from __future__ import annotations

from typing import List, Optional, Tuple

from ..logger import logger
from .models import MatchResult, MatchTier, Operation

PREVIEW_CHARS = 50


def preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    return f"{text[:limit]}..."


def _strip_whitespace_with_map(text: str) -> Tuple[str, List[int]]:
    """
    Strip all whitespace from text, returning (tokens, position_map).
    position_map[i] is the offset in text of the i-th non-whitespace char.
    """
    chars: List[str] = []
    positions: List[int] = []
    for i, ch in enumerate(text):
        if not ch.isspace():
            chars.append(ch)
            positions.append(i)
    return "".join(chars), positions


def _count_occurrences(hay: str, needle: str, first: int) -> int:
    count = 1
    idx = hay.find(needle, first + 1)
    while idx != -1:
        count += 1
        idx = hay.find(needle, idx + 1)
    return count


def _match_exact(buffer: str, op: Operation) -> Optional[str]:
    if op.original_block not in buffer:
        return None
    return buffer.replace(op.original_block, op.modified_block, 1)


def _match_newline(buffer: str, op: Operation) -> Optional[str]:
    norm_buffer = buffer.replace("\r\n", "\n")
    norm_search = op.original_block.replace("\r\n", "\n")
    if norm_search not in norm_buffer:
        return None
    # The normalized buffer becomes the working copy for every later operation
    return norm_buffer.replace(
        norm_search, op.modified_block.replace("\r\n", "\n"), 1
    )


def _match_fuzzy(
    buffer: str, op: Operation, *, strict: bool
) -> Tuple[Optional[str], Optional[str]]:
    needle, _ = _strip_whitespace_with_map(op.original_block)
    if not needle:
        return None, "SEARCH block contains only whitespace"

    hay, pos_map = _strip_whitespace_with_map(buffer)
    idx = hay.find(needle)
    if idx == -1:
        return None, "SEARCH block not found"

    if strict:
        count = _count_occurrences(hay, needle, idx)
        if count > 1:
            return None, f"SEARCH block is ambiguous ({count} candidate regions)"

    start = pos_map[idx]
    end = pos_map[idx + len(needle) - 1] + 1
    # Swallow trailing spaces/tabs of the replaced line, never the line break
    while end < len(buffer) and buffer[end] in " \t":
        end += 1

    logger.debug("patch.match.fuzzy", start=start, end=end)
    return buffer[:start] + op.modified_block + buffer[end:], None


def match_operation(
    buffer: str, op: Operation, *, strict: bool = False
) -> MatchResult:
    """
    Locate op.original_block in buffer and substitute op.modified_block.

    Strategies, first success wins:
      1. exact substring, leftmost occurrence;
      2. same after converting CRLF to LF; the returned buffer stays LF-only;
      3. whitespace-insensitive token match, leftmost occurrence. With
         strict=True more than one candidate region is a failure.

    Never raises for a failed match; the returned MatchResult carries the reason.
    """
    new_buffer = _match_exact(buffer, op)
    if new_buffer is not None:
        logger.debug("patch.match", tier=MatchTier.EXACT.value)
        return MatchResult(buffer=new_buffer, tier=MatchTier.EXACT)

    new_buffer = _match_newline(buffer, op)
    if new_buffer is not None:
        logger.debug("patch.match", tier=MatchTier.NEWLINE.value)
        return MatchResult(buffer=new_buffer, tier=MatchTier.NEWLINE)

    new_buffer, reason = _match_fuzzy(buffer, op, strict=strict)
    if new_buffer is not None:
        logger.debug("patch.match", tier=MatchTier.FUZZY.value)
        return MatchResult(buffer=new_buffer, tier=MatchTier.FUZZY)

    logger.debug("patch.match.failed", reason=reason, block=preview(op.original_block))
    return MatchResult(reason=reason)
