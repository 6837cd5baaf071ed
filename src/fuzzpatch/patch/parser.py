from __future__ import annotations

import re
from typing import Dict, List

from ..logger import logger
from .models import FilePatch, Operation

# Path used when an edit script carries no file header at all
DEFAULT_FILE_PATH = "unknown_file"

SEARCH_FENCE_RE = re.compile(r"<{5,}\s*SEARCH", re.IGNORECASE)
DIVIDER_FENCE_RE = re.compile(r"={5,}")
REPLACE_FENCE_RE = re.compile(r">{5,}\s*REPLACE", re.IGNORECASE)
FILE_HEADER_RE = re.compile(
    r"^#{0,3}[ \t]*File:[ \t]*(?P<path>\S.*?)[ \t]*\r?$",
    re.IGNORECASE | re.MULTILINE,
)

# Remainder of a fence line, including its line break
_LINE_REST_RE = re.compile(r"[^\n]*\n?")


def _skip_line_rest(text: str, pos: int, end: int) -> int:
    m = _LINE_REST_RE.match(text, pos, end)
    return m.end() if m else pos


def _skip_space(text: str, pos: int, end: int) -> int:
    while pos < end and text[pos].isspace():
        pos += 1
    return pos


def _rskip_space(text: str, start: int, pos: int) -> int:
    while pos > start and text[pos - 1].isspace():
        pos -= 1
    return pos


def extract_operations(segment: str) -> List[Operation]:
    """
    Extract SEARCH/REPLACE hunks from a text segment, in document order.

    All opening fences are located first. Each hunk is searched for only
    between its opening fence and the next one, so an unterminated hunk can
    never swallow the hunk that follows it; it is dropped instead.
    """
    starts = list(SEARCH_FENCE_RE.finditer(segment))
    ops: List[Operation] = []

    for idx, opening in enumerate(starts):
        window_end = starts[idx + 1].start() if idx + 1 < len(starts) else len(segment)
        body_start = _skip_line_rest(segment, opening.end(), window_end)

        divider = DIVIDER_FENCE_RE.search(segment, body_start, window_end)
        if divider is None:
            continue
        closing = REPLACE_FENCE_RE.search(segment, divider.end(), window_end)
        if closing is None:
            continue

        # Blocks start at their first non-space char and end at their last one
        search_start = _skip_space(segment, body_start, divider.start())
        search_end = _rskip_space(segment, search_start, divider.start())
        replace_start = _skip_line_rest(segment, divider.end(), closing.start())
        replace_start = _skip_space(segment, replace_start, closing.start())
        replace_end = _rskip_space(segment, replace_start, closing.start())
        ops.append(
            Operation(
                original_block=segment[search_start:search_end],
                modified_block=segment[replace_start:replace_end],
            )
        )

    return ops


def parse_patch(text: str) -> List[FilePatch]:
    """
    Split an edit script into per-file patches:

    ### File: path/to/file.ext
    <<<<<<< SEARCH
    <current content, exact or approximate>
    =======
    <replacement content>
    >>>>>>> REPLACE

    Repeated headers for the same path accumulate operations; patches are
    ordered by the first appearance of their path. Without any header the
    whole text is treated as a single patch for DEFAULT_FILE_PATH.
    Malformed input never raises, it only yields fewer operations.
    """
    headers = list(FILE_HEADER_RE.finditer(text))

    if not headers:
        ops = extract_operations(text)
        if not ops:
            return []
        logger.debug("patch.parse", files=1, operations=len(ops), headerless=True)
        return [FilePatch(file_path=DEFAULT_FILE_PATH, operations=ops)]

    by_path: Dict[str, List[Operation]] = {}
    for idx, header in enumerate(headers):
        seg_end = headers[idx + 1].start() if idx + 1 < len(headers) else len(text)
        ops = extract_operations(text[header.end() : seg_end])
        if not ops:
            continue
        by_path.setdefault(header.group("path"), []).extend(ops)

    logger.debug(
        "patch.parse",
        files=len(by_path),
        operations=sum(len(v) for v in by_path.values()),
    )
    return [FilePatch(file_path=p, operations=ops) for p, ops in by_path.items()]
