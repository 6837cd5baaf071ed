from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class MatchTier(str, Enum):
    EXACT = "exact"
    NEWLINE = "newline"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class Operation:
    # Text between the fences, without the whitespace bordering them
    original_block: str
    modified_block: str


@dataclass
class FilePatch:
    file_path: str
    operations: List[Operation] = field(default_factory=list)


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of a single match attempt.
    On success `buffer` holds the new text and `tier` the strategy that matched.
    On failure both are None and `reason` explains why.
    """

    buffer: Optional[str] = None
    tier: Optional[MatchTier] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.buffer is not None


@dataclass(frozen=True)
class ApplyResult:
    modified: str
    errors: List[str] = field(default_factory=list)
    # One entry per operation, None where the operation failed
    matches: List[Optional[MatchTier]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def applied_count(self) -> int:
        return sum(1 for m in self.matches if m is not None)
