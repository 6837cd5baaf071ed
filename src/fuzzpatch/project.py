from __future__ import annotations

import asyncio
import difflib
import pathlib
import posixpath
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .logger import logger
from .patch import DEFAULT_FILE_PATH, ApplyResult, FilePatch, apply_operations, parse_patch

FORMAT_HINT = (
    "Expected '### File: <path>' headers followed by "
    "<<<<<<< SEARCH / ======= / >>>>>>> REPLACE blocks."
)


class PatchPathError(ValueError):
    """Raised when a patch targets a path outside of the project root."""


class FileApplyStatus(str, Enum):
    Update = "update"
    PartialUpdate = "partial_update"
    Failed = "failed"
    Missing = "missing"


@dataclass
class PatchError:
    msg: str
    hint: Optional[str] = None
    filename: Optional[str] = None


class PatchFileOps(ABC):
    """
    Abstract contract for file operations used by the project applier.
    Implementations must handle path safety and track the changes map.
    """

    @abstractmethod
    def open(self, rel: str) -> str: ...

    @abstractmethod
    def write(self, rel: str, content: str) -> None: ...

    @property
    @abstractmethod
    def changes_map(self) -> Dict[str, str]:
        """A map of relative file paths to change kind ('updated')."""
        ...

    def target_key(self, rel: str) -> str:
        """Identity of the file rel names; spellings of one file share a key."""
        return posixpath.normpath(rel.replace("\\", "/"))


class FileSystemPatchFileOps(PatchFileOps):
    """
    File-backed implementation that keeps every access under base_path.
    Files are read and written without newline translation so CRLF content
    reaches the matcher unchanged.
    """

    def __init__(self, base_path: pathlib.Path, encoding: str = "utf-8"):
        self._base_path = pathlib.Path(base_path)
        self._encoding = encoding
        self._changes: Dict[str, str] = {}

    def _resolve_safe_path(self, rel: str) -> pathlib.Path:
        if rel.startswith("/") or rel.startswith("~") or pathlib.PureWindowsPath(rel).drive:
            raise PatchPathError(f"Absolute paths are not allowed: {rel}")
        abs_path = (self._base_path / rel).resolve()
        if abs_path.is_relative_to(self._base_path.resolve()):
            return abs_path
        raise PatchPathError(f"Path escapes project root: {rel}")

    def target_key(self, rel: str) -> str:
        try:
            path = self._resolve_safe_path(rel)
        except PatchPathError:
            return rel
        return path.relative_to(self._base_path.resolve()).as_posix()

    def open(self, rel: str) -> str:
        path = self._resolve_safe_path(rel)
        with path.open("rt", encoding=self._encoding, newline="") as fh:
            return fh.read()

    def write(self, rel: str, content: str) -> None:
        path = self._resolve_safe_path(rel)
        with path.open("wt", encoding=self._encoding, newline="") as fh:
            fh.write(content)
        self._changes[rel] = "updated"

    @property
    def changes_map(self) -> Dict[str, str]:
        return self._changes


@dataclass
class FileOutcome:
    path: str
    status: FileApplyStatus
    original: Optional[str] = None
    result: Optional[ApplyResult] = None
    read_error: Optional[PatchError] = None

    @property
    def changed(self) -> bool:
        return self.result is not None and self.result.modified != self.original


@dataclass
class PatchSummary:
    text: str
    outcome: str  # "success" or "fail"
    changes_map: Dict[str, str] = field(default_factory=dict)
    statuses: Dict[str, FileApplyStatus] = field(default_factory=dict)
    errors: List[PatchError] = field(default_factory=list)
    files: List[FileOutcome] = field(default_factory=list)


def _status_for(result: ApplyResult) -> FileApplyStatus:
    if result.success:
        return FileApplyStatus.Update
    if result.applied_count:
        return FileApplyStatus.PartialUpdate
    return FileApplyStatus.Failed


def _prepare_one(fp: FilePatch, ops: PatchFileOps, strict: bool) -> FileOutcome:
    try:
        original = ops.open(fp.file_path)
    except (OSError, UnicodeDecodeError, PatchPathError, KeyError) as e:
        hint = f"{type(e).__name__}: {e}"
        if fp.file_path == DEFAULT_FILE_PATH:
            hint = f"No file header found. {FORMAT_HINT}"
        return FileOutcome(
            path=fp.file_path,
            status=FileApplyStatus.Missing,
            read_error=PatchError(
                msg=f"Failed to read file: {fp.file_path}",
                hint=hint,
                filename=fp.file_path,
            ),
        )

    result = apply_operations(original, fp.operations, strict=strict)
    logger.info(
        "project.prepare",
        path=fp.file_path,
        operations=len(fp.operations),
        applied=result.applied_count,
    )
    return FileOutcome(
        path=fp.file_path,
        status=_status_for(result),
        original=original,
        result=result,
    )


def merge_same_targets(
    file_patches: Sequence[FilePatch], ops: PatchFileOps
) -> List[FilePatch]:
    """
    Fold patches whose paths name the same file (a.txt, ./a.txt) into one,
    so every edit runs against the result of the previous one. The first
    spelling and first-seen order are kept.
    """
    merged: Dict[str, FilePatch] = {}
    for fp in file_patches:
        key = ops.target_key(fp.file_path)
        if key in merged:
            merged[key].operations.extend(fp.operations)
        else:
            merged[key] = FilePatch(fp.file_path, list(fp.operations))
    return list(merged.values())


async def prepare_files(
    file_patches: Sequence[FilePatch], ops: PatchFileOps, *, strict: bool = False
) -> List[FileOutcome]:
    """
    Read and patch every file concurrently. Files do not depend on each other;
    operations inside one file still run in order. Output follows input order,
    with patches for the same file merged first.
    """
    targets = merge_same_targets(file_patches, ops)
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(_prepare_one, fp, ops, strict) for fp in targets)
    )
    return list(outcomes)


def render_unified_diff(outcome: FileOutcome) -> str:
    if outcome.result is None or outcome.original is None:
        return ""
    return "".join(
        difflib.unified_diff(
            outcome.original.splitlines(keepends=True),
            outcome.result.modified.splitlines(keepends=True),
            fromfile=f"a/{outcome.path}",
            tofile=f"b/{outcome.path}",
        )
    )


def _should_write(outcome: FileOutcome, allow_partial: bool) -> bool:
    if not outcome.changed:
        return False
    if outcome.status == FileApplyStatus.Update:
        return True
    return allow_partial and outcome.status == FileApplyStatus.PartialUpdate


def _summarize(
    outcomes: List[FileOutcome],
    errors: List[PatchError],
    written: List[str],
    *,
    write: bool,
) -> str:
    updated = [o.path for o in outcomes if o.status == FileApplyStatus.Update]
    partial = [o.path for o in outcomes if o.status == FileApplyStatus.PartialUpdate]
    failed = [
        o.path
        for o in outcomes
        if o.status in (FileApplyStatus.Failed, FileApplyStatus.Missing)
    ]

    lines: List[str] = []
    if not errors:
        lines.append("Applied patch successfully." if write else "Patch applies cleanly.")
    elif updated or partial:
        lines.append("Patch application completed with errors. Summary:")
    else:
        lines.append("Patch application failed. No changes were applied.")

    if updated:
        lines.append("Fully updated files:")
        lines.extend(f"* {f}" for f in updated)
    if partial:
        lines.append("Partially updated files (some blocks failed):")
        for f in partial:
            suffix = "" if f in written or not write else " (not written)"
            lines.append(f"* {f}{suffix}")
    if failed:
        lines.append("Failed files:")
        lines.extend(f"* {f}" for f in failed)

    if errors:
        targets = sorted(set(partial) | set(failed))
        if targets:
            lines.append("Please regenerate blocks for the failed parts in these files:")
            lines.extend(f"* {f}" for f in targets)
        lines.append("Errors:")
        for e in errors:
            loc = f"{e.filename}: " if e.filename else ""
            lines.append(f"* {loc}{e.msg}")
            if e.hint:
                lines.append(f"  Hint: {e.hint}")
    return "\n".join(lines)


async def apply_patch(
    text: str,
    base_path: pathlib.Path,
    ops: Optional[PatchFileOps] = None,
    *,
    strict: bool = False,
    write: bool = True,
    allow_partial: bool = False,
    encoding: str = "utf-8",
) -> PatchSummary:
    """
    Parse an edit script, apply it to the files under base_path and persist
    the results. Fully applied files are written; partially applied ones only
    when allow_partial is set. With write=False nothing is written.
    If ops is not provided, a file-backed implementation under base_path is used.
    """
    file_ops = ops or FileSystemPatchFileOps(base_path, encoding=encoding)

    file_patches = parse_patch(text)
    if not file_patches:
        err = PatchError(msg="No SEARCH/REPLACE blocks found in patch", hint=FORMAT_HINT)
        return PatchSummary(
            text=_summarize([], [err], [], write=write),
            outcome="fail",
            errors=[err],
        )

    outcomes = await prepare_files(file_patches, file_ops, strict=strict)

    errors: List[PatchError] = []
    for o in outcomes:
        if o.read_error is not None:
            errors.append(o.read_error)
        elif o.result is not None:
            errors.extend(PatchError(msg=msg, filename=o.path) for msg in o.result.errors)

    written: List[str] = []
    if write:
        for o in outcomes:
            if not _should_write(o, allow_partial):
                continue
            try:
                file_ops.write(o.path, o.result.modified)  # type: ignore[union-attr]
                written.append(o.path)
                logger.info("project.write", path=o.path)
            except (OSError, UnicodeEncodeError, PatchPathError) as e:
                logger.warning("project.write_failed", path=o.path, exc_info=True)
                errors.append(
                    PatchError(
                        msg=f"Failed to write file: {o.path}",
                        hint=f"{type(e).__name__}: {e}",
                        filename=o.path,
                    )
                )

    for e in errors:
        logger.info("project.error", path=e.filename, msg=e.msg)

    return PatchSummary(
        text=_summarize(outcomes, errors, written, write=write),
        outcome="fail" if errors else "success",
        changes_map=dict(file_ops.changes_map),
        statuses={o.path: o.status for o in outcomes},
        errors=errors,
        files=outcomes,
    )
