from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

import click
from pydantic import ValidationError
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from .logger import configure_logging
from .patch import get_instruction, parse_patch
from .patch.matcher import preview
from .project import apply_patch, render_unified_diff
from .settings import LogLevel, LoggingSettings, Settings, find_settings_file, load_settings


@dataclass
class CliState:
    settings: Settings
    config_path: Optional[Path] = None
    log_level: Optional[str] = None


def _load(path: Path) -> Settings:
    try:
        return load_settings(path)
    except (ValueError, ValidationError) as exc:
        raise click.BadParameter(str(exc), param_hint="--config") from exc


def _with_log_level(settings: Settings, log_level: Optional[str]) -> Settings:
    if log_level:
        base = settings.logging or LoggingSettings()
        settings.logging = base.model_copy(update={"default_level": LogLevel(log_level)})
    return settings


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (.yaml, .yml, .json, .json5).",
)
@click.option(
    "--log-level",
    type=click.Choice([lvl.value for lvl in LogLevel]),
    default=None,
    help="Override the configured log level.",
)
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], log_level: Optional[str]) -> None:
    """Apply fuzzy SEARCH/REPLACE edit scripts to a project."""
    settings = _load(config_path) if config_path else Settings()
    settings = _with_log_level(settings, log_level)
    configure_logging(settings.logging)
    ctx.obj = CliState(settings=settings, config_path=config_path, log_level=log_level)


@main.command("parse")
@click.argument("script", type=click.File("r", encoding="utf-8"))
def parse_cmd(script: TextIO) -> None:
    """List the files and blocks found in SCRIPT ('-' for stdin)."""
    console = Console()
    file_patches = parse_patch(script.read())
    if not file_patches:
        console.print("No SEARCH/REPLACE blocks found.")
        return

    table = Table("File", "Blocks", "First block")
    for fp in file_patches:
        table.add_row(
            fp.file_path,
            str(len(fp.operations)),
            preview(" ".join(fp.operations[0].original_block.split()), 30),
        )
    console.print(table)


@main.command("apply")
@click.argument("script", type=click.File("r", encoding="utf-8"))
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Project root that file paths are relative to.",
)
@click.option("--dry-run", is_flag=True, help="Report results without writing files.")
@click.option("--strict/--no-strict", default=None, help="Reject ambiguous fuzzy matches.")
@click.option(
    "--allow-partial/--no-allow-partial",
    default=None,
    help="Write files where only some blocks applied.",
)
@click.option("--diff/--no-diff", "show_diff", default=None, help="Print a unified diff per file.")
@click.pass_obj
def apply_cmd(
    state: CliState,
    script: TextIO,
    root: Path,
    dry_run: bool,
    strict: Optional[bool],
    allow_partial: Optional[bool],
    show_diff: Optional[bool],
) -> None:
    """Apply SCRIPT ('-' for stdin) to the files under --root."""
    settings = state.settings
    if state.config_path is None:
        found = find_settings_file(root)
        if found is not None:
            settings = _with_log_level(_load(found), state.log_level)
            configure_logging(settings.logging)

    opts = settings.patch
    summary = asyncio.run(
        apply_patch(
            script.read(),
            root,
            strict=opts.strict if strict is None else strict,
            write=not dry_run,
            allow_partial=opts.allow_partial if allow_partial is None else allow_partial,
            encoding=opts.encoding,
        )
    )

    console = Console()
    if opts.show_diff if show_diff is None else show_diff:
        for outcome in summary.files:
            diff = render_unified_diff(outcome)
            if diff:
                console.print(Syntax(diff, "diff", theme="ansi_dark"))
    console.print(summary.text, markup=False, highlight=False)

    if summary.outcome != "success":
        raise SystemExit(1)


@main.command("instructions")
def instructions_cmd() -> None:
    """Print the edit script format description for a model prompt."""
    click.echo(get_instruction())


if __name__ == "__main__":
    main()
