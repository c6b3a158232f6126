"""Implementations of the `apply` and `show` commands.

Each command returns a process exit code:
    0    everything applied
    1    rejected hunks or files that could not be written
    2    malformed patch, bad configuration or unreadable input
    130  cancelled with Ctrl+C
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

from rich.markup import escape
from rich.table import Table

from diffmend.config.loader import load_config
from diffmend.config.schema import Config
from diffmend.core.cancel import CancellationToken
from diffmend.core.errors import ConfigError, MalformedPatchError
from diffmend.display.console import get_console
from diffmend.host.markers import MarkerStore
from diffmend.host.progress import RichProgressMonitor
from diffmend.host.storage import DryRunStorage, FileSystemStorage
from diffmend.patch.patcher import OutcomeStatus, Patcher, PatchReport

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REJECTS = 1
EXIT_ERROR = 2
EXIT_CANCELLED = 130

_STATUS_STYLES = {
    OutcomeStatus.APPLIED: "green",
    OutcomeStatus.PARTIAL: "yellow",
    OutcomeStatus.DELETED: "cyan",
    OutcomeStatus.FAILED: "red",
    OutcomeStatus.SKIPPED: "dim",
}


def _print_error(message: str) -> None:
    get_console().print(f"[red]Error:[/] {escape(message)}", markup=True)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a copy of config with command line flags applied."""
    updates: dict[str, object] = {}
    if getattr(args, "strip", None) is not None:
        updates["strip_prefix_segments"] = args.strip
    if getattr(args, "fuzz", None) is not None:
        updates["fuzz"] = args.fuzz
    if getattr(args, "ignore_whitespace", None) is not None:
        updates["ignore_whitespace"] = args.ignore_whitespace
    if getattr(args, "reverse", None) is not None:
        updates["reversed"] = args.reverse
    if not updates:
        return config
    patch = config.patch.model_validate({**config.patch.model_dump(), **updates})
    return config.model_copy(update={"patch": patch})


@contextmanager
def _open_patch(source: str, encoding: str) -> Iterator[TextIO]:
    if source == "-":
        yield sys.stdin
        return
    with open(source, encoding=encoding, errors="surrogateescape", newline="") as fh:
        yield fh


def _load_patcher(args: argparse.Namespace, config: Config) -> Patcher | None:
    patcher = Patcher.from_config(config)
    try:
        with _open_patch(args.patch, config.patch.encoding) as fh:
            patcher.parse(fh)
    except MalformedPatchError as e:
        _print_error(f"Malformed patch: {e.message}")
        return None
    except OSError as e:
        _print_error(f"Cannot read patch {args.patch}: {e}")
        return None
    return patcher


def _print_report(report: PatchReport, dry_run: bool, cancel_reason: str | None = None) -> None:
    console = get_console()
    for outcome in report.outcomes:
        style = _STATUS_STYLES[outcome.status]
        line = f"[{style}]{outcome.status.value:>8}[/] {escape(outcome.path)}"
        if outcome.rejected:
            line += f" ({outcome.applied} applied, {outcome.rejected} rejected)"
            if outcome.reject_path:
                line += f", saving rejects to {escape(outcome.reject_path)}"
        if outcome.error:
            line += f": {escape(outcome.error)}"
        console.print(line, markup=True, highlight=False)

    if report.cancelled:
        reason = f" ({escape(cancel_reason)})" if cancel_reason else ""
        console.print(f"[yellow]Cancelled{reason}; files already patched were kept.[/]")
    elif dry_run:
        console.print("[dim]Dry run, no files were changed.[/]")


def cmd_apply(args: argparse.Namespace, config: Config) -> int:
    """Apply a patch to the files under args.directory."""
    try:
        config = apply_overrides(config, args)
    except ValueError as e:
        _print_error(str(e))
        return EXIT_ERROR

    patcher = _load_patcher(args, config)
    if patcher is None:
        return EXIT_ERROR

    excluded = set(args.exclude)
    for diff in patcher.diffs:
        if patcher.get_path(diff) in excluded:
            diff.enabled = False

    storage: FileSystemStorage | DryRunStorage = FileSystemStorage(args.directory)
    if args.dry_run:
        storage = DryRunStorage(storage)

    token = CancellationToken()
    monitor = RichProgressMonitor(get_console(), token)
    markers = MarkerStore()
    with token.cancel_on_sigint():
        report = patcher.apply_all(storage, progress=monitor, annotator=markers)

    _print_report(report, args.dry_run, token.reason)

    if report.cancelled:
        return EXIT_CANCELLED
    if not report.success:
        return EXIT_REJECTS
    return EXIT_OK


def cmd_show(args: argparse.Namespace, config: Config) -> int:
    """Print the files and hunks a patch contains."""
    try:
        config = apply_overrides(config, args)
    except ValueError as e:
        _print_error(str(e))
        return EXIT_ERROR

    patcher = _load_patcher(args, config)
    if patcher is None:
        return EXIT_ERROR

    table = Table(title=f"{len(patcher.diffs)} diff(s)")
    table.add_column("File")
    table.add_column("Kind")
    table.add_column("Hunks", justify="right")
    table.add_column("+", justify="right", style="green")
    table.add_column("-", justify="right", style="red")
    for diff in patcher.diffs:
        table.add_row(
            escape(patcher.get_path(diff)),
            diff.kind.value,
            str(len(diff.hunks)),
            str(sum(hunk.count_additions() for hunk in diff.hunks)),
            str(sum(hunk.count_removals() for hunk in diff.hunks)),
        )
    get_console().print(table)
    return EXIT_OK


def load_cli_config(config_path: Path | None) -> Config | None:
    """Load configuration for the CLI, printing errors instead of raising."""
    try:
        return load_config(config_path)
    except ConfigError as e:
        _print_error(e.message)
        return None
