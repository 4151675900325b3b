"""CLI commands for tracking paths and inspecting the index."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")

from trackmv.core.errors import TrackMvError
from trackmv.core.index_service import add_paths, list_paths
from trackmv.utils.debug import configure_logging

RootOption = Annotated[
    Path | None,
    typer.Option("--root", help="Working tree root (defaults to the current directory)."),
]
IndexOption = Annotated[
    Path | None,
    typer.Option("--index", help="Override the index store location."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Print each path as it is tracked."),
]
PrefixArgument = Annotated[
    str | None,
    typer.Argument(help="Only list entries at or under this path."),
]
LongFlag = Annotated[
    bool,
    typer.Option("--long", "-l", help="Show mode, size and fingerprint."),
]


def add(
    paths: Annotated[list[str], typer.Argument(help="Files or directories to track.")],
    root: RootOption = None,
    index: IndexOption = None,
    verbose: VerboseFlag = False,
) -> None:
    """Record files in the index, recursing into directories."""

    configure_logging()
    try:
        touched = add_paths(paths, root or Path.cwd(), index_path=index)
    except TrackMvError as exc:
        typer.secho(f"fatal: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=exc.exit_code) from exc

    if verbose:
        for path in touched:
            typer.echo(f"add '{path}'")


def ls_files(
    prefix: PrefixArgument = None,
    root: RootOption = None,
    index: IndexOption = None,
    long: LongFlag = False,
) -> None:
    """List tracked paths in index order."""

    configure_logging()
    try:
        entries = list_paths(root or Path.cwd(), prefix=prefix, index_path=index)
    except TrackMvError as exc:
        typer.secho(f"fatal: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=exc.exit_code) from exc

    for entry in entries:
        if long:
            fingerprint = (entry.fingerprint or "-")[:12]
            typer.echo(f"{entry.mode:06o} {entry.size:>10} {fingerprint:<12} {entry.path}")
        else:
            typer.echo(entry.path)

