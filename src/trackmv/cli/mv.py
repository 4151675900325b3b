"""CLI entry point for moving tracked paths."""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from rich.console import Console

from trackmv.core.errors import TrackMvError, UsageError
from trackmv.core.move_service import MoveRequest, move_paths
from trackmv.core.planner import USAGE
from trackmv.core.report import MoveReporter
from trackmv.utils.debug import configure_logging

app: TyperType = typer.Typer(help="Move or rename tracked files and directories.")


PathsArgument = Annotated[
    list[str],
    typer.Argument(help="One or more sources followed by the destination."),
]
RootOption = Annotated[
    Path | None,
    typer.Option("--root", help="Working tree root (defaults to the current directory)."),
]
IndexOption = Annotated[
    Path | None,
    typer.Option("--index", help="Override the index store location."),
]
DryRunFlag = Annotated[
    bool,
    typer.Option("--dry-run", "-n", help="Only show what would happen."),
]
ForceFlag = Annotated[
    bool,
    typer.Option("--force", "-f", help="Overwrite existing plain-file destinations."),
]
IgnoreErrorsFlag = Annotated[
    bool,
    typer.Option("--ignore-errors", "-k", help="Skip sources that cannot be moved."),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Report each rename as it happens."),
]
JsonFlag = Annotated[
    bool,
    typer.Option("--json", help="Emit the move outcome as JSON."),
]


def move(  # noqa: D401
    paths: PathsArgument,
    root: RootOption = None,
    index: IndexOption = None,
    dry_run: DryRunFlag = False,
    force: ForceFlag = False,
    ignore_errors: IgnoreErrorsFlag = False,
    verbose: VerboseFlag = False,
    json_output: JsonFlag = False,
) -> None:
    """Move SOURCE... to DESTINATION and update the index."""

    configure_logging()

    if len(paths) < 2:
        typer.secho(f"usage: {USAGE}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=UsageError.exit_code)

    # keep stdout clean for the JSON payload
    reporter = (
        MoveReporter(ui=Console(stderr=True, highlight=False, soft_wrap=True))
        if json_output
        else MoveReporter()
    )
    request = MoveRequest(
        sources=paths[:-1],
        destination=paths[-1],
        root=root or Path.cwd(),
        index_path=index,
        dry_run=dry_run,
        force=force,
        ignore_errors=ignore_errors,
        verbose=verbose,
    )

    try:
        outcome = move_paths(request, reporter=reporter)
    except TrackMvError as exc:
        typer.secho(f"fatal: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=exc.exit_code) from exc

    if json_output:
        typer.echo(outcome.model_dump_json(indent=2))
    elif verbose and outcome.index_written:
        typer.secho(
            f"moved {len(outcome.added) + len(outcome.changed)} tracked path(s)",
            fg=typer.colors.GREEN,
        )


app.command("mv")(move)
