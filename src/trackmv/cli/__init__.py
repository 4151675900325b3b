"""CLI entrypoints for trackmv."""

from __future__ import annotations

import importlib
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing only
    import typer
    from typer import Typer as TyperType
else:  # pragma: no cover - runtime fallback for typing
    typer = importlib.import_module("typer")
    TyperType = Any

from trackmv.cli.index import add, ls_files
from trackmv.cli.mv import app as mv_app
from trackmv.cli.mv import move

app: TyperType = typer.Typer(
    help="Move files and directories while keeping the tracked-path index in sync.",
    no_args_is_help=True,
)
app.command("mv")(move)
app.command("add")(add)
app.command("ls")(ls_files)


def main(args: Sequence[str] | None = None) -> None:
    app(args=args)


__all__ = ["app", "main", "mv_app"]
