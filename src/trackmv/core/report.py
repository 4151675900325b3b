"""Rich console output for move runs.

Reporting never mutates the index or the filesystem; dry runs rely on it to
show what a real run would do.
"""

from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape

from trackmv.core.models import MovePair
from trackmv.schemas import MoveOutcome


class MoveReporter:
    """Prints progress lines, warnings and dry-run summaries."""

    def __init__(self, ui: Console | None = None, err_ui: Console | None = None) -> None:
        """Initialize reporter.

        Args:
            ui: Console for regular output (stdout by default)
            err_ui: Console for warnings (stderr by default)
        """
        self._ui = ui or Console(highlight=False, soft_wrap=True)
        self._err = err_ui or Console(stderr=True, highlight=False, soft_wrap=True)

    def checking(self, pair: MovePair) -> None:
        self._ui.print(
            f"Checking rename of '{escape(pair.source)}' to "
            f"'{escape(pair.destination)}'"
        )

    def renaming(self, pair: MovePair) -> None:
        self._ui.print(
            f"Renaming {escape(pair.source)} to {escape(pair.destination)}"
        )

    def warning(self, message: str) -> None:
        self._err.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def summary(self, outcome: MoveOutcome) -> None:
        """Print the changed, added and deleted groups of a dry run."""
        self._show_list("Changed  : ", outcome.changed)
        self._show_list("Adding   : ", outcome.added)
        self._show_list("Deleting : ", outcome.deleted)

    def _show_list(self, label: str, paths: Iterable[str]) -> None:
        paths = list(paths)
        if paths:
            self._ui.print(label + escape(", ".join(paths)))
