"""Rich progress display for catalog synchronization."""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from runecache.core.cache.progress import SyncProgress

_PHASES: dict[str, tuple[str, str]] = {
    "Fetch": ("Fetching catalog", "cyan"),
    "Store": ("Writing mirror", "green"),
}


def _describe(error: BaseException, width: int = 60) -> str:
    text = str(error) or type(error).__name__
    return text if len(text) <= width else text[: width - 1] + "…"


class RichSyncProgress(SyncProgress):
    """Renders the cache's Fetch and Store phases as Rich progress rows.

    One row per phase: a phase that starts again (the corrective fetch after
    a short initialization) replaces its row. ``Store`` advances once per
    written batch; ``Fetch`` is indeterminate until it completes. Use as a
    context manager around the SDK call::

        with RichSyncProgress() as progress:
            status = await RuneCache.from_config(config, progress=progress).sync()
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("[{task.fields[style]}]{task.description:<18}"),
            BarColumn(bar_width=24),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("[dim]{task.fields[detail]}"),
            console=self.console,
        )
        self._rows: dict[str, RichTaskID] = {}
        self._totals: dict[str, int | None] = {}

    def __enter__(self) -> RichSyncProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def phase_start(self, phase: str, total: int | None = None) -> None:
        previous = self._rows.pop(phase, None)
        if previous is not None:
            self._progress.remove_task(previous)
        label, style = _PHASES.get(phase, (phase, "white"))
        self._rows[phase] = self._progress.add_task(label, total=total, style=style, detail="")
        self._totals[phase] = total

    def item_done(self, phase: str) -> None:
        row = self._rows.get(phase)
        if row is not None:
            self._progress.advance(row)

    def phase_done(self, phase: str) -> None:
        row = self._rows.get(phase)
        if row is None:
            return
        # Indeterminate phases render as a single completed step.
        total = self._totals.get(phase) or 1
        self._progress.update(row, total=total, completed=total)

    def phase_error(self, phase: str, error: BaseException) -> None:
        row = self._rows.get(phase)
        if row is None:
            return
        label, _ = _PHASES.get(phase, (phase, "white"))
        self._progress.update(row, description=f"✗ {label}", style="red", detail=_describe(error))
        self._progress.stop_task(row)
