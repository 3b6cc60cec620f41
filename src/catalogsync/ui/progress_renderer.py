from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
)
from rich.table import Table

if TYPE_CHECKING:
    from catalogsync.dispatch.progress import ProgressEvent
    from catalogsync.models.summary import RunSummary
    from catalogsync.services.catalog_run.types import CatalogRunResult


def format_eta(eta_seconds: float | None) -> str:
    if eta_seconds is None:
        return "--:--"
    minutes, seconds = divmod(int(round(eta_seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


class RichProgressRenderer:
    """Renders the dispatcher's progress stream as a live rich progress bar.

    Use as a context manager around the run and pass the instance as the
    progress observer.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}", justify="left"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("eta {task.fields[eta]}"),
            console=self._console,
            transient=True,
        )
        self._task: TaskID | None = None

    def __enter__(self) -> RichProgressRenderer:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def __call__(self, event: ProgressEvent) -> None:
        description = event.identity[:40]
        eta = format_eta(event.eta_seconds)
        if self._task is None:
            self._task = self._progress.add_task(
                description, total=event.total, completed=event.done, eta=eta
            )
            return
        self._progress.update(
            self._task,
            description=description,
            completed=event.done,
            eta=eta,
        )


def _count(value: int | None) -> str:
    return "n/a" if value is None else str(value)


def summary_table(summary: RunSummary, *, title: str = "Classification Run") -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Uncategorized before", _count(summary.uncategorized_before))
    table.add_row("Uncategorized after", _count(summary.uncategorized_after))
    table.add_row("Attempted", str(summary.attempted))
    if summary.dry_run:
        table.add_row("Simulated", str(summary.simulated))
    else:
        table.add_row("Accepted", str(summary.accepted))
        table.add_row("Rejected", str(summary.rejected))
    table.add_row("Excluded", str(summary.excluded))
    table.add_row("Skipped", str(summary.skipped))
    if summary.declined:
        table.add_row("Declined", str(summary.declined))
    table.add_row("Resolved", _count(summary.resolved))
    table.add_row("Elapsed", format_eta(summary.elapsed_seconds))
    return table


def render_result(console: Console, result: CatalogRunResult) -> None:
    title = "Classification Run"
    if result.summary.dry_run:
        title += " (dry run)"
    console.print(summary_table(result.summary, title=title))
    if result.outcome.quota_reached:
        quota = result.outcome.effective_max
        console.print(f"[yellow]Quota of {quota} submissions reached.[/yellow]")
    if result.sync is not None:
        if result.sync.simulated:
            console.print("Catalog sync: [dim]simulated[/dim]")
        elif not result.sync.requested:
            console.print("Catalog sync: [dim]declined[/dim]")
        elif result.sync.accepted:
            console.print("Catalog sync: [green]requested[/green]")
        else:
            detail = result.sync.error or f"result code {result.sync.result_code}"
            console.print(f"Catalog sync: [yellow]not accepted ({detail})[/yellow]")
