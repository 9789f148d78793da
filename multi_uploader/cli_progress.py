"""Console rendering and progress helpers for multi-up CLI."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import MergedRecord, UploadResult
from .utils.events import (
    ATTEMPT_FAILED,
    BATCH_START,
    DESTINATION_FAILED,
    DESTINATION_SUCCEEDED,
    EventEmitter,
)

console = Console()


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]multi-up[/bold green]",
        subtitle="[dim]multi_uploader CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def build_results_table(records: Sequence[MergedRecord]) -> Table:
    table = Table(title="Upload results", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Destination", style="bold cyan")
    table.add_column("File", style="white")
    table.add_column("URL", style="green", overflow="fold")

    for index, record in enumerate(records, 1):
        table.add_row(str(index), record.uploader or "-", record.file_name or "-", record.url or "-")
    return table


def render_results(records: Sequence[MergedRecord], warnings: Sequence[str] = ()) -> None:
    """Render merged records and any degradation warnings."""
    if not records:
        console.print("[yellow]No results.[/yellow]")
    else:
        console.print(build_results_table(records))
    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}", highlight=False)


def render_markdown(markdown: str) -> None:
    """Print the Markdown summary verbatim so it can be copied."""
    if not markdown:
        return
    console.rule("[bold]Markdown Link Summary[/bold]")
    console.print(markdown, markup=False, highlight=False, soft_wrap=True)


class BatchProgressDisplay:
    """Event-based console timeline for one fan-out batch."""

    def __init__(self):
        self._succeeded: List[str] = []
        self._failed: List[str] = []

    @property
    def succeeded(self) -> List[str]:
        return list(self._succeeded)

    @property
    def failed(self) -> List[str]:
        return list(self._failed)

    def attach(self, events: EventEmitter) -> None:
        events.on(BATCH_START, self.on_batch_start)
        events.on(ATTEMPT_FAILED, self.on_attempt_failed)
        events.on(DESTINATION_SUCCEEDED, self.on_destination_succeeded)
        events.on(DESTINATION_FAILED, self.on_destination_failed)

    def on_batch_start(self, beds: Sequence[str]) -> None:
        console.print(f"[cyan]Mirroring to:[/cyan] {', '.join(beds)}", highlight=False)

    def on_attempt_failed(self, bed: str, attempt: int, error: Optional[Exception]) -> None:
        console.print(f"[yellow]RETRY[/yellow] {bed} (attempt {attempt}): {error}", highlight=False)

    def on_destination_succeeded(self, bed: str, results: Sequence[UploadResult]) -> None:
        self._succeeded.append(bed)
        console.print(f"[green]DONE[/green]  {bed} ({len(results)} file(s))", highlight=False)

    def on_destination_failed(self, bed: str, error: Optional[Exception]) -> None:
        self._failed.append(bed)
        console.print(f"[red]FAIL[/red]  {bed}: {error}", highlight=False)
