"""Run reports for export and import, rendered with rich."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ScheduleOutcome(str, Enum):
    """Result of a SaveSchedule call.

    The endpoint does not always send a ``success`` flag; a 2xx response
    without one is reported as ASSUMED_SUCCESS rather than SUCCESS.
    """
    SUCCESS = "success"
    ASSUMED_SUCCESS = "assumed_success"
    FAILED = "failed"


class RowFailure(BaseModel):
    row_number: int
    title: str
    error: str


class ExportReport(BaseModel):
    units_listed: int = 0
    units_exported: int = 0
    skipped_titles: list[str] = []
    output_path: Optional[str] = None
    write_error: Optional[str] = None

    @property
    def units_skipped(self) -> int:
        return len(self.skipped_titles)

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        lines = [
            f"Units listed:   {self.units_listed}",
            f"Units exported: [green]{self.units_exported}[/green]",
        ]
        if self.skipped_titles:
            lines.append(f"\n[yellow bold]Skipped ({self.units_skipped}):[/yellow bold]")
            for t in self.skipped_titles:
                lines.append(f"  [yellow]• {t}[/yellow]")
        if self.output_path:
            lines.append(f"\n[green]✓[/green] Written: {self.output_path}")
        if self.write_error:
            lines.append(f"\n[red]✗ Could not write CSV: {self.write_error}[/red]")

        console.print(Panel("\n".join(lines), title="Export", border_style="cyan"))


class ImportReport(BaseModel):
    total_rows: int = 0
    created_unit_ids: list[int] = []
    failures: list[RowFailure] = []
    # Units created but whose trainee assignment did not fully go through
    assignment_warnings: list[str] = []

    @property
    def succeeded(self) -> int:
        return len(self.created_unit_ids)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def record_failure(self, row_number: int, title: str, error: str) -> None:
        self.failures.append(RowFailure(row_number=row_number, title=title, error=error))

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        console.print(
            f"\n[bold]Import finished:[/bold] {self.total_rows} rows | "
            f"[green]{self.succeeded} created[/green] | "
            f"[red]{self.failed} failed[/red]"
        )
        for w in self.assignment_warnings:
            console.print(f"  [yellow]⚠ {w}[/yellow]")

        if not self.failures:
            return
        table = Table(title="Failed rows", box=box.ROUNDED)
        table.add_column("Row", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Error", style="red")
        for f in self.failures:
            table.add_row(str(f.row_number), f.title, f.error)
        console.print(table)
