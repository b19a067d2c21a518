"""Training unit sync: main CLI.

Usage:
  python main.py                    Interactive: login, then choose 1 Export / 2 Import
  python main.py export             Login, export all training units to CSV
  python main.py import [FILE]      Login, create training units from a CSV
  python main.py setup              Store default site, user name and paging
  python main.py config show        Show the stored settings
  python main.py template           Write an empty import CSV
  python main.py validate FILE      Offline check of an import CSV
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

console = Console()


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _load_config_or_abort():
    from config.manager import ConfigManager
    mgr = ConfigManager()
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _progress(i: int, total: int, label: str) -> None:
    console.print(f"[dim][{i}/{total}][/dim] {label}")


def _login_or_abort(config):
    """Prompts for credentials and returns an authenticated ApiClient."""
    from config.wizard import prompt_login
    from api.client import ApiClient, AuthenticationError, authenticate

    login = prompt_login(config)
    console.print("[bold]Signing in...[/bold]")
    try:
        session = authenticate(login, config)
    except (AuthenticationError, ValueError) as e:
        console.print(f"[red bold]Login failed:[/red bold] {e}")
        sys.exit(1)
    console.print(f"[green]✓[/green] Signed in to tenant [bold]{session.site.tenant}[/bold]")
    return ApiClient(session)


def _run_export(client, config) -> None:
    from export.csv_export import TrainingUnitExporter

    console.print("[bold]Exporting training units...[/bold]")
    report = TrainingUnitExporter(client, config, progress=_progress).run()
    report.print_rich()
    if report.write_error:
        sys.exit(1)


def _run_import(client, csv_path: Path) -> None:
    from data.csv_import import CsvImportError, TrainingUnitImporter

    console.print(f"[bold]Importing:[/bold] {csv_path}")
    try:
        report = TrainingUnitImporter(client, progress=_progress).run(csv_path)
    except CsvImportError as e:
        console.print(f"[red bold]Import aborted:[/red bold]\n{e}")
        sys.exit(1)
    report.print_rich()


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Store default site URL, user name and paging settings."""
    from config.wizard import run_wizard

    mgr, current = _load_config_or_abort()
    config = run_wizard(current)
    if config is not None:
        mgr.save(config)


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Show stored settings."""


@cmd_config.command("show")
def config_show():
    """Show the current settings."""
    mgr, config = _load_config_or_abort()
    if mgr.first_run_check():
        console.print("[dim]No settings file yet, showing defaults.[/dim]")
    mgr.show(config)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
def cmd_export():
    """Export all training units to TrainingUnits_Export_<YYYYMMDD>.csv."""
    _, config = _load_config_or_abort()
    client = _login_or_abort(config)
    _run_export(client, config)


# ─── IMPORT ───────────────────────────────────────────────────────────────────

@click.command("import")
@click.argument("csv_file", required=False, type=click.Path(path_type=Path))
def cmd_import(csv_file: Optional[Path]):
    """Create training units from a CSV file."""
    from config.wizard import prompt_csv_path

    _, config = _load_config_or_abort()
    client = _login_or_abort(config)
    _run_import(client, csv_file or Path(prompt_csv_path()))


# ─── TEMPLATE ─────────────────────────────────────────────────────────────────

@click.command("template")
@click.option("--output", "-o", default="output/training_units_import.csv",
              help="Output path of the empty import CSV.")
def cmd_template(output: str):
    """Write an empty import CSV with the expected columns."""
    from data.csv_import import write_import_template
    from config.defaults import EXPORT_COLUMNS, REQUIRED_IMPORT_COLUMNS

    out_path = write_import_template(Path(output))
    console.print(f"[green]✓[/green] Template written: {out_path}")
    for col in EXPORT_COLUMNS:
        marker = "[cyan]required[/cyan]" if col in REQUIRED_IMPORT_COLUMNS else "[dim]optional[/dim]"
        console.print(f"  {col:30s} {marker}")


# ─── VALIDATE ─────────────────────────────────────────────────────────────────

@click.command("validate")
@click.argument("csv_file", type=click.Path(path_type=Path))
def cmd_validate(csv_file: Path):
    """Check an import CSV without contacting the server."""
    from data.csv_import import CsvImportError, check_import_csv

    try:
        warnings = check_import_csv(csv_file)
    except CsvImportError as e:
        console.print(f"[red bold]Not importable:[/red bold]\n{e}")
        sys.exit(1)

    if not warnings:
        console.print(f"[green]✓[/green] Looks importable: {csv_file}")
        return
    for w in warnings:
        console.print(f"[yellow]⚠[/yellow]  {w}")


# ─── MAIN CLI ─────────────────────────────────────────────────────────────────

@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Synchronise training units between the tenant API and CSV files.

    Without a command an interactive session is started.
    """
    _configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return

    from config.wizard import ACTION_EXPORT, prompt_action, prompt_csv_path

    mgr, config = _load_config_or_abort()
    console.print(Panel(
        "[bold]Training unit sync[/bold]\n\n"
        "Export training units to CSV or create them from a CSV file.",
        border_style="cyan",
    ))
    if mgr.first_run_check():
        console.print("[dim]Tip: 'python main.py setup' stores defaults for these prompts.[/dim]")

    client = _login_or_abort(config)
    if prompt_action() == ACTION_EXPORT:
        _run_export(client, config)
    else:
        _run_import(client, Path(prompt_csv_path()))


def main():
    cli()


cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_export)
cli.add_command(cmd_import)
cli.add_command(cmd_template)
cli.add_command(cmd_validate)


if __name__ == "__main__":
    main()
