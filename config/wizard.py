"""Interactive prompts: settings wizard, login and action choice.

Uses rich for console output and masked password input.
"""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import LoginPrompt, SiteAddress, SyncConfig

console = Console()

ACTION_EXPORT = "1"
ACTION_IMPORT = "2"


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def _ask_required(label: str, default: Optional[str] = None,
                  password: bool = False) -> str:
    """Re-asks until a non-blank answer is given."""
    while True:
        if default:
            value = Prompt.ask(label, default=default, password=password)
        else:
            value = Prompt.ask(label, password=password)
        value = (value or "").strip()
        if value:
            return value
        _warn(f"{label} must not be empty.")


def _ask_site_url(default: Optional[str]) -> str:
    while True:
        url = _ask_required("Site URL (https://host/tenant)", default=default)
        try:
            SiteAddress.parse(url)
            return url
        except ValueError as e:
            _warn(str(e))


# ─── Login ────────────────────────────────────────────────────────────────────

def prompt_login(config: SyncConfig) -> LoginPrompt:
    """Asks for site, user name, password and API key (the last two masked)."""
    _header("Login")
    site_url = _ask_site_url(config.site_url)
    username = _ask_required("Username", default=config.username)
    password = _ask_required("Password", password=True)
    api_key = _ask_required("Identity API key", password=True)
    return LoginPrompt(site_url=site_url, username=username,
                       password=password, api_key=api_key)


def prompt_action() -> str:
    console.print()
    console.print(f"  [bold]{ACTION_EXPORT}.[/bold] Export training units to CSV")
    console.print(f"  [bold]{ACTION_IMPORT}.[/bold] Import training units from CSV")
    return Prompt.ask("\nAction", choices=[ACTION_EXPORT, ACTION_IMPORT],
                      default=ACTION_EXPORT)


def prompt_csv_path() -> str:
    return _ask_required("CSV file to import")


# ─── Setup wizard ─────────────────────────────────────────────────────────────

def _show_summary(config: SyncConfig) -> None:
    table = Table(title="Summary", box=box.ROUNDED)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_row("Site URL", config.site_url or "")
    table.add_row("Username", config.username or "")
    table.add_row("Identity API", config.scim_base_url or "[dim]site host[/dim]")
    table.add_row("Page size", str(config.page_size))
    table.add_row("Trainee page size", str(config.trainee_page_size))
    table.add_row("Export directory", config.export_dir)
    console.print(table)


def run_wizard(current: Optional[SyncConfig] = None) -> Optional[SyncConfig]:
    """Runs the settings wizard.

    Returns:
        The new SyncConfig, or None if the user cancels.
    """
    current = current or SyncConfig()
    console.print(Panel(
        "[bold]Training unit sync setup[/bold]\n\n"
        "Stores defaults for the login prompts and paging.\n"
        "[dim]Passwords and API keys are asked for on every run and never saved.[/dim]",
        border_style="cyan",
    ))

    try:
        _header("Site")
        site_url = _ask_site_url(current.site_url)
        username = Prompt.ask("Default username", default=current.username or "")
        _info("Leave empty to use the host of the site URL.")
        scim = Prompt.ask("Identity (SCIM) API base URL",
                          default=current.scim_base_url or "")

        _header("Paging & output")
        page_size = IntPrompt.ask("Training units per page", default=current.page_size)
        trainee_page_size = IntPrompt.ask("Trainees per page",
                                          default=current.trainee_page_size)
        export_dir = Prompt.ask("Export directory", default=current.export_dir)

        config = current.model_copy(update={
            "site_url": site_url,
            "username": username.strip() or None,
            "scim_base_url": scim.strip() or None,
            "export_dir": export_dir,
        })
        # Re-validate so the paging bounds are enforced
        config = SyncConfig.model_validate({
            **config.model_dump(),
            "page_size": page_size,
            "trainee_page_size": trainee_page_size,
        })

        _show_summary(config)
        if not Confirm.ask("\nSave settings?", default=True):
            console.print("[yellow]Settings not saved.[/yellow]")
            return None
        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Setup cancelled.[/yellow]")
        return None
    except ValueError as e:
        console.print(f"\n[red]Invalid settings: {e}[/red]")
        return None
