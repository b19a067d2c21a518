"""Settings manager: load, save and validate config/sync_config.yaml.

Uses ruamel.yaml so the saved file keeps a readable header and comments.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_sync_config
from config.schema import SyncConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


_YAML_HEADER = f"""\
# ============================================
# Training unit sync settings
# Written: {date.today().isoformat()}
# Passwords and API keys are never stored here.
# ============================================
"""

_FIELD_COMMENTS = {
    "site_url": "Site URL including the tenant, e.g. https://host/tenant",
    "scim_base_url": "Identity (SCIM) API root; empty = host of site_url",
    "page_size": "Training register page size",
    "trainee_page_size": "Trainee list page size",
    "export_dir": "Directory for TrainingUnits_Export_<YYYYMMDD>.csv",
    "request_timeout_seconds": "Empty = no timeout",
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "sync_config.yaml"

    def first_run_check(self) -> bool:
        """True if no settings file has been written yet."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Load ───

    def load(self, path: Optional[Path] = None) -> SyncConfig:
        """Load settings from YAML, falling back to defaults if absent."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            return default_sync_config()
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return SyncConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Invalid settings file: {target}\n"
                f"Pydantic error: {e}"
            ) from e

    # ─── Save ───

    def save(self, config: SyncConfig, path: Optional[Path] = None) -> None:
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Settings saved: {target}")

    def _build_commented_yaml(self, config: SyncConfig) -> CommentedMap:
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)
        for field, comment in _FIELD_COMMENTS.items():
            if field in cm:
                cm.yaml_add_eol_comment(comment, field)
        return cm

    # ─── Display ───

    def show(self, config: SyncConfig) -> None:
        table = Table(title="Settings", box=box.ROUNDED)
        table.add_column("Setting", style="bold")
        table.add_column("Value")
        for k, v in config.model_dump().items():
            table.add_row(k, "[dim]–[/dim]" if v is None else str(v))
        console.print(table)
