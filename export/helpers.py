"""Shared helpers for writing the export CSV."""

import csv
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping, Optional

from config.defaults import EXPORT_COLUMNS, EXPORT_FILE_PATTERN


def today_stamp(today: Optional[date] = None) -> str:
    """Date as YYYYMMDD."""
    return (today or date.today()).strftime("%Y%m%d")


def export_file_path(export_dir: str | Path, today: Optional[date] = None) -> Path:
    return Path(export_dir) / EXPORT_FILE_PATTERN.format(stamp=today_stamp(today))


def write_rows_csv(
    rows: Iterable[Mapping[str, str]],
    output_path: str | Path,
    fieldnames: list[str] = EXPORT_COLUMNS,
) -> Path:
    """Writes a UTF-8 CSV with header row. An empty row set still gets the header."""
    out = Path(output_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return out
