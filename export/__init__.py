"""Export module: training units to CSV."""

from export.csv_export import TrainingUnitExporter
from export.helpers import export_file_path, write_rows_csv

__all__ = ["TrainingUnitExporter", "export_file_path", "write_rows_csv"]
