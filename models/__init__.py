from models.enums import EnumCodec, TRAINING_TYPE, ASSESSMENT_METHOD
from models.csv_row import ExportRow, ImportRow
from models.sync_report import ExportReport, ImportReport, RowFailure, ScheduleOutcome

__all__ = [
    "EnumCodec",
    "TRAINING_TYPE",
    "ASSESSMENT_METHOD",
    "ExportRow",
    "ImportRow",
    "ExportReport",
    "ImportReport",
    "RowFailure",
    "ScheduleOutcome",
]
