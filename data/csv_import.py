"""CSV import of training units and template generator.

Reading:  CSV → ImportRow list, aborting on a missing file, a parse error
          or a missing required column (before any remote call).
Import:   per row owner lookup → process lookups → EditTrainingUnit →
          optional SaveSchedule for the listed trainees.
"""

import csv
import difflib
import logging
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from api.client import SyncError
from api.identity import IdentityResolver
from config.defaults import (
    COL_TITLE, EDIT_UNIT_ENDPOINT, EXPORT_COLUMNS,
    PROCESS_ENDPOINT, REQUIRED_IMPORT_COLUMNS, SAVE_SCHEDULE_ENDPOINT,
)
from models.csv_row import ImportRow
from models.enums import ASSESSMENT_METHOD, TRAINING_TYPE
from models.sync_report import ImportReport, ScheduleOutcome
from models.training_unit import (
    EditTrainingUnitResponse, LinkedDocumentRef, LinkedProcessRef, OwnerRef,
    ProcessResponse, SchedulePayload, ScheduleTrainee, TrainingUnitPayload,
)
from export.helpers import write_rows_csv

logger = logging.getLogger(__name__)


class CsvImportError(SyncError):
    """The CSV cannot be imported at all."""


class RowImportError(SyncError):
    """A single row failed; the import continues with the next one."""


# ─── Reading ──────────────────────────────────────────────────────────────────

def missing_columns(header: list[str]) -> list[str]:
    present = set(header)
    return [c for c in REQUIRED_IMPORT_COLUMNS if c not in present]


def _missing_columns_message(path: Path, missing: list[str], header: list[str]) -> str:
    lines = [f"{path}: required column(s) missing:"]
    unknown = [h for h in header if h not in EXPORT_COLUMNS]
    for col in missing:
        hint = difflib.get_close_matches(col, unknown, n=1, cutoff=0.8)
        suffix = f" (found '{hint[0]}')" if hint else ""
        lines.append(f"  - {col}{suffix}")
    return "\n".join(lines)


def read_import_csv(path: Path) -> list[ImportRow]:
    """Reads and validates the import file.

    Raises:
        CsvImportError: file missing, unreadable, not CSV, or lacking a
            required column.
    """
    path = Path(path)
    if not path.is_file():
        raise CsvImportError(f"CSV file not found: {path}")

    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            header = [h.strip() for h in (reader.fieldnames or [])]
            if not header:
                raise CsvImportError(f"{path}: file is empty or has no header row")
            missing = missing_columns(header)
            if missing:
                raise CsvImportError(_missing_columns_message(path, missing, header))
            raw_rows = [
                {(k or "").strip(): (v if isinstance(v, str) else "") for k, v in row.items()}
                for row in reader
            ]
    except (csv.Error, UnicodeDecodeError) as e:
        raise CsvImportError(f"{path}: could not parse CSV: {e}") from e
    except OSError as e:
        raise CsvImportError(f"{path}: could not read file: {e}") from e

    rows: list[ImportRow] = []
    for i, raw in enumerate(raw_rows, start=2):
        if not any(v.strip() for v in raw.values()):
            continue
        rows.append(_parse_row(i, raw))
    return rows


def _parse_row(row_number: int, raw: dict) -> ImportRow:
    try:
        return ImportRow.from_csv_dict(row_number, raw)
    except ValidationError as e:
        # Keep the row so the importer can report it as failed
        return ImportRow(
            row_number=row_number,
            title=(raw.get(COL_TITLE) or "").strip(),
            parse_error="; ".join(err["msg"] for err in e.errors()),
        )


def check_import_csv(path: Path) -> list[str]:
    """Offline check: returns warnings for enum values that would fall back."""
    warnings = []
    for row in read_import_csv(path):
        if row.parse_error:
            warnings.append(f"Row {row.row_number}: {row.parse_error}")
        if not row.owner_username:
            warnings.append(f"Row {row.row_number}: Owner Username is empty")
        if row.type_raw not in TRAINING_TYPE.labels.values() and not row.type_raw.isdigit():
            warnings.append(
                f"Row {row.row_number}: Type '{row.type_raw}' unknown, "
                f"default {TRAINING_TYPE.label_of(TRAINING_TYPE.default)} applies")
        if (row.assessment_raw not in ASSESSMENT_METHOD.labels.values()
                and not row.assessment_raw.isdigit()):
            warnings.append(
                f"Row {row.row_number}: Assessment '{row.assessment_raw}' unknown, "
                f"default {ASSESSMENT_METHOD.label_of(ASSESSMENT_METHOD.default)} applies")
    return warnings


def write_import_template(path: Path) -> Path:
    """Empty import CSV carrying the canonical header."""
    return write_rows_csv([], path, fieldnames=EXPORT_COLUMNS)


# ─── Import ───────────────────────────────────────────────────────────────────

class TrainingUnitImporter:
    """Creates training units from CSV rows, one remote call at a time.

    Each row runs inside its own exception boundary: a failing row is
    recorded in the report and the next row is processed.
    """

    def __init__(
        self,
        client,
        identities: Optional[IdentityResolver] = None,
        progress: Optional[Callable[[int, int, str], None]] = None,
    ):
        self.client = client
        self.identities = identities or IdentityResolver(client)
        self.progress = progress

    def run(self, path: Path) -> ImportReport:
        """Reads ``path`` and imports every row.

        Raises:
            CsvImportError: before any remote call if the file is unusable.
        """
        rows = read_import_csv(path)
        return self.import_rows(rows)

    def import_rows(self, rows: list[ImportRow]) -> ImportReport:
        report = ImportReport(total_rows=len(rows))
        for i, row in enumerate(rows, start=1):
            if self.progress:
                self.progress(i, len(rows), row.title)
            try:
                unit_id = self.import_row(row, report)
            except Exception as e:
                logger.error(f"Row {row.row_number} ('{row.title}'): {e}")
                report.record_failure(row.row_number, row.title, str(e))
                continue
            report.created_unit_ids.append(unit_id)
            logger.info(f"Row {row.row_number}: created '{row.title}' (id {unit_id})")
        return report

    def import_row(self, row: ImportRow, report: ImportReport) -> int:
        """Creates one unit and returns its id.

        Raises:
            RowImportError: the row cannot be created.
        """
        if row.parse_error:
            raise RowImportError(row.parse_error)
        if not row.title:
            raise RowImportError("Title is empty")

        if not row.owner_username:
            raise RowImportError("Owner Username is required")
        owner_id = self.identities.user_id_for(row.owner_username)
        if owner_id is None:
            raise RowImportError(f"Owner not found: {row.owner_username}")

        payload = TrainingUnitPayload(
            title=row.title,
            description=row.description,
            type=TRAINING_TYPE.code_of(row.type_raw),
            assessment_method=ASSESSMENT_METHOD.code_of(row.assessment_raw),
            renew_cycle=row.renew_cycle,
            provider=row.provider,
            owner_id=owner_id,
            owner=OwnerRef(id=owner_id),
            linked_processes=self.resolve_processes(row),
            linked_documents=[LinkedDocumentRef(title=t) for t in row.document_titles],
        )

        data = self.client.request(EDIT_UNIT_ENDPOINT, "POST", payload.to_body())
        created_id = None
        if isinstance(data, dict):
            try:
                created_id = EditTrainingUnitResponse.model_validate(data).created_id
            except ValidationError as e:
                logger.warning(f"Row {row.row_number}: unexpected creation response: {e}")
        if created_id is None:
            raise RowImportError("Creation failed: no training unit identifier in response")

        if row.trainee_usernames:
            # The unit exists now; an assignment error must not fail the row
            try:
                self.assign_trainees(row, created_id, owner_id, report)
            except Exception as e:
                logger.error(f"Row {row.row_number}: trainee assignment for unit "
                             f"{created_id} raised: {e}")
                report.assignment_warnings.append(
                    f"Row {row.row_number}: unit {created_id} created, "
                    f"trainee assignment failed: {e}")
        return created_id

    def resolve_processes(self, row: ImportRow) -> list[LinkedProcessRef]:
        refs = []
        for unique_id in row.process_ids:
            data = self.client.request(PROCESS_ENDPOINT.format(unique_id=unique_id), "GET")
            process = None
            if isinstance(data, dict):
                try:
                    process = ProcessResponse.model_validate(data).process
                except ValidationError as e:
                    logger.warning(f"Process {unique_id}: unexpected response: {e}")
            if process is None:
                logger.warning(
                    f"Row {row.row_number}: linked process {unique_id} not found, left out")
                continue
            refs.append(LinkedProcessRef(id=process.id, title=process.name or "",
                                         unique_id=unique_id))
        return refs

    def assign_trainees(self, row: ImportRow, unit_id: int, owner_id: int,
                        report: ImportReport) -> ScheduleOutcome:
        """Schedules the row's trainees on the created unit.

        Failures are reported but never undo the created unit.
        """
        user_ids = []
        for username in row.trainee_usernames:
            user_id = self.identities.user_id_for(username)
            if user_id is None:
                logger.warning(f"Row {row.row_number}: trainee '{username}' not found, left out")
                report.assignment_warnings.append(
                    f"Row {row.row_number}: trainee '{username}' not found")
                continue
            user_ids.append(user_id)

        if not user_ids:
            logger.warning(f"Row {row.row_number}: no trainee could be resolved, nothing assigned")
            return ScheduleOutcome.FAILED

        payload = SchedulePayload(
            training_unit_id=unit_id,
            supervisor_id=owner_id,
            provider=row.provider,
            trainees=[ScheduleTrainee(user_id=u) for u in user_ids],
        )
        data = self.client.request(SAVE_SCHEDULE_ENDPOINT, "POST", payload.to_body())
        outcome = schedule_outcome(data)

        if outcome is ScheduleOutcome.FAILED:
            logger.error(f"Row {row.row_number}: trainee assignment failed for unit {unit_id}")
            report.assignment_warnings.append(
                f"Row {row.row_number}: unit {unit_id} created, trainee assignment failed")
        elif outcome is ScheduleOutcome.ASSUMED_SUCCESS:
            logger.warning(
                f"Row {row.row_number}: SaveSchedule sent no success flag, assuming success")
        else:
            logger.info(f"Row {row.row_number}: {len(user_ids)} trainee(s) assigned")
        return outcome


def schedule_outcome(data) -> ScheduleOutcome:
    if not isinstance(data, dict):
        return ScheduleOutcome.FAILED
    if "success" not in data:
        return ScheduleOutcome.ASSUMED_SUCCESS
    return ScheduleOutcome.SUCCESS if data["success"] else ScheduleOutcome.FAILED
