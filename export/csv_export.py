"""Export pipeline: training register → hydrated units → flat CSV."""

import logging
from datetime import date
from pathlib import Path
from typing import Callable, Optional

from pydantic import ValidationError

from api.identity import IdentityResolver
from api.pagination import paginate
from config.defaults import (
    LIST_UNITS_ENDPOINT, LIST_UNITS_FILTERS, TRAINEES_ENDPOINT,
    UNIT_DETAILS_ENDPOINT,
)
from config.schema import SyncConfig
from models.csv_row import ExportRow
from models.enums import ASSESSMENT_METHOD, TRAINING_TYPE
from models.sync_report import ExportReport
from models.training_unit import (
    Trainee, TrainingUnitDetail, TrainingUnitDetailResponse, TrainingUnitSummary,
)
from export.helpers import export_file_path, write_rows_csv

logger = logging.getLogger(__name__)


class TrainingUnitExporter:
    """Lists every training unit, hydrates it and writes one CSV row per unit.

    A unit whose detail fetch fails is skipped; everything else about a unit
    degrades field by field (unresolved trainees are left out, an unresolved
    owner leaves the column empty).
    """

    def __init__(
        self,
        client,
        config: SyncConfig,
        identities: Optional[IdentityResolver] = None,
        progress: Optional[Callable[[int, int, str], None]] = None,
    ):
        self.client = client
        self.config = config
        self.identities = identities or IdentityResolver(client)
        self.progress = progress

    # ─── Public API ───────────────────────────────────────────────────────────

    def collect(self, report: Optional[ExportReport] = None) -> list[ExportRow]:
        """Fetches and flattens all units (no file is written)."""
        report = report if report is not None else ExportReport()
        summaries = self.list_units()
        report.units_listed = len(summaries)

        rows: list[ExportRow] = []
        for i, summary in enumerate(summaries, start=1):
            label = summary.title or summary.unique_id or f"#{i}"
            if self.progress:
                self.progress(i, len(summaries), label)
            row = self.export_unit(summary)
            if row is None:
                report.skipped_titles.append(label)
                continue
            rows.append(row)

        report.units_exported = len(rows)
        return rows

    def run(self, today: Optional[date] = None) -> ExportReport:
        """Exports everything to TrainingUnits_Export_<YYYYMMDD>.csv."""
        report = ExportReport()
        rows = self.collect(report)

        out_path = export_file_path(self.config.export_dir, today)
        try:
            write_rows_csv((r.to_csv_dict() for r in rows), out_path)
            report.output_path = str(out_path)
            logger.info(f"Wrote {len(rows)} training units to {out_path}")
        except OSError as e:
            report.write_error = f"{out_path}: {e}"
            logger.error(f"Could not write {out_path}: {e}")
        return report

    # ─── Steps ────────────────────────────────────────────────────────────────

    def list_units(self) -> list[TrainingUnitSummary]:
        raw = paginate(self.client, LIST_UNITS_ENDPOINT, "trainingUnits",
                       self.config.page_size, params=LIST_UNITS_FILTERS)
        units = []
        for item in raw:
            try:
                units.append(TrainingUnitSummary.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Ignoring malformed register entry: {e}")
        return units

    def fetch_detail(self, unique_id: str) -> Optional[TrainingUnitDetail]:
        data = self.client.request(UNIT_DETAILS_ENDPOINT, "GET",
                                   params={"unitUniqueId": unique_id})
        if not isinstance(data, dict) or data.get("success") is False:
            return None
        try:
            return TrainingUnitDetailResponse.model_validate(data).training_unit
        except ValidationError as e:
            logger.warning(f"Unexpected detail shape for {unique_id}: {e}")
            return None

    def fetch_trainees(self, unique_id: str) -> list[Trainee]:
        raw = paginate(self.client, TRAINEES_ENDPOINT, "trainees",
                       self.config.trainee_page_size,
                       params={"unitUniqueId": unique_id})
        trainees = []
        for item in raw:
            try:
                trainees.append(Trainee.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Ignoring malformed trainee entry: {e}")
        return trainees

    def export_unit(self, summary: TrainingUnitSummary) -> Optional[ExportRow]:
        """Builds the row for one unit, or None if its details are unavailable."""
        label = summary.title or summary.unique_id
        if not summary.unique_id:
            logger.warning(f"Skipping '{label}': register entry has no UniqueId")
            return None

        detail = self.fetch_detail(summary.unique_id)
        if detail is None:
            logger.warning(f"Skipping '{label}': details could not be fetched")
            return None

        process_titles: list[str] = []
        process_ids: list[str] = []
        for link in detail.linked_processes:
            process_titles.append(link.title or "")
            if link.unique_id:
                process_ids.append(link.unique_id)

        document_titles = [d.title for d in detail.linked_documents if d.title]

        usernames: list[str] = []
        for trainee in self.fetch_trainees(summary.unique_id):
            name = (self.identities.username_for(trainee.user_id)
                    if trainee.user_id is not None else None)
            if name is None:
                logger.warning(
                    f"'{label}': trainee {trainee.full_name or trainee.user_id} "
                    f"could not be resolved, left out")
                continue
            usernames.append(name)

        owner = ""
        if detail.owner_id is not None:
            owner = self.identities.username_for(detail.owner_id) or ""
            if not owner:
                logger.warning(f"'{label}': owner {detail.owner_id} could not be resolved")

        return ExportRow(
            title=detail.title or summary.title or "",
            description=detail.description or "",
            type_label=TRAINING_TYPE.label_of(detail.type),
            assessment_label=ASSESSMENT_METHOD.label_of(detail.assessment_method),
            renew_cycle=detail.renew_cycle,
            provider=detail.provider or "",
            owner_username=owner,
            process_titles=process_titles,
            process_ids=process_ids,
            document_titles=document_titles,
            trainee_usernames=usernames,
        )
