"""Flattened CSV view of a training unit (one row per unit)."""

from typing import Optional

from pydantic import BaseModel, field_validator

from config.defaults import (
    COL_ASSESSMENT, COL_DESCRIPTION, COL_DOCUMENTS, COL_OWNER,
    COL_PROCESS_IDS, COL_PROCESS_TITLES, COL_PROVIDER, COL_RENEW_CYCLE,
    COL_TITLE, COL_TRAINEES, COL_TYPE, MULTI_VALUE_SEPARATOR,
)


def join_values(values: list[str]) -> str:
    return MULTI_VALUE_SEPARATOR.join(values)


def split_values(raw: Optional[str]) -> list[str]:
    """'a; b;;c ' → ['a', 'b', 'c']"""
    if not raw:
        return []
    return [v.strip() for v in raw.split(MULTI_VALUE_SEPARATOR) if v.strip()]


class ExportRow(BaseModel):
    """A unit as written by the export. Enum fields already hold labels."""

    title: str
    description: str = ""
    type_label: str
    assessment_label: str
    renew_cycle: Optional[int] = None
    provider: str = ""
    owner_username: str = ""
    # Title and id lists are joined independently and may differ in length
    process_titles: list[str] = []
    process_ids: list[str] = []
    document_titles: list[str] = []
    trainee_usernames: list[str] = []

    def to_csv_dict(self) -> dict[str, str]:
        return {
            COL_TITLE: self.title,
            COL_DESCRIPTION: self.description,
            COL_TYPE: self.type_label,
            COL_ASSESSMENT: self.assessment_label,
            COL_RENEW_CYCLE: "" if self.renew_cycle is None else str(self.renew_cycle),
            COL_PROVIDER: self.provider,
            COL_OWNER: self.owner_username,
            COL_PROCESS_TITLES: join_values(self.process_titles),
            COL_PROCESS_IDS: join_values(self.process_ids),
            COL_DOCUMENTS: join_values(self.document_titles),
            COL_TRAINEES: join_values(self.trainee_usernames),
        }


class ImportRow(BaseModel):
    """A CSV row as read by the import, before any remote lookup."""

    row_number: int
    title: str
    description: str = ""
    type_raw: str = ""
    assessment_raw: str = ""
    renew_cycle: int = 0
    provider: str = ""
    owner_username: str = ""
    process_ids: list[str] = []
    document_titles: list[str] = []
    trainee_usernames: list[str] = []
    # Set when a cell could not be parsed; the row is then reported as failed
    parse_error: Optional[str] = None

    @field_validator("renew_cycle", mode="before")
    @classmethod
    def _blank_renew_cycle(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return 0
            try:
                return int(v)
            except ValueError:
                raise ValueError(f"Renew Cycle must be a whole number, got '{v}'")
        return v

    @classmethod
    def from_csv_dict(cls, row_number: int, raw: dict) -> "ImportRow":
        def cell(column: str) -> str:
            return (raw.get(column) or "").strip()

        return cls(
            row_number=row_number,
            title=cell(COL_TITLE),
            description=cell(COL_DESCRIPTION),
            type_raw=cell(COL_TYPE),
            assessment_raw=cell(COL_ASSESSMENT),
            renew_cycle=cell(COL_RENEW_CYCLE),
            provider=cell(COL_PROVIDER),
            owner_username=cell(COL_OWNER),
            process_ids=split_values(raw.get(COL_PROCESS_IDS)),
            document_titles=split_values(raw.get(COL_DOCUMENTS)),
            trainee_usernames=split_values(raw.get(COL_TRAINEES)),
        )
