"""Response and request shapes of the tenant training API (Pydantic v2).

Field names follow the snake_case convention; the API's PascalCase names are
mapped through aliases. Unknown keys are ignored.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_UNIQUE_ID_RE = re.compile(r"uniqueId=([^&#\s]+)", re.IGNORECASE)


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Paging(ApiModel):
    has_next_page: Optional[bool] = Field(None, alias="HasNextPage")


# ─── Training register / details ──────────────────────────────────────────────

class TrainingUnitSummary(ApiModel):
    """One entry of Training/Register/ListPage."""
    id: Optional[int] = Field(None, alias="Id")
    unique_id: Optional[str] = Field(None, alias="UniqueId")
    title: Optional[str] = Field(None, alias="Title")

    @field_validator("unique_id", mode="before")
    @classmethod
    def _unique_id_as_text(cls, v):
        return None if v is None else str(v)


class LinkedProcessLink(ApiModel):
    title: Optional[str] = Field(None, alias="Title")
    url: Optional[str] = Field(None, alias="Url")

    @property
    def unique_id(self) -> Optional[str]:
        """The ``uniqueId=`` query parameter of the embedded URL, if any."""
        match = _UNIQUE_ID_RE.search(self.url or "")
        return match.group(1) if match else None


class LinkedDocumentLink(ApiModel):
    title: Optional[str] = Field(None, alias="Title")


class TrainingUnitDetail(ApiModel):
    title: Optional[str] = Field(None, alias="Title")
    description: Optional[str] = Field(None, alias="Description")
    type: Optional[int] = Field(None, alias="Type")
    assessment_method: Optional[int] = Field(None, alias="AssessmentMethod")
    renew_cycle: Optional[int] = Field(None, alias="RenewCycle")
    provider: Optional[str] = Field(None, alias="Provider")
    owner_id: Optional[int] = Field(None, alias="OwnerId")
    linked_processes: list[LinkedProcessLink] = Field(default_factory=list,
                                                      alias="LinkedProcesses")
    linked_documents: list[LinkedDocumentLink] = Field(default_factory=list,
                                                       alias="LinkedDocuments")

    @field_validator("linked_processes", "linked_documents", mode="before")
    @classmethod
    def _null_as_empty(cls, v):
        return [] if v is None else v


class TrainingUnitDetailResponse(ApiModel):
    success: Optional[bool] = None
    training_unit: Optional[TrainingUnitDetail] = Field(None, alias="trainingUnit")


class Trainee(ApiModel):
    user_id: Optional[int] = Field(None, alias="UserId")
    full_name: Optional[str] = Field(None, alias="UserFullName")


# ─── Processes ────────────────────────────────────────────────────────────────

class ProcessJson(ApiModel):
    id: int = Field(alias="Id")
    name: Optional[str] = Field(None, alias="Name")


class ProcessResponse(ApiModel):
    process: Optional[ProcessJson] = Field(None, alias="processJson")


class LinkedProcessRef(ApiModel):
    """A linked process as sent in the creation payload."""
    id: int = Field(alias="Id")
    title: str = Field(alias="Title")
    unique_id: str = Field(alias="UniqueId")


# ─── Creation / schedule ──────────────────────────────────────────────────────

class OwnerRef(ApiModel):
    id: int = Field(alias="Id")


class LinkedDocumentRef(ApiModel):
    title: str = Field(alias="Title")


class TrainingUnitPayload(ApiModel):
    """Body of Training/Unit/EditTrainingUnit (Id 0 creates a new unit)."""
    id: int = Field(0, alias="Id")
    title: str = Field(alias="Title")
    description: str = Field("", alias="Description")
    type: int = Field(alias="Type")
    assessment_method: int = Field(alias="AssessmentMethod")
    renew_cycle: int = Field(0, alias="RenewCycle")
    provider: str = Field("", alias="Provider")
    owner_id: int = Field(alias="OwnerId")
    owner: OwnerRef = Field(alias="Owner")
    linked_processes: list[LinkedProcessRef] = Field(default_factory=list,
                                                     alias="LinkedProcesses")
    linked_documents: list[LinkedDocumentRef] = Field(default_factory=list,
                                                      alias="LinkedDocuments")
    # Relations this tool never fills, sent empty
    linked_competencies: list = Field(default_factory=list, alias="LinkedCompetencies")
    prerequisites: list = Field(default_factory=list, alias="Prerequisites")
    groups: list = Field(default_factory=list, alias="Groups")

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True)


class CreatedUnit(ApiModel):
    id: Optional[int] = Field(None, alias="Id")


class EditTrainingUnitResponse(ApiModel):
    training_unit: Optional[CreatedUnit] = Field(None, alias="trainingUnit")

    @property
    def created_id(self) -> Optional[int]:
        return self.training_unit.id if self.training_unit else None


class ScheduleTrainee(ApiModel):
    user_id: int = Field(alias="UserId")


class SchedulePayload(ApiModel):
    """Body of Training/Schedule/SaveSchedule."""
    training_unit_id: int = Field(alias="TrainingUnitId")
    supervisor_id: Optional[int] = Field(None, alias="SupervisorId")
    due_date: Optional[str] = Field(None, alias="DueDate")
    provider: str = Field("", alias="Provider")
    location: str = Field("", alias="Location")
    trainees: list[ScheduleTrainee] = Field(default_factory=list,
                                            alias="ScheduleTraineesModel")

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True)
