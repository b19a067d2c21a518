"""SCIM user shapes of the identity API."""

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ScimUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[Union[int, str]] = None
    user_name: Optional[str] = Field(None, alias="userName")

    @property
    def numeric_id(self) -> Optional[int]:
        try:
            return int(str(self.id).strip())
        except (TypeError, ValueError):
            return None


class ScimListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    resources: list[ScimUser] = Field(default_factory=list, alias="Resources")
