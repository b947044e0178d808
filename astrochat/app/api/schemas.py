"""Request and response models for the HTTP API.

Incoming birth details use the camelCase names the web client sends
(firstName, dateOfBirth, ...). Responses use snake_case.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from astrochat.app.services.quota_tracker.models import PersonData


class UserData(BaseModel):
    """Birth details as submitted by the client. Presence is checked per endpoint."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    first_name: Optional[str] = Field(default=None, alias="firstName", max_length=255)
    last_name: Optional[str] = Field(default=None, alias="lastName", max_length=255)
    date_of_birth: Optional[str] = Field(default=None, alias="dateOfBirth", max_length=32)
    place_of_birth: Optional[str] = Field(default=None, alias="placeOfBirth", max_length=255)
    time_of_birth: Optional[str] = Field(default=None, alias="timeOfBirth", max_length=32)

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> Any:
        if not isinstance(v, str):
            return v
        return v.strip() or None

    def has_identity(self) -> bool:
        return bool(self.first_name and self.date_of_birth)

    def has_birth_details(self) -> bool:
        return bool(
            self.has_identity() and self.place_of_birth and self.time_of_birth
        )

    def to_person(self) -> PersonData:
        return PersonData(
            first_name=self.first_name or "",
            date_of_birth=self.date_of_birth or "",
            last_name=self.last_name,
            place_of_birth=self.place_of_birth,
            time_of_birth=self.time_of_birth,
        )


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message: Any = None
    user_data: Optional[UserData] = Field(default=None, alias="userData")


class StatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_data: Optional[UserData] = Field(default=None, alias="userData")


class Segment(BaseModel):
    tone: str
    text: str


class UserLimitInfo(BaseModel):
    allowed_this_request: bool
    questions_used_today: int
    daily_limit: int
    questions_remaining: int
    can_ask: bool


class ChatResponse(BaseModel):
    response: str
    segments: list[Segment]
    timestamp: datetime
    user_limit_info: Optional[UserLimitInfo] = None
    fallback: bool = False


class StatusResponse(BaseModel):
    questions_used: int
    daily_limit: int
    questions_remaining: int
    can_ask: bool
