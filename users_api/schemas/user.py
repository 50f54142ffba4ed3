from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email


def _check_email(value: str) -> str:
    """Validate ``value`` as a bare address and return it unchanged.

    The display-name form (``Name <addr>``) is rejected.
    """
    _, address = validate_email(value)
    if address.lower() != value.lower():
        raise ValueError("value must be a bare email address")
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class UserRequest(BaseModel):
    first_name: str = Field(min_length=1, description="User's first name")
    last_name: str = Field(min_length=1, description="User's last name")
    email: Email = Field(description="User's email address", json_schema_extra={"format": "email"})


class User(UserRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(ge=0, description="Unique user identifier")
    created_at: datetime = Field(description="User creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # sqlite hands back naive values; everything is written in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    error: str
