from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    mobile_number: str
    full_name: str | None = None
    email: str | None = None
    created_at: datetime
    updated_at: datetime


class UserUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = None

    @field_validator("full_name", "email", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # The profile form submits "" for a cleared field
        if isinstance(value, str) and not value.strip():
            return None
        return value
