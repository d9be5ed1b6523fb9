from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


class DocumentBase(BaseModel):
    document_type: str = Field(min_length=1, max_length=60)
    document_name: str = Field(min_length=1, max_length=255)
    person_name: str = Field(min_length=1, max_length=255)
    relationship: str = "Self"
    document_number: str | None = Field(default=None, max_length=120)
    issue_date: date | None = None
    expiry_date: date
    notes: str | None = None

    @field_validator("document_name", "person_name", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("document_number", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DocumentCreate(DocumentBase):
    pass


class DocumentUpdate(BaseModel):
    document_type: str | None = Field(default=None, max_length=60)
    document_name: str | None = Field(default=None, min_length=1, max_length=255)
    person_name: str | None = Field(default=None, min_length=1, max_length=255)
    relationship: str | None = None
    document_number: str | None = Field(default=None, max_length=120)
    issue_date: date | None = None
    expiry_date: date | None = None
    notes: str | None = None

    @field_validator("document_name", "person_name", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("document_number", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    document_type: str
    document_name: str
    person_name: str
    relationship: str
    document_number: str | None = None
    issue_date: date | None = None
    expiry_date: date
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("document_type", "relationship", mode="before")
    @classmethod
    def _enum_value(cls, value):
        return getattr(value, "value", value)


# ---------------------------------------------------------------------------
# Derived expiry view
# ---------------------------------------------------------------------------


class ExpiryRead(BaseModel):
    status: str
    days: int
    message: str
    color: str
    label: str
    expiry_display: str
    issue_display: str | None = None


class DocumentView(DocumentRead):
    expiry: ExpiryRead


class DocumentStats(BaseModel):
    total: int
    expired: int
    expiring: int
    safe: int


class DocumentListResponse(BaseModel):
    items: list[DocumentView]
    count: int
    total: int


class DocumentWriteResult(BaseModel):
    document: DocumentView | None = None
    items: list[DocumentView]
    stats: DocumentStats


class DashboardRead(BaseModel):
    stats: DocumentStats
    upcoming: list[DocumentView]
    recently_expired: list[DocumentView]


class DocumentOptions(BaseModel):
    document_types: list[str]
    relationships: list[str]
    status_filters: list[str]
    sort_keys: list[str]
