import enum
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.orm import relationship as orm_relationship

from app.db import Base


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class DocumentType(enum.Enum):
    passport = "Passport"
    emirates_id = "Emirates ID"
    visa = "Visa"
    driving_license = "Driving License"
    insurance_policy = "Insurance Policy"
    contract = "Contract"
    membership = "Membership"
    certification = "Certification"
    other = "Other"


class Relationship(enum.Enum):
    self = "Self"
    spouse = "Spouse"
    child = "Child"
    parent = "Parent"
    sibling = "Sibling"
    other_family = "Other Family"
    friend = "Friend"
    employee = "Employee"
    other = "Other"


# ---------------------------------------------------------------------------
# Tracked documents
# ---------------------------------------------------------------------------


class Document(Base):
    __tablename__ = "documents"
    __table_args__ = (
        Index("ix_documents_user_id", "user_id"),
        Index("ix_documents_user_expiry", "user_id", "expiry_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False
    )
    document_type: Mapped[DocumentType] = mapped_column(
        Enum(DocumentType), nullable=False
    )
    document_name: Mapped[str] = mapped_column(String(255), nullable=False)
    document_number: Mapped[str | None] = mapped_column(String(120))
    issue_date: Mapped[date | None] = mapped_column(Date)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    person_name: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship: Mapped[Relationship] = mapped_column(
        Enum(Relationship), nullable=False, default=Relationship.self
    )
    notes: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    owner = orm_relationship("User", back_populates="documents")
