from __future__ import annotations

import logging
from contextlib import contextmanager
from threading import Lock

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.document import Document, DocumentType, Relationship
from app.schemas.document import DocumentCreate, DocumentUpdate
from app.services.common import coerce_uuid, coerce_uuid_or_404, utcnow

logger = logging.getLogger(__name__)

DELETE_PROMPT = "Are you sure you want to delete this document?"

_DOCUMENT_TYPES = {e.value: e for e in DocumentType}
_RELATIONSHIPS = {e.value: e for e in Relationship}
_REQUIRED_FIELDS = (
    "document_type",
    "document_name",
    "person_name",
    "relationship",
    "expiry_date",
)


def _document_type(value: str) -> DocumentType:
    if value not in _DOCUMENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid document_type. Allowed: {sorted(_DOCUMENT_TYPES)}",
        )
    return _DOCUMENT_TYPES[value]


def _relationship(value: str) -> Relationship:
    if value not in _RELATIONSHIPS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid relationship. Allowed: {sorted(_RELATIONSHIPS)}",
        )
    return _RELATIONSHIPS[value]


class RecordLocks:
    """Rejects a second mutation of a record while one is still in flight."""

    def __init__(self):
        self._guard = Lock()
        self._busy: set[str] = set()

    @contextmanager
    def hold(self, record_id):
        key = str(record_id)
        with self._guard:
            if key in self._busy:
                raise HTTPException(
                    status_code=409,
                    detail={
                        "code": "operation_in_progress",
                        "message": "Another operation on this document is in progress",
                    },
                )
            self._busy.add(key)
        try:
            yield
        finally:
            with self._guard:
                self._busy.discard(key)

    def is_busy(self, record_id) -> bool:
        with self._guard:
            return str(record_id) in self._busy


record_locks = RecordLocks()


class Documents:
    """Owner-scoped access to tracked documents.

    Every statement carries the ``user_id`` predicate, so a row owned by
    someone else is indistinguishable from a missing one.
    """

    @staticmethod
    def _owned(db: Session, owner_id, document_id) -> Document:
        doc_id = coerce_uuid_or_404(document_id, "Document not found")
        document = db.scalars(
            select(Document)
            .where(Document.id == doc_id)
            .where(Document.user_id == coerce_uuid(owner_id))
        ).first()
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        return document

    @staticmethod
    def get(db: Session, owner_id: str, document_id: str) -> Document:
        return Documents._owned(db, owner_id, document_id)

    @staticmethod
    def list(db: Session, owner_id: str) -> list[Document]:
        stmt = (
            select(Document)
            .where(Document.user_id == coerce_uuid(owner_id))
            .order_by(Document.expiry_date.asc())
        )
        return list(db.scalars(stmt).all())

    @staticmethod
    def create(db: Session, owner_id: str, payload: DocumentCreate) -> Document:
        data = payload.model_dump()
        data["document_type"] = _document_type(data["document_type"])
        data["relationship"] = _relationship(data["relationship"])
        now = utcnow()
        document = Document(
            **data,
            user_id=coerce_uuid(owner_id),
            created_at=now,
            updated_at=now,
        )
        db.add(document)
        db.commit()
        db.refresh(document)
        logger.info("Created document %s for user %s", document.id, owner_id)
        return document

    @staticmethod
    def update(
        db: Session, owner_id: str, document_id: str, payload: DocumentUpdate
    ) -> Document:
        document = Documents._owned(db, owner_id, document_id)
        data = payload.model_dump(exclude_unset=True)

        for field in _REQUIRED_FIELDS:
            if field in data and data[field] is None:
                raise HTTPException(
                    status_code=400, detail=f"{field} cannot be cleared"
                )
        if "document_type" in data:
            data["document_type"] = _document_type(data["document_type"])
        if "relationship" in data:
            data["relationship"] = _relationship(data["relationship"])

        with record_locks.hold(document.id):
            for key, value in data.items():
                setattr(document, key, value)
            document.updated_at = utcnow()
            db.commit()
            db.refresh(document)
        logger.info("Updated document %s (%s)", document.id, ", ".join(sorted(data)))
        return document

    @staticmethod
    def delete(
        db: Session, owner_id: str, document_id: str, confirmed: bool = False
    ) -> None:
        document = Documents._owned(db, owner_id, document_id)
        if not confirmed:
            raise HTTPException(
                status_code=428,
                detail={
                    "code": "confirmation_required",
                    "message": DELETE_PROMPT,
                    "details": {"document_id": str(document.id)},
                },
            )
        with record_locks.hold(document.id):
            db.delete(document)
            db.commit()
        logger.info("Deleted document %s for user %s", document_id, owner_id)


documents = Documents()
