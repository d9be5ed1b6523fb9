from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_user_auth
from app.models.auth import AuthSession
from app.models.document import DocumentType, Relationship
from app.schemas.document import (
    DocumentCreate,
    DocumentListResponse,
    DocumentOptions,
    DocumentUpdate,
    DocumentView,
    DocumentWriteResult,
)
from app.services import document_views, expiry
from app.services.documents import documents

router = APIRouter(prefix="/documents", tags=["documents"])


def _write_result(db: Session, owner_id, document=None) -> DocumentWriteResult:
    # Re-fetch after every write so the caller gets the store's current state
    today = expiry.today()
    current = documents.list(db, owner_id)
    return DocumentWriteResult(
        document=(
            document_views.render_document(document, today)
            if document is not None
            else None
        ),
        items=document_views.render_documents(current, today),
        stats=document_views.compute_stats(current, today),
    )


# ------------------------------------------------------------------
# Reads
# ------------------------------------------------------------------


@router.get("/options", response_model=DocumentOptions)
def get_options():
    return DocumentOptions(
        document_types=[e.value for e in DocumentType],
        relationships=[e.value for e in Relationship],
        status_filters=list(document_views.STATUS_FILTERS),
        sort_keys=list(document_views.SORT_KEYS),
    )


@router.get("", response_model=DocumentListResponse)
def list_documents(
    q: str = Query(default="", max_length=200),
    status_filter: str = Query(default="all", alias="status"),
    sort_by: str = Query(default="expiry_date"),
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(require_user_auth),
):
    today = expiry.today()
    all_documents = documents.list(db, auth.user_id)
    selected = document_views.filter_and_sort(
        all_documents, q, status_filter, sort_by, today
    )
    return DocumentListResponse(
        items=document_views.render_documents(selected, today),
        count=len(selected),
        total=len(all_documents),
    )


@router.get("/{document_id}", response_model=DocumentView)
def get_document(
    document_id: str,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(require_user_auth),
):
    return document_views.render_document(
        documents.get(db, auth.user_id, document_id)
    )


# ------------------------------------------------------------------
# Writes
# ------------------------------------------------------------------


@router.post(
    "", response_model=DocumentWriteResult, status_code=status.HTTP_201_CREATED
)
def create_document(
    payload: DocumentCreate,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(require_user_auth),
):
    document = documents.create(db, auth.user_id, payload)
    return _write_result(db, auth.user_id, document)


@router.patch("/{document_id}", response_model=DocumentWriteResult)
def update_document(
    document_id: str,
    payload: DocumentUpdate,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(require_user_auth),
):
    document = documents.update(db, auth.user_id, document_id, payload)
    return _write_result(db, auth.user_id, document)


@router.delete("/{document_id}", response_model=DocumentWriteResult)
def delete_document(
    document_id: str,
    confirm: bool = Query(default=False),
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(require_user_auth),
):
    documents.delete(db, auth.user_id, document_id, confirmed=confirm)
    return _write_result(db, auth.user_id)
