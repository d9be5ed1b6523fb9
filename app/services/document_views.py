"""Display-ready derivations over a user's document set.

These functions never touch the store: they take the already fetched,
expiry-ascending list and return new lists, so the same inputs always give
the same output.
"""

from __future__ import annotations

import unicodedata
from datetime import date
from typing import Iterable, Sequence

from fastapi import HTTPException

from app.models.document import Document
from app.schemas.document import (
    DashboardRead,
    DocumentRead,
    DocumentStats,
    DocumentView,
    ExpiryRead,
)
from app.services import expiry

STATUS_FILTERS = ("all", "expired", "expiring", "safe")
SORT_KEYS = ("expiry_date", "document_name", "person_name")

UPCOMING_LIMIT = 5
RECENTLY_EXPIRED_LIMIT = 3


def _text(value) -> str:
    return str(getattr(value, "value", value) or "")


def collation_key(value: str) -> str:
    # Accent- and case-insensitive, close to a primary-strength locale compare
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def matches_query(document: Document, q: str) -> bool:
    if not q:
        return True
    needle = q.lower()
    return any(
        needle in _text(field).lower()
        for field in (
            document.document_name,
            document.person_name,
            document.document_type,
        )
    )


def matches_status(days: int, status_filter: str) -> bool:
    if status_filter == "expired":
        return days < 0
    if status_filter == "expiring":
        return 0 <= days <= expiry.CAUTION_DAYS
    if status_filter == "safe":
        return days > expiry.CAUTION_DAYS
    return True


def filter_and_sort(
    documents: Iterable[Document],
    q: str = "",
    status_filter: str = "all",
    sort_by: str = "expiry_date",
    today: date | None = None,
) -> list[Document]:
    if status_filter not in STATUS_FILTERS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Allowed: {', '.join(STATUS_FILTERS)}",
        )
    if sort_by not in SORT_KEYS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid sort_by. Allowed: {', '.join(SORT_KEYS)}",
        )
    today = today or expiry.today()

    filtered = [
        doc
        for doc in documents
        if matches_query(doc, q)
        and matches_status(expiry.days_until(doc.expiry_date, today), status_filter)
    ]
    if sort_by == "expiry_date":
        return sorted(filtered, key=lambda doc: doc.expiry_date)
    return sorted(filtered, key=lambda doc: collation_key(getattr(doc, sort_by)))


# ---------------------------------------------------------------------------
# Aggregate statistics
# ---------------------------------------------------------------------------


def compute_stats(
    documents: Sequence[Document], today: date | None = None
) -> DocumentStats:
    today = today or expiry.today()
    expired = expiring = safe = 0
    for doc in documents:
        days = expiry.days_until(doc.expiry_date, today)
        if days < 0:
            expired += 1
        elif days <= expiry.CAUTION_DAYS:
            expiring += 1
        else:
            safe += 1
    return DocumentStats(
        total=len(documents), expired=expired, expiring=expiring, safe=safe
    )


def upcoming(
    documents: Sequence[Document], n: int = UPCOMING_LIMIT, today: date | None = None
) -> list[Document]:
    today = today or expiry.today()
    return [
        doc
        for doc in documents
        if 0 <= expiry.days_until(doc.expiry_date, today) <= expiry.CAUTION_DAYS
    ][:n]


def recently_expired(
    documents: Sequence[Document],
    n: int = RECENTLY_EXPIRED_LIMIT,
    today: date | None = None,
) -> list[Document]:
    """First ``n`` expired documents in the input's expiry-ascending order.

    This surfaces the longest-lapsed documents first, not the most recent
    lapses; the dashboard has always shown it this way.
    """
    today = today or expiry.today()
    return [doc for doc in documents if expiry.days_until(doc.expiry_date, today) < 0][
        :n
    ]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_document(document: Document, today: date | None = None) -> DocumentView:
    status = expiry.expiry_status(document.expiry_date, today or expiry.today())
    display = expiry.status_display(status.bucket)
    base = DocumentRead.model_validate(document)
    return DocumentView(
        **base.model_dump(),
        expiry=ExpiryRead(
            status=status.bucket.value,
            days=status.days,
            message=status.message,
            color=display.color,
            label=display.label,
            expiry_display=expiry.format_for_display(document.expiry_date),
            issue_display=(
                expiry.format_for_display(document.issue_date)
                if document.issue_date
                else None
            ),
        ),
    )


def render_documents(
    documents: Iterable[Document], today: date | None = None
) -> list[DocumentView]:
    today = today or expiry.today()
    return [render_document(doc, today) for doc in documents]


def build_dashboard(
    documents: Sequence[Document], today: date | None = None
) -> DashboardRead:
    today = today or expiry.today()
    return DashboardRead(
        stats=compute_stats(documents, today),
        upcoming=render_documents(upcoming(documents, today=today), today),
        recently_expired=render_documents(
            recently_expired(documents, today=today), today
        ),
    )
