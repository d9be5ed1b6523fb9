import uuid
from datetime import datetime, timezone

from fastapi import HTTPException


def coerce_uuid(value):
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def coerce_uuid_or_404(value, detail: str):
    try:
        return coerce_uuid(value)
    except ValueError:
        raise HTTPException(status_code=404, detail=detail) from None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
