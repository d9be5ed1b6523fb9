from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.auth import AuthSession, SessionStatus
from app.services.auth_flow import hash_token
from app.services.common import utcnow
from app.services.otp_provider import OTPProvider


def get_otp_provider(request: Request) -> OTPProvider:
    return request.app.state.otp_provider


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_user_auth(
    request: Request, db: Session = Depends(get_db)
) -> AuthSession:
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    session = db.scalars(
        select(AuthSession)
        .where(AuthSession.token_hash == hash_token(token))
        .where(AuthSession.status == SessionStatus.active)
        .where(AuthSession.expires_at > utcnow())
    ).first()
    if not session:
        raise HTTPException(status_code=401, detail="Session expired or invalid")
    return session
