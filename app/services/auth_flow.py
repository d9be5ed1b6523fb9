from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta

from sqlalchemy import delete, or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models.auth import AuthSession, SessionStatus
from app.services.common import utcnow
from app.services.otp_provider import (
    AuthError,
    InvalidNumber,
    OTPProvider,
    normalize_mobile_number,
)
from app.services.users import Users

logger = logging.getLogger(__name__)

_MIN_DIGITS = 8
_MAX_DIGITS = 15


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _checked_number(mobile_number: str) -> str:
    phone = normalize_mobile_number(mobile_number)
    if not _MIN_DIGITS <= len(phone) - 1 <= _MAX_DIGITS:
        raise InvalidNumber("Please enter a valid mobile number.")
    return phone


def _prune_sessions(db: Session, user_id) -> None:
    """Drop the user's revoked and expired sessions; they can never be used again."""
    result = db.execute(
        delete(AuthSession)
        .where(AuthSession.user_id == user_id)
        .where(
            or_(
                AuthSession.status == SessionStatus.revoked,
                AuthSession.expires_at <= utcnow(),
            )
        )
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount:
        logger.info("Pruned %s stale sessions for user %s", result.rowcount, user_id)


class AuthFlow:
    @staticmethod
    def request_code(provider: OTPProvider, mobile_number: str) -> str:
        phone = _checked_number(mobile_number)
        provider.send_otp(phone)
        logger.info("Sent OTP to %s", phone)
        return phone

    @staticmethod
    def verify_code(
        db: Session, provider: OTPProvider, mobile_number: str, code: str
    ) -> tuple[AuthSession, str]:
        """Verify an OTP and open a local session.

        Returns the session row and the bearer token; only the token's hash
        is persisted.
        """
        phone = _checked_number(mobile_number)
        provider_session = provider.verify_otp(phone, code)
        user = Users.get_or_create(db, provider_session.user_id, phone)
        _prune_sessions(db, user.id)

        token = secrets.token_urlsafe(32)
        session = AuthSession(
            user_id=user.id,
            token_hash=hash_token(token),
            provider_token=provider_session.access_token,
            status=SessionStatus.active,
            expires_at=utcnow() + timedelta(seconds=settings.session_ttl_seconds),
        )
        db.add(session)
        db.commit()
        db.refresh(session)
        logger.info("Signed in user %s (session %s)", user.id, session.id)
        return session, token

    @staticmethod
    def sign_out(db: Session, provider: OTPProvider, session: AuthSession) -> None:
        """Revoke the local session; a failing remote logout is only logged."""
        if session.provider_token:
            try:
                provider.sign_out(session.provider_token)
            except AuthError as exc:
                logger.warning("Remote sign-out failed for %s: %s", session.id, exc)
        session.status = SessionStatus.revoked
        session.revoked_at = utcnow()
        db.commit()
        logger.info("Signed out session %s", session.id)


auth_flow = AuthFlow()
