from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_otp_provider, require_user_auth
from app.models.auth import AuthSession
from app.schemas.auth import OTPRequest, OTPRequested, OTPVerify, SessionRead
from app.schemas.user import UserRead
from app.services.auth_flow import auth_flow
from app.services.otp_provider import OTPProvider

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/otp", response_model=OTPRequested)
def request_code(
    payload: OTPRequest, provider: OTPProvider = Depends(get_otp_provider)
):
    phone = auth_flow.request_code(provider, payload.mobile_number)
    return OTPRequested(mobile_number=phone)


@router.post("/verify", response_model=SessionRead)
def verify_code(
    payload: OTPVerify,
    db: Session = Depends(get_db),
    provider: OTPProvider = Depends(get_otp_provider),
):
    session, token = auth_flow.verify_code(
        db, provider, payload.mobile_number, payload.code
    )
    return SessionRead(
        access_token=token,
        expires_at=session.expires_at,
        user=UserRead.model_validate(session.user),
    )


@router.post("/sign-out", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    db: Session = Depends(get_db),
    provider: OTPProvider = Depends(get_otp_provider),
    session: AuthSession = Depends(require_user_auth),
):
    auth_flow.sign_out(db, provider, session)
