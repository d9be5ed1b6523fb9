from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_user_auth
from app.models.auth import AuthSession
from app.schemas.user import UserRead, UserUpdate
from app.services.users import users

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=UserRead)
def get_profile(
    db: Session = Depends(get_db), auth: AuthSession = Depends(require_user_auth)
):
    return users.get(db, auth.user_id)


@router.patch("", response_model=UserRead)
def update_profile(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    auth: AuthSession = Depends(require_user_auth),
):
    return users.update(db, auth.user_id, payload)
