from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, require_user_auth
from app.models.auth import AuthSession
from app.schemas.document import DashboardRead
from app.services import document_views
from app.services.documents import documents

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardRead)
def get_dashboard(
    db: Session = Depends(get_db), auth: AuthSession = Depends(require_user_auth)
):
    return document_views.build_dashboard(documents.list(db, auth.user_id))
