from app.models.auth import AuthSession, SessionStatus  # noqa: F401
from app.models.document import Document, DocumentType, Relationship  # noqa: F401
from app.models.user import User  # noqa: F401
