import logging

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.orm import sessionmaker
from starlette.responses import Response

from app.api.auth_flow import router as auth_flow_router
from app.api.dashboard import router as dashboard_router
from app.api.documents import router as documents_router
from app.api.profile import router as profile_router
from app.config import settings
from app.db import get_engine, make_session_factory
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.observability import ObservabilityMiddleware
from app.services.otp_provider import OTPProvider

logger = logging.getLogger(__name__)


def _include_api_router(app: FastAPI, router) -> None:
    app.include_router(router)
    app.include_router(router, prefix="/api/v1")


def create_app(
    session_factory: sessionmaker | None = None,
    otp_provider: OTPProvider | None = None,
) -> FastAPI:
    """Build the API with its store and auth provider injected.

    Without arguments both are built from settings; tests pass their own.
    """
    app = FastAPI(
        title=f"{settings.brand_name} API", description=settings.brand_tagline
    )
    app.state.session_factory = session_factory or make_session_factory(
        get_engine()
    )
    app.state.otp_provider = otp_provider or OTPProvider()
    if not app.state.otp_provider.is_configured():
        logger.warning("Auth provider credentials are not configured")

    app.add_middleware(ObservabilityMiddleware)
    register_error_handlers(app)

    _include_api_router(app, auth_flow_router)
    _include_api_router(app, profile_router)
    _include_api_router(app, dashboard_router)
    _include_api_router(app, documents_router)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.get("/metrics")
    def metrics():
        data = generate_latest()
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


configure_logging()
app = create_app()
