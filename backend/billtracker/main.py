# billtracker/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from billtracker.api.v1 import attachments, auth, bills, categories, health, notifications, reports, users
from billtracker.core.config import settings as default_settings
from billtracker.core.logging import configure_logging
from billtracker.db.session import make_engine, make_session_factory
from billtracker.services.files import LocalFileStore
from billtracker.services.mailer import mailer_from_settings

logger = logging.getLogger(__name__)


def create_app(settings=None, session_factory=None, mailer=None, file_store=None) -> FastAPI:
    """
    Build the API. Everything the routers need (settings, DB sessions, mailer,
    file store) lives on app.state; tests pass their own.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    if session_factory is None:
        session_factory = make_session_factory(make_engine(settings.DATABASE_URL))
    if mailer is None:
        mailer = mailer_from_settings(settings)
        if not settings.mail_enabled:
            logger.warning("SMTP credentials not configured, reminders will only be logged")
    if file_store is None:
        file_store = LocalFileStore(settings.UPLOAD_ROOT)

    app = FastAPI(title="Bill Tracker API", version="0.1.0")
    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.mailer = mailer
    app.state.file_store = file_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/v1/users")
    app.include_router(bills.router, prefix="/api/v1/bills")
    app.include_router(attachments.router, prefix="/api/v1/bills")
    app.include_router(categories.router, prefix="/api/v1/categories")
    app.include_router(reports.router, prefix="/api/v1/reports")
    app.include_router(notifications.router, prefix="/api/v1/notifications")

    @app.get("/")
    def root():
        return {"message": "Bill Tracker API - visit /api/v1/health"}

    return app
