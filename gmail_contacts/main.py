"""
Sample web app for the AuthSub contacts flow.

    uvicorn gmail_contacts.main:app --port 3000
"""

from fastapi import FastAPI

from gmail_contacts.config import settings
from gmail_contacts.infrastructure.observability.logging import get_logger, setup_logging
from gmail_contacts.routes import authsub

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Gmail Contacts AuthSub sample", debug=settings.debug)
    app.include_router(authsub.router)

    logger.info("Sample app created", environment=settings.environment)
    return app


app = create_app()
