import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizintake.api.routes import router
from bizintake.config import Settings, settings as default_settings
from bizintake.db.connection import run_migrations
from bizintake.errors import EmailDeliveryFailed, IntakeError, ValidationFailed
from bizintake.repositories.document_repository import DocumentRepository
from bizintake.schemas.common import describe_errors
from bizintake.services.email_service import EmailService
from bizintake.services.enrichment_webhook import EnrichmentWebhookClient
from bizintake.services.resend_client import ResendClient
from bizintake.services.submission_service import SubmissionService


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def wire_services(app: FastAPI, settings: Settings) -> None:
    """Construct the repository and services and attach them to app.state."""
    repository = DocumentRepository(settings.DB_PATH)
    webhook = EnrichmentWebhookClient(
        settings.ENRICHMENT_WEBHOOK_URL,
        settings.MAKE_WEBHOOK_API_KEY,
        timeout=settings.OUTBOUND_TIMEOUT_SECONDS,
    )
    provider = ResendClient(
        settings.RESEND_API_KEY,
        settings.EMAIL_FROM_ADDRESS,
        api_url=settings.RESEND_API_URL,
        timeout=settings.OUTBOUND_TIMEOUT_SECONDS,
    )
    app.state.repository = repository
    app.state.submission_service = SubmissionService(repository, webhook)
    app.state.email_service = EmailService(repository, provider)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    _configure_logging(settings)
    logger = logging.getLogger(__name__)
    logger.info("Business intake starting | db=%s | port=%s", settings.DB_PATH, settings.PORT)
    if not settings.ENRICHMENT_WEBHOOK_URL:
        logger.warning("ENRICHMENT_WEBHOOK_URL not set - submissions will be rejected")
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not set - email sending is disabled")
    run_migrations(settings.DB_PATH)
    wire_services(app, settings)
    yield
    logger.info("Business intake shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(title="Business Intake", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings or default_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app.state.settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.exception_handler(IntakeError)
    async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
        content: dict = {"message": exc.message}
        if isinstance(exc, ValidationFailed) and exc.errors:
            content["errors"] = exc.errors
        if isinstance(exc, EmailDeliveryFailed) and exc.detail:
            content["error"] = exc.detail
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logging.getLogger(__name__).log(
            level, "%s %s failed | status=%s | %s", request.method, request.url.path, exc.status_code, exc.message
        )
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message, errors = describe_errors(exc.errors())
        logging.getLogger(__name__).info("%s %s rejected | %s", request.method, request.url.path, message)
        return JSONResponse(status_code=400, content={"message": message, "errors": errors})

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logging.getLogger(__name__).exception("Unhandled exception")
        return JSONResponse(
            status_code=500,
            content={"message": "Internal server error"},
        )

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("bizintake.main:app", host="0.0.0.0", port=default_settings.PORT, log_level=default_settings.LOG_LEVEL)
