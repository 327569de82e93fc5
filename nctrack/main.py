"""NC Tracker FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from nctrack.api.comments import router as comments_router
from nctrack.api.health import router as health_router
from nctrack.api.ncs import router as ncs_router
from nctrack.config import Settings, settings
from nctrack.database import Database
from nctrack.errors import NotFoundError, StorageError, ValidationError
from nctrack.notifications import Notifier

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    missing = [
        str(err["loc"][-1]) for err in exc.errors() if err.get("type") == "missing"
    ]
    if missing:
        return f"Missing required fields: {', '.join(missing)}"
    first = exc.errors()[0]
    field = ".".join(str(p) for p in first["loc"][1:]) or "body"
    return f"Invalid value for {field}: {first['msg']}"


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the application. Database and notifier are created on startup."""
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(app_settings.database_url, echo=app_settings.log_level == "DEBUG")
        if app_settings.create_schema_on_startup:
            await database.create_all()
        app.state.database = database
        app.state.notifier = Notifier(app_settings)
        logger.info("NC Tracker started (%s)", database.engine.dialect.name)
        try:
            yield
        finally:
            await database.dispose()
            logger.info("NC Tracker stopped")

    app = FastAPI(
        title="NC Tracker",
        description="Non-conformance tracking: investigation lifecycle, RCA comments and analytics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _validation_message(exc)},
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal storage error"},
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal storage error"},
        )

    app.include_router(health_router, tags=["Health"])
    app.include_router(ncs_router, prefix="/api", tags=["Non-conformances"])
    app.include_router(comments_router, prefix="/api", tags=["Comments"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"service": "NC Tracker", "version": "0.1.0", "docs": "/docs"}

    return app


app = create_app()
