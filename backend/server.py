"""
FastAPI application entry point for the Blood Bank Network Admin API.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, get_settings
from database import connect, ensure_indexes
from routers import audit_logs, bloodbanks, dashboard
from services import InvalidTransitionError, failure

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts)


def create_app(settings: Optional[Settings] = None, db: Optional[AsyncIOMotorDatabase] = None) -> FastAPI:
    """
    Build the application. Passing `db` binds an existing database instead of
    connecting with MONGO_URL at startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        if getattr(app.state, "db", None) is None:
            client = connect(settings)
            app.state.db = client[settings.DB_NAME]
        await ensure_indexes(app.state.db)
        yield
        if client is not None:
            client.close()
            logger.info("MongoDB connection closed")

    app = FastAPI(
        title="Blood Bank Network Admin API",
        description="Administration of blood bank organizations, status workflow and audit trail",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.db = db
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=failure(str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=failure("Invalid request", validation_message(exc))
        )

    @app.exception_handler(InvalidTransitionError)
    async def transition_exception_handler(request: Request, exc: InvalidTransitionError):
        return JSONResponse(status_code=400, content=failure(str(exc)))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=failure("Unexpected error processing request", str(exc))
        )

    app.include_router(dashboard.router)
    app.include_router(bloodbanks.router)
    app.include_router(audit_logs.router)

    return app


app = create_app()
