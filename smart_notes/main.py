"""Smart Notes API - Main Application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smart_notes.api.routes import (
    auth_router,
    chat_router,
    documents_router,
    events_router,
    notebooks_router,
    notes_router,
    search_router,
    topics_router,
)
from smart_notes.config import settings
from smart_notes.database import create_db_and_tables
from smart_notes.logging_config import setup_logging
from smart_notes.services.gemini_service import GeminiService
from smart_notes.utils.exceptions import SmartNotesException

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging()
    create_db_and_tables()
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    logger.info(f"{settings.app_name} started")
    yield


app = FastAPI(
    title=settings.app_name,
    description="A note-taking service with AI enrichment, document insights and semantic search",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SmartNotesException)
async def smart_notes_exception_handler(
    request: Request, exc: SmartNotesException
) -> JSONResponse:
    """Log the failure and return its sanitized detail."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}", exc_info=exc.__cause__)
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    http_exc = exc.to_http_exception()
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies and parameters as 400."""
    logger.info(f"{request.method} {request.url.path} rejected: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_errors(exc)})


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors reduced to location, message and type."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


app.include_router(auth_router)
app.include_router(events_router)
app.include_router(notes_router)
app.include_router(documents_router)
app.include_router(chat_router)
app.include_router(search_router)
app.include_router(topics_router)
app.include_router(notebooks_router)


@app.get("/health")
async def health_check() -> dict:
    """
    System health check.

    Returns status of the application and its dependencies.
    """
    provider_connected = await GeminiService().check_connection()

    # Database is connected if we reached this point
    db_connected = True

    return {
        "status": "ok",
        "provider_configured": bool(settings.gemini_api_key),
        "provider_connected": provider_connected,
        "db_connected": db_connected,
    }
