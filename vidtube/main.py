"""
Main FastAPI application
"""

import time
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

from vidtube.api.routes import api_router
from vidtube.core.config import settings
from vidtube.core.error_handlers import register_error_handlers
from vidtube.core.logging_config import configure_logging, request_logger
from vidtube.db.database import create_tables, engine

configure_logging(
    log_level=settings.LOG_LEVEL,
    log_dir=settings.LOG_DIR if settings.LOG_TO_FILE else None
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting VidTube API...", environment=settings.ENVIRONMENT)
    try:
        await create_tables()
    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise

    yield

    logger.info("Shutting down VidTube API...")
    await engine.dispose()


app = FastAPI(
    title="VidTube API",
    description="Video sharing platform backend",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

cors_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
logger.info("CORS origins configured", cors_origins=cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    request_logger.log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        response_time=time.perf_counter() - started,
        ip_address=request.client.host if request.client else ""
    )
    return response


register_error_handlers(app)

# Local media is served by the API itself; S3/R2 media comes from the bucket URL
if not settings.USE_S3_STORAGE:
    uploads_dir = Path(settings.UPLOAD_DIR)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(uploads_dir)), name="uploads")

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "VidTube API",
        "version": "1.0.0",
        "docs": "/api/docs"
    }
