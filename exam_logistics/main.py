# exam_logistics/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging

from .api.v1.api import api_router
from .config import get_settings, setup_logging, validate_settings
from .core.exceptions import AppError
from .database import check_db_health, db_manager, init_db
from .logging_config import LOGGING_CONFIG

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("Starting up the application...")
    for issue in validate_settings(settings):
        logger.warning(f"Configuration issue: {issue}")

    if not db_manager.is_initialized:
        try:
            await init_db(
                database_url=settings.DATABASE_URL,
                create_tables=settings.DATABASE_CREATE_TABLES,
                **settings.database_config,
            )
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    yield

    logger.info("Shutting down the application...")
    await db_manager.close()


app = FastAPI(
    title=settings.APP_NAME,
    description="Invigilation duty and exam seating allocation",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Translate service errors into their JSON body and status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch any unhandled exceptions and log them with a full traceback.
    Returns a generic 500 error to the client to avoid leaking details.
    """
    logger.error(
        f"Unhandled exception for request {request.method} {request.url}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal server error occurred."},
    )


app.include_router(api_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint providing basic API information."""
    return {
        "message": f"Welcome to the {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "status": "active",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint to verify service and database connectivity."""
    db_health = await check_db_health()
    return {
        "status": "healthy" if db_health["status"] == "healthy" else "unhealthy",
        "service": "exam-logistics",
        "database": db_health,
    }


def run() -> None:
    setup_logging(settings)
    uvicorn.run(
        "exam_logistics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_config=LOGGING_CONFIG,
    )


if __name__ == "__main__":
    run()
