"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from booktrade import __version__
from booktrade.config import settings
from booktrade.database import engine, Base
from booktrade.errors import BookTradeError
from booktrade.routes.books import router as books_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting BookTrade...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Blob folder: {settings.books_folder}")

    # Create tables (for development; use Alembic migrations in production)
    if settings.environment == "development":
        Base.metadata.create_all(bind=engine)

    yield

    # Shutdown
    logger.info("Shutting down BookTrade...")


# Create FastAPI app
app = FastAPI(
    title="BookTrade",
    description="Marketplace for used textbooks",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookTradeError)
async def booktrade_error_handler(request: Request, exc: BookTradeError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        field = ".".join(str(part) for part in errors[0]["loc"] if part != "body")
        message = f"{field}: {errors[0]['msg']}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Database error"})


# Include routes
app.include_router(books_router)

# Committed photos are public; a missing file is a plain 404
settings.books_folder.mkdir(parents=True, exist_ok=True)
app.mount("/images", StaticFiles(directory=settings.books_folder), name="images")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "BookTrade",
        "version": __version__,
        "environment": settings.environment,
    }
