"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import get_settings
from . import __version__

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name}...")
    logger.info(
        f"Auto-approval {'enabled' if settings.auto_approval_enabled else 'disabled'}, "
        f"pipeline timeout {settings.pipeline_timeout_seconds:g}s"
    )
    logger.info(f"API ready - Version {__version__}")

    yield

    logger.info(f"Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="""
## Label Field Alignment & Verification API

Checks alcohol beverage label text against application data.

### Features
- **Field Location**: Align classified fields to normalized boxes on the label images
- **Field Comparison**: Exact, fuzzy, normalized, enum and containment strategies
- **Status Decision**: Overall status with correction deadlines
- **Deadline Expiration**: Effective status computed at read time

### Quick Start
1. Use `/health` to check API status
2. Use `/extract` to locate fields from OCR and classifier output
3. Use `/evaluate` to verify a label against application data
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.app_name,
            "version": __version__,
            "docs": "/docs"
        }

    return app


# Create app instance
app = create_app()
