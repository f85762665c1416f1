"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal.core.config import settings
from portal.core.database import init_db, close_db
from portal.core.logging import setup_logging, get_logger
from portal.core.middleware import LoggingMiddleware
from portal.api.health import router as health_router
from portal.api.comments import router as comments_router
from portal.api.notifications import router as notifications_router
from portal.api.navigation import router as navigation_router

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    await logger.ainfo("Starting agency portal")
    
    try:
        await init_db()
        await logger.ainfo("Application startup completed")
    except Exception as e:
        await logger.aerror("Failed to start application", error=str(e))
        raise
    
    yield
    
    await logger.ainfo("Shutting down agency portal")
    try:
        await close_db()
    except Exception as e:
        await logger.aerror("Error during shutdown", error=str(e))


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Agency Portal",
        description="Project discussions for agencies, their teams and clients",
        version="1.0.0",
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    app.include_router(health_router, prefix="/api", tags=["Health"])
    app.include_router(comments_router, prefix="/api", tags=["Comments"])
    app.include_router(notifications_router, prefix="/api", tags=["Notifications"])
    app.include_router(navigation_router, prefix="/api", tags=["Navigation"])
    
    return app


app = create_app()
