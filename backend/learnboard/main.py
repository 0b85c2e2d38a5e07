"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnboard.api.routes import imports, languages, roadmaps, sections
from learnboard.core.config import get_settings
from learnboard.core.database import close_db, get_db_session, init_db
from learnboard.core.logging import configure_logging, get_logger
from learnboard.services import snapshot_service

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    configure_logging(debug=settings.DEBUG, app_name=settings.APP_NAME, sql_echo=settings.DATABASE_ECHO)
    logger.info(
        "Starting LearnBoard",
        version=settings.APP_VERSION,
        env=settings.ENV,
        debug=settings.DEBUG,
    )
    await init_db()
    async with get_db_session() as db:
        app.state.workspace = await snapshot_service.load_workspace(db)
    yield
    # Shutdown
    logger.info("Shutting down LearnBoard")
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Learning roadmap tracker for programming languages",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(roadmaps.router, prefix="/api")
app.include_router(sections.router, prefix="/api")
app.include_router(languages.router, prefix="/api")
app.include_router(imports.router, prefix="/api")


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "env": settings.ENV,
    }


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
