from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .config import get_settings
from .database import init_db
from .logging_config import configure_logging
from .routers import parse_resume_router
from .services.error_handler import ConfigurationError
from .services.structured_extractor import build_structured_extractor

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await init_db()
    try:
        app.state.structured_extractor = build_structured_extractor(settings)
        logger.info(f"✅ Resume parsing enabled with {app.state.structured_extractor.provider}")
    except ConfigurationError as e:
        app.state.structured_extractor = None
        logger.warning(f"Resume parsing disabled until configured: {e}")
    yield
    # Shutdown
    extractor = getattr(app.state, "structured_extractor", None)
    if extractor is not None:
        await extractor.aclose()


app = FastAPI(
    title=settings.app_name,
    description="Resume parsing API: resume URL in, structured candidate record out",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,  # Disable docs in production
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware - also answers preflight requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=86400,
)


# Cache control middleware - prevents browser caching of API responses
class NoCacheMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response


app.add_middleware(NoCacheMiddleware)

# Include routers
app.include_router(parse_resume_router)


@app.get("/")
async def root():
    return {"message": settings.app_name, "status": "running", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancer"""
    return {"status": "healthy"}
