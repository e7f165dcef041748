"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from labreport.config import settings
from labreport.database import async_session_maker
from labreport.repositories.skip_range import SkipRangeRepository
from labreport.routes import reports, skip_ranges
from labreport.services.skip_list import SkipListStore

logger = logging.getLogger(__name__)


async def _fetch_skip_list():
    async with async_session_maker() as session:
        return await SkipRangeRepository(session).list_entries()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events for startup/shutdown."""
    # Startup: snapshot the skip list once; an unreachable database yields an empty list
    app.state.skip_list = await SkipListStore.load(_fetch_skip_list)
    logger.info("Skip list loaded with %d entries", len(app.state.skip_list))

    yield  # Application runs here

    # Shutdown: nothing needed currently


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app = FastAPI(
    title="Lab Report Engine",
    description="Reference range classification and result presentation for lab reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)

# Parse comma-separated origins from config
_cors_origins = [origin.strip() for origin in settings.cors_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(reports.router, prefix="/api")
app.include_router(skip_ranges.router, prefix="/api")


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API info."""
    return {
        "name": "Lab Report Engine API",
        "version": "0.1.0",
        "docs": "/docs",
    }
