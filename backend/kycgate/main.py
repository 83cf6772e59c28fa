"""
main.py

Application entrypoint for the kycgate API.
- Initializes structured logging
- Sets up FastAPI application and middlewares
- Registers the domain error handler and all API routers
- Integrates rate limiting via SlowAPI
- Adds common security headers
- Configures CORS
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from kycgate.catalog.routes import router as catalog_router
from kycgate.core.config import settings
from kycgate.core.exceptions import register_exception_handlers
from kycgate.core.limiter import limiter
from kycgate.core.logging import init_logging
from kycgate.database.session import init_db
from kycgate.documents.routes import router as documents_router
from kycgate.profiles.routes import router as profiles_router
from kycgate.review.routes import router as review_router
from kycgate.roles.routes import router as roles_router
from kycgate.submission.routes import router as submission_router

init_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if settings.AUTO_CREATE_TABLES:
        await init_db()
    logger.info(f"[APP] {settings.APP_NAME} started")
    yield


# -----------------------------
# FastAPI App Initialization
# -----------------------------
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# -----------------------------
# Middleware Configuration
# -----------------------------
app.state.limiter = limiter


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    return _rate_limit_exceeded_handler(request, exc)  # type: ignore[arg-type]


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
register_exception_handlers(app)


# -----------------------------
# Security Headers Middleware
# -----------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add common security headers to responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"
        return response


app.add_middleware(SecurityHeadersMiddleware)

# -----------------------------
# CORSMiddleware Configuration
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# API Router Registration
# -----------------------------
app.include_router(catalog_router)
app.include_router(documents_router)
app.include_router(profiles_router)
app.include_router(submission_router)
app.include_router(roles_router)
app.include_router(review_router)


# -----------------------------
# Health Endpoint
# -----------------------------
@app.get("/health", include_in_schema=False)
async def health() -> Any:
    return {"status": "ok", "app": settings.APP_NAME}
