"""
FastAPI Application - marketing site and contact form endpoint
"""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager
from pathlib import Path

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from npsite.config import settings
from npsite.exceptions import ContactError
from npsite.observability import MetricsMiddleware, configure_logging, metrics_response
from npsite.routers.contact import CONTACT_PATHS
from npsite.routers.contact import router as contact_router
from npsite.routers.site import router as site_router
from npsite.security import SecurityHeadersMiddleware, limiter
from npsite.staticfiles import CachedStaticFiles

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)
IS_PROD = settings.is_production


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting site server", extra={"environment": settings.environment})
    missing = settings.missing_mail_settings
    if missing:
        logger.warning(
            "SMTP not configured, contact form will answer 500 (missing %s)",
            ", ".join(missing),
        )
    yield
    logger.info("Shutting down site server")


# ==========================================
# Exception handlers
# ==========================================
def _contact_payload(
    success: bool, message: str, status_code: int, headers: dict | None = None
) -> JSONResponse:
    return JSONResponse(
        {"success": success, "message": message},
        status_code=status_code,
        headers=headers,
    )


async def contact_error_handler(request: Request, exc: ContactError):
    if exc.detail:
        logger.info(
            "Contact request ended with %s: %s", exc.__class__.__name__, exc.detail
        )
    return _contact_payload(exc.success, exc.public_message, exc.status_code)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        {"detail": "Rate limit exceeded. Please retry shortly."},
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Contact paths always answer in the ``{success, message}`` shape."""
    if request.url.path in CONTACT_PATHS:
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = "Method not allowed"
        else:
            message = str(exc.detail)
        return _contact_payload(
            False, message, exc.status_code, getattr(exc, "headers", None)
        )
    return JSONResponse(
        {"detail": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


# ==========================================
# FastAPI Application
# ==========================================
app = FastAPI(
    title="NP Consulting Site",
    description="Static marketing site with a contact form endpoint",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=None if IS_PROD else "/docs",
    redoc_url=None if IS_PROD else "/redoc",
    openapi_url=None if IS_PROD else "/openapi.json",
)
# Order: compression → rate-limit/metrics → security → correlation id
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")
app.state.limiter = limiter
app.add_exception_handler(ContactError, contact_error_handler)
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Accept", "Content-Type"],
    )


# ==========================================
# Health & metrics
# ==========================================
@app.get("/healthz", tags=["system"], summary="Health check", response_model=dict)
async def health_check() -> dict:
    if IS_PROD:
        return {"status": "healthy"}
    return {
        "status": "healthy",
        "version": app.version,
        "mail_configured": settings.mail_configured,
    }


security = HTTPBasic(auto_error=False)


def verify_metrics_auth(
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> None:
    """Require HTTP Basic Auth on /metrics once METRICS_PASSWORD is set."""
    if not settings.metrics_password:
        return
    if credentials is not None:
        correct_username = secrets.compare_digest(
            credentials.username, settings.metrics_username
        )
        correct_password = secrets.compare_digest(
            credentials.password, settings.metrics_password
        )
        if correct_username and correct_password:
            return
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Basic"},
    )


@app.get("/metrics", include_in_schema=False)
def metrics(_: None = Depends(verify_metrics_auth)):
    return metrics_response()


# ==========================================
# Routers, then the static site as catch-all
# ==========================================
app.include_router(contact_router)
app.include_router(site_router)
if Path(settings.public_dir).is_dir():
    app.mount(
        "/", CachedStaticFiles(directory=settings.public_dir, html=True), name="site"
    )
