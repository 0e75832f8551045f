import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookline.config import settings
from bookline.middleware.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)

from bookline.api.appointments import router as appointments_router  # noqa: E402
from bookline.api.auth import router as auth_router  # noqa: E402
from bookline.api.metrics import router as metrics_router  # noqa: E402
from bookline.api.permissions import router as permissions_router  # noqa: E402
from bookline.api.team import router as team_router  # noqa: E402
from bookline.errors import (  # noqa: E402
    AccessDenied,
    BookingBackendError,
    DuplicateTeamMember,
    SelfModificationDenied,
    TeamMemberNotFound,
    UnknownPermissionError,
    ValidationError,
)

logger = logging.getLogger("bookline")

app = FastAPI(
    title="Bookline",
    description="Team permissions and appointment scheduling for small-business booking",
    version="0.1.0",
)

# ── CORS ─────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# ── Security headers middleware ──────────────────────────────────────────────
from bookline.middleware.security_headers import SecurityHeadersMiddleware  # noqa: E402

app.add_middleware(SecurityHeadersMiddleware)

# ── Request context middleware (request ID + timing) ─────────────────────────
from bookline.middleware.request_context import RequestContextMiddleware  # noqa: E402

app.add_middleware(RequestContextMiddleware)

# ── Prometheus metrics middleware ────────────────────────────────────────────
from bookline.middleware.metrics import PrometheusMiddleware  # noqa: E402

app.add_middleware(PrometheusMiddleware)


# ── Domain errors → HTTP ─────────────────────────────────────────────────────

@app.exception_handler(SelfModificationDenied)
async def self_modification_handler(request: Request, exc: SelfModificationDenied):
    return JSONResponse(
        status_code=403,
        content={
            "detail": exc.message,
            "error": "self_modification_denied",
            "permission": exc.permission,
        },
    )


@app.exception_handler(AccessDenied)
async def access_denied_handler(request: Request, exc: AccessDenied):
    return JSONResponse(
        status_code=403,
        content={
            "detail": f"Access Denied: requires {exc.permission}",
            "error": "access_denied",
            "permission": exc.permission,
        },
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(UnknownPermissionError)
async def unknown_permission_handler(request: Request, exc: UnknownPermissionError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "unknown": exc.identifiers},
    )


@app.exception_handler(TeamMemberNotFound)
async def not_found_handler(request: Request, exc: TeamMemberNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(DuplicateTeamMember)
async def duplicate_member_handler(request: Request, exc: DuplicateTeamMember):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(BookingBackendError)
async def booking_backend_handler(request: Request, exc: BookingBackendError):
    # Upstream 4xx (e.g. slot already taken) and timeouts are relayed as-is
    relayed = 400 <= exc.status_code < 500 or exc.status_code == 504
    status = exc.status_code if relayed else 502
    return JSONResponse(status_code=status, content={"detail": exc.message})


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return detailed error info in development mode so 500s are debuggable."""
    tb = traceback.format_exc()
    logger.error(
        "Unhandled %s on %s %s: %s\n%s",
        type(exc).__name__, request.method, request.url.path, exc, tb,
    )
    detail = f"{type(exc).__name__}: {exc}"
    if settings.environment == "development":
        return JSONResponse(
            status_code=500,
            content={"detail": detail, "traceback": tb.splitlines()[-5:]},
        )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# Register API routers
app.include_router(auth_router)
app.include_router(permissions_router)
app.include_router(team_router)
app.include_router(appointments_router)
app.include_router(metrics_router)


@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.environment,
        "timezone": settings.business_timezone,
    }
