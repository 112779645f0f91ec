"""FastAPI application entrypoint for the stats API."""
import logging
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from stats_api.api.routes import api_router
from stats_api.core.config import get_settings
from stats_api.deps import get_audit_trail
from stats_api.security import AccessDeniedError
from stats_api.services.audit import AuditEntry
from stats_api.services.rate_limit import RateLimitExceededError

logger = logging.getLogger(__name__)

app = FastAPI(title="Stats API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RateLimitExceededError)
async def rate_limited_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "error": "Rate limit exceeded",
            "remaining": exc.decision.remaining,
            "resetTime": exc.decision.reset_time_iso(),
        },
    )



class HealthResponse(BaseModel):
    status: str = "ok"


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check() -> HealthResponse:
    """Return service health information for monitoring and load-balancers."""
    return HealthResponse()


def _int_header(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@app.middleware("http")
async def audit_middleware(request: Request, call_next):
    # Tests swap settings through dependency_overrides
    settings_override = request.app.dependency_overrides.get(get_settings)
    settings = settings_override() if callable(settings_override) else get_settings()
    request_id = request.headers.get("x-request-id") or uuid.uuid4().hex

    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    entry = AuditEntry(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(elapsed_ms, 3),
        access_type=getattr(request.state, "access_type", None),
        signature=getattr(request.state, "signature", None),
        client_ip=request.client.host if request.client else None,
        extra={
            "lang": request.query_params.get("lang"),
            "user_agent": request.headers.get("user-agent"),
            "res_bytes": _int_header(response.headers.get("content-length")),
        },
    )
    try:
        await get_audit_trail(settings).record(entry)
    except OSError:
        logger.warning("Audit write failed", exc_info=True)
    response.headers["X-Request-Id"] = request_id
    return response
