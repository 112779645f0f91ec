"""FastAPI dependency helpers."""
from __future__ import annotations

from functools import lru_cache
from typing import AsyncIterator

from fastapi import Depends, Header, Request

from stats_api.core.config import RATE_LIMIT_WINDOW_SECONDS, Settings, get_settings
from stats_api.security import AccessGate, AccessType
from stats_api.services.audit import AuditTrail
from stats_api.services.rate_limit import RateConfig, RateLimiter
from stats_api.services.stats import ClientFactory, StatsService
from stats_api.services.translate_client import async_translate_client
from stats_api.services.translator import JSONTranslator


@lru_cache
def _create_rate_limiter(window_seconds: int, max_requests: int) -> RateLimiter:
    return RateLimiter(RateConfig(window_seconds=window_seconds, max_requests=max_requests))


def get_rate_limiter(settings: Settings = Depends(get_settings)) -> RateLimiter:
    """Return the process-wide limiter for the configured request budget."""

    return _create_rate_limiter(RATE_LIMIT_WINDOW_SECONDS, settings.rate_limit)


def get_access_gate(settings: Settings = Depends(get_settings)) -> AccessGate:
    return AccessGate.from_settings(settings)


def get_translate_client_factory() -> ClientFactory:
    """Return the factory used to open translation clients."""

    return async_translate_client


async def get_json_translator(
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_translate_client_factory),
) -> AsyncIterator[JSONTranslator]:
    """Provide a translator bound to a client that lives for one request."""

    async with client_factory(settings) as client:
        yield JSONTranslator(client, max_concurrency=settings.translate_max_concurrency)


def get_stats_service(
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_rate_limiter),
    gate: AccessGate = Depends(get_access_gate),
    client_factory: ClientFactory = Depends(get_translate_client_factory),
) -> StatsService:
    """Provide a stats service instance per request."""

    return StatsService(settings, limiter=limiter, gate=gate, client_factory=client_factory)


async def require_api_key(
    request: Request,
    authorization: str | None = Header(default=None),
    signature: str | None = Header(default=None, alias="X-User-Signature"),
    service: StatsService = Depends(get_stats_service),
) -> AccessType:
    """Gate a route with the same key check and rate limit as the stats endpoint."""

    request.state.signature = (signature or "").strip() or None
    access_type, _, _ = service.authorize(authorization=authorization, signature=signature)
    request.state.access_type = access_type.value
    return access_type


@lru_cache
def _create_audit_trail(path: str) -> AuditTrail:
    return AuditTrail(path)


def get_audit_trail(settings: Settings) -> AuditTrail:
    return _create_audit_trail(settings.audit_log_store_path)


def reset_rate_limiters() -> None:
    """Drop every cached limiter, forgetting all request windows."""

    _create_rate_limiter.cache_clear()
