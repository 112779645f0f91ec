"""Stats endpoint guarded by API key and per-caller rate limit."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from stats_api.deps import get_stats_service
from stats_api.schemas.stats import ErrorResponse, RateLimitedResponse, StatsResponse
from stats_api.security import AccessDeniedError
from stats_api.services.rate_limit import RateLimitExceededError
from stats_api.services.reports import ReportFormat, render_report
from stats_api.services.stats import StatsResult, StatsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing header or invalid API key"},
    429: {"model": RateLimitedResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Unexpected failure"},
}


async def _run(
    request: Request,
    service: StatsService,
    *,
    authorization: str | None,
    signature: str | None,
    lang: str | None,
) -> StatsResult | JSONResponse:
    request.state.signature = (signature or "").strip() or None
    try:
        result = await service.handle(
            authorization=authorization, signature=signature, target_lang=lang
        )
    except (AccessDeniedError, RateLimitExceededError):
        # rendered by the app-level handlers in main
        raise
    except Exception as exc:
        logger.exception("Stats request failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": f"Internal server error: {exc}"},
        )

    request.state.access_type = result.access_type.value
    return result


@router.get(
    "",
    response_model=StatsResponse,
    responses=_ERROR_RESPONSES,
    summary="Fetch analytics data for the presented API key",
)
async def get_stats(
    request: Request,
    authorization: str | None = Header(default=None),
    signature: str | None = Header(default=None, alias="X-User-Signature"),
    lang: str | None = Query(default=None, min_length=1, description="Target language code"),
    service: StatsService = Depends(get_stats_service),
) -> Response:
    outcome = await _run(
        request, service, authorization=authorization, signature=signature, lang=lang
    )
    if isinstance(outcome, JSONResponse):
        return outcome
    return JSONResponse(content=outcome.to_envelope())


@router.get(
    "/report",
    response_class=PlainTextResponse,
    responses=_ERROR_RESPONSES,
    summary="Fetch analytics data rendered as a text report",
)
async def get_stats_report(
    request: Request,
    authorization: str | None = Header(default=None),
    signature: str | None = Header(default=None, alias="X-User-Signature"),
    lang: str | None = Query(default=None, min_length=1, description="Target language code"),
    report_format: ReportFormat = Query(default=ReportFormat.NATURAL, alias="format"),
    service: StatsService = Depends(get_stats_service),
) -> Response:
    outcome = await _run(
        request, service, authorization=authorization, signature=signature, lang=lang
    )
    if isinstance(outcome, JSONResponse):
        return outcome
    return PlainTextResponse(render_report(outcome.to_envelope(), report_format))
