"""Translation and report endpoints."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from stats_api.deps import get_json_translator, require_api_key
from stats_api.schemas.stats import (
    ReportRequest,
    ReportResponse,
    TranslateJSONRequest,
    TranslateTextRequest,
    TranslateTextResponse,
)
from stats_api.security import AccessType
from stats_api.services.reports import create_translated_report, render_report
from stats_api.services.translator import JSONTranslator

router = APIRouter(tags=["translate"])


@router.post("/translate/json", summary="Translate every string in a JSON value")
async def translate_json(
    payload: TranslateJSONRequest,
    _: AccessType = Depends(require_api_key),
    translator: JSONTranslator = Depends(get_json_translator),
) -> Any:
    """Return the document with the same shape and its strings translated."""

    return await translator.translate_document(payload.data, payload.target_lang)


@router.post(
    "/translate/text",
    response_model=TranslateTextResponse,
    summary="Translate a single text",
)
async def translate_text(
    payload: TranslateTextRequest,
    _: AccessType = Depends(require_api_key),
    translator: JSONTranslator = Depends(get_json_translator),
) -> TranslateTextResponse:
    text = await translator.translate_text(payload.text, payload.target_lang)
    return TranslateTextResponse(text=text)


@router.post("/reports", response_model=ReportResponse, summary="Render a stats report")
async def create_report(
    payload: ReportRequest,
    _: AccessType = Depends(require_api_key),
    translator: JSONTranslator = Depends(get_json_translator),
) -> ReportResponse:
    if not payload.translate:
        return ReportResponse(report=render_report(payload.data, payload.format))
    report = await create_translated_report(
        translator, payload.data, payload.target_lang, payload.format
    )
    return ReportResponse(report=report)
