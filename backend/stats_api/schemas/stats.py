"""Schemas for the stats, translation and report endpoints."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from stats_api.security import AccessType
from stats_api.services.reports import ReportFormat


class RateLimitStatus(BaseModel):
    remaining: int = Field(..., ge=0, description="Requests left in the current window")
    resetTime: str = Field(..., description="ISO-8601 time by which the window has fully slid")


class StatsResponse(BaseModel):
    success: bool = True
    message: str
    accessType: AccessType
    data: Any = Field(..., description="Canned payload, translated to the requested language")
    rateLimit: RateLimitStatus


class ErrorResponse(BaseModel):
    error: str


class RateLimitedResponse(ErrorResponse):
    remaining: int
    resetTime: str


class TranslateJSONRequest(BaseModel):
    data: Any = Field(..., description="Any JSON value")
    target_lang: str = Field(default="en", min_length=1)


class TranslateTextRequest(BaseModel):
    text: str
    target_lang: str = Field(default="en", min_length=1)


class TranslateTextResponse(BaseModel):
    text: str


class ReportRequest(BaseModel):
    data: Any = Field(..., description="Stats envelope to render")
    target_lang: str = Field(default="en", min_length=1)
    format: ReportFormat = ReportFormat.NATURAL
    translate: bool = True


class ReportResponse(BaseModel):
    report: str
