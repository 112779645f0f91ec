"""Async client for a LibreTranslate-compatible translation service."""
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Protocol

import httpx

from stats_api.core.config import Settings

logger = logging.getLogger(__name__)


class TranslationError(RuntimeError):
    """Raised when a single text could not be translated."""


class TranslationUnavailableError(TranslationError):
    """Raised when the translation service cannot be reached or is failing."""


@dataclass(frozen=True, slots=True)
class TranslationResult:
    text: str


class TranslationClient(Protocol):
    async def translate(self, text: str, target_lang: str) -> TranslationResult:
        ...


class LibreTranslateClient:
    """Translate text through ``POST {base_url}/translate``."""

    def __init__(self, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http

    async def translate(self, text: str, target_lang: str) -> TranslationResult:
        if not text.strip():
            return TranslationResult(text=text)

        payload = {
            "q": text,
            "source": self._settings.translate_source_lang,
            "target": target_lang,
            "format": "text",
        }
        if self._settings.translate_api_key:
            payload["api_key"] = self._settings.translate_api_key

        attempts = self._settings.translate_retry_attempts
        backoff = self._settings.translate_retry_backoff_seconds
        attempt = 0
        while True:
            try:
                return await self._post(payload)
            except TranslationUnavailableError as exc:
                if attempt >= attempts:
                    raise
                wait_seconds = backoff * (attempt + 1)
                logger.warning(
                    "Translate attempt %s failed, retrying",
                    attempt + 1,
                    extra={"target_lang": target_lang, "retry_after_s": wait_seconds},
                    exc_info=exc,
                )
                if wait_seconds > 0:
                    await asyncio.sleep(wait_seconds)
            attempt += 1

    async def _post(self, payload: dict) -> TranslationResult:
        try:
            response = await self._http.post("/translate", json=payload)
        except httpx.HTTPError as exc:
            raise TranslationUnavailableError(
                f"Translation service unreachable: {exc}"
            ) from exc

        if response.status_code >= 500:
            raise TranslationUnavailableError(
                f"Translation service returned {response.status_code}"
            )
        if response.status_code != 200:
            # 400 unsupported language, 403 bad key, 429 quota exhausted
            raise TranslationError(
                f"Translation rejected with status {response.status_code}: "
                f"{_error_detail(response)}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise TranslationError("Translation service returned invalid JSON") from exc

        translated = body.get("translatedText") if isinstance(body, dict) else None
        if not isinstance(translated, str):
            raise TranslationError("Translation service response has no translatedText")
        return TranslationResult(text=translated)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return str(body)[:200]


@asynccontextmanager
async def async_translate_client(
    settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> AsyncIterator[LibreTranslateClient]:
    """Yield a translation client configured from settings and ensure cleanup."""

    http = httpx.AsyncClient(
        base_url=settings.translate_base_url,
        timeout=settings.translate_request_timeout,
        transport=transport,
    )
    try:
        yield LibreTranslateClient(settings, http)
    finally:
        await http.aclose()


__all__ = [
    "LibreTranslateClient",
    "TranslationClient",
    "TranslationError",
    "TranslationResult",
    "TranslationUnavailableError",
    "async_translate_client",
]
