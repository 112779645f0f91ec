"""Structure-preserving translation of JSON documents.

Every string leaf is sent to the translation client; containers keep their
shape, keys and order, and every other leaf passes through untouched. A
leaf whose translation fails keeps its original text, so one bad call never
costs the rest of the document.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from typing import Any, Dict, List, Union

from stats_api.services.translate_client import TranslationClient, TranslationError

logger = logging.getLogger(__name__)

JSONValue = Union[str, int, float, bool, None, List["JSONValue"], Dict[str, "JSONValue"]]


class JSONTranslator:
    """Translate the string leaves of a JSON value into a target language."""

    def __init__(self, client: TranslationClient, *, max_concurrency: int = 0) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    async def translate(self, value: Any, target_lang: str) -> JSONValue:
        """Return a copy of ``value`` with string leaves translated.

        Raises ``TypeError`` if ``value`` contains anything that is not JSON.
        Translation failures never propagate.
        """

        if isinstance(value, str):
            return await self._translate_leaf(value, target_lang)
        if value is None or isinstance(value, (bool, int, float)):
            return value
        if isinstance(value, list):
            return list(
                await asyncio.gather(
                    *(self.translate(item, target_lang) for item in value)
                )
            )
        if isinstance(value, dict):
            for key in value:
                if not isinstance(key, str):
                    raise TypeError(f"Object keys must be strings, got {type(key).__name__}")
            keys = list(value)
            results = await asyncio.gather(
                *(self.translate(value[key], target_lang) for key in keys)
            )
            return dict(zip(keys, results))
        raise TypeError(f"Value of type {type(value).__name__} is not JSON serializable")

    async def translate_text(self, text: str, target_lang: str) -> str:
        """Translate one string, falling back to the original on failure."""

        return await self._translate_leaf(text, target_lang)

    async def translate_document(self, data: Any, target_lang: str) -> JSONValue:
        """Translate ``data`` and return a detached, JSON round-trippable copy.

        If the walk itself fails (malformed input), a fallback envelope with
        the serialized original is returned instead of raising.
        """

        try:
            translated = await self.translate(data, target_lang)
            result = json.loads(json.dumps(translated, allow_nan=False))
        except Exception as exc:
            logger.exception(
                "Translation to %s failed",
                target_lang,
                extra={"target_lang": target_lang},
            )
            return {
                "error": "Translation failed",
                "message": str(exc),
                "fallbackData": _serialize_fallback(data),
            }

        logger.info(
            "Translation completed",
            extra={
                "original_keys": list(data) if isinstance(data, dict) else [],
                "target_lang": target_lang,
            },
        )
        return result

    async def _translate_leaf(self, text: str, target_lang: str) -> str:
        guard = self._semaphore or contextlib.nullcontext()
        try:
            async with guard:
                result = await self._client.translate(text, target_lang)
        except TranslationError as exc:
            logger.warning(
                "Translation failed for leaf, keeping original",
                extra={"target_lang": target_lang, "text_length": len(text)},
                exc_info=exc,
            )
            return text
        except Exception:
            logger.exception(
                "Unexpected error from translation client, keeping original",
                extra={"target_lang": target_lang, "text_length": len(text)},
            )
            return text

        translated = getattr(result, "text", None)
        if not isinstance(translated, str):
            logger.warning(
                "Translation client returned no text, keeping original",
                extra={"target_lang": target_lang},
            )
            return text
        return translated


def _serialize_fallback(data: Any) -> Any:
    try:
        return json.loads(json.dumps(data, default=str, allow_nan=False))
    except RecursionError:
        # str() of a value nested this deep recurses as well
        return f"<unserializable {type(data).__name__}>"
    except (TypeError, ValueError):
        return str(data)


__all__ = ["JSONTranslator", "JSONValue"]
