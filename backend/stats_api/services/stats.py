"""Request workflow for the stats endpoint."""
from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Callable, Dict

from stats_api.core.config import Settings
from stats_api.security import (
    AccessGate,
    AccessType,
    InvalidCredentialError,
    MissingCredentialError,
    MissingIdentityError,
    extract_token,
)
from stats_api.services.fixtures import get_stats_payload
from stats_api.services.rate_limit import (
    RateLimitDecision,
    RateLimitExceededError,
    RateLimiter,
)
from stats_api.services.translate_client import TranslationClient, async_translate_client
from stats_api.services.translator import JSONTranslator

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], AbstractAsyncContextManager[TranslationClient]]

SUCCESS_MESSAGE = "Authorization successful"


@dataclass(slots=True)
class StatsResult:
    access_type: AccessType
    data: Any
    decision: RateLimitDecision

    def to_envelope(self) -> Dict[str, Any]:
        return {
            "success": True,
            "message": SUCCESS_MESSAGE,
            "accessType": self.access_type.value,
            "data": self.data,
            "rateLimit": {
                "remaining": self.decision.remaining,
                "resetTime": self.decision.reset_time_iso(),
            },
        }


class StatsService:
    """Gate, rate-limit, fetch and translate one stats request."""

    def __init__(
        self,
        settings: Settings,
        *,
        limiter: RateLimiter,
        gate: AccessGate,
        client_factory: ClientFactory = async_translate_client,
    ) -> None:
        self._settings = settings
        self._limiter = limiter
        self._gate = gate
        self._client_factory = client_factory

    def authorize(
        self, *, authorization: str | None, signature: str | None
    ) -> tuple[AccessType, str, RateLimitDecision]:
        """Check headers, spend a rate-limit slot and resolve the API key."""

        token = extract_token(authorization)
        if token is None:
            raise MissingCredentialError()
        identity = (signature or "").strip()
        if not identity:
            raise MissingIdentityError()

        decision = self._limiter.check(identity)
        if not decision.allowed:
            logger.info(
                "Rate limit exceeded",
                extra={"signature": identity, "reset_time": decision.reset_time_iso()},
            )
            raise RateLimitExceededError(decision)

        # the slot taken above is kept even when the key is rejected
        access_type = self._gate.resolve(token)
        if access_type is None:
            logger.warning(
                "Invalid API key presented",
                extra={
                    "signature": identity,
                    "configured_types": [t.value for t in self._gate.configured_types],
                },
            )
            raise InvalidCredentialError()
        return access_type, identity, decision

    async def handle(
        self,
        *,
        authorization: str | None,
        signature: str | None,
        target_lang: str | None = None,
    ) -> StatsResult:
        access_type, identity, decision = self.authorize(
            authorization=authorization, signature=signature
        )

        lang = target_lang or self._settings.default_target_lang
        data: Any = get_stats_payload(access_type)
        if self._settings.translation_enabled:
            data = await self.translate(data, lang)

        logger.info(
            "Stats served",
            extra={
                "access_type": access_type.value,
                "signature": identity,
                "target_lang": lang,
                "remaining": decision.remaining,
            },
        )
        return StatsResult(access_type=access_type, data=data, decision=decision)

    async def translate(self, data: Any, target_lang: str) -> Any:
        async with self._client_factory(self._settings) as client:
            translator = JSONTranslator(
                client, max_concurrency=self._settings.translate_max_concurrency
            )
            return await translator.translate_document(data, target_lang)


__all__ = ["StatsResult", "StatsService"]
