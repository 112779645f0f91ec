"""Static API key gate.

Each registered key grants one access type. Keys are compared by plain
string equality and are kept in memory as configured.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from fastapi import status

from stats_api.core.config import Settings


class AccessType(str, Enum):
    MONTHLY = "monthly"
    DAILY = "daily"
    COUNTRY_AVG = "country_avg"


class AccessDeniedError(Exception):
    """Base class for requests rejected before any data is served."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unauthorized"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class MissingCredentialError(AccessDeniedError):
    message = "Authorization header required"


class MissingIdentityError(AccessDeniedError):
    message = "User signature header required"


class InvalidCredentialError(AccessDeniedError):
    message = "Invalid API key"


def extract_token(header: str | None) -> str | None:
    """Return the raw token from ``<token>`` or ``Bearer <token>``."""

    if header is None:
        return None
    value = header.strip()
    if value == "Bearer" or value.startswith("Bearer "):
        value = value[len("Bearer"):].strip()
    return value or None


class AccessGate:
    """Resolve a presented credential to the access type it grants."""

    def __init__(self, table: Iterable[tuple[AccessType, Optional[str]]]) -> None:
        # unset or empty keys are "not configured" and never match
        self._table: list[tuple[AccessType, str]] = [
            (access_type, key) for access_type, key in table if key
        ]

    @classmethod
    def from_settings(cls, settings: Settings) -> "AccessGate":
        return cls(
            [
                (AccessType.MONTHLY, settings.api_key_monthly),
                (AccessType.DAILY, settings.api_key_daily),
                (AccessType.COUNTRY_AVG, settings.api_key_country_avg),
            ]
        )

    @property
    def configured_types(self) -> list[AccessType]:
        return [access_type for access_type, _ in self._table]

    def resolve(self, credential: str | None) -> AccessType | None:
        """Return the matching access type, or ``None`` when unauthorized."""

        if not credential:
            return None
        for access_type, key in self._table:
            if credential == key:
                return access_type
        return None


__all__ = [
    "AccessDeniedError",
    "AccessGate",
    "AccessType",
    "InvalidCredentialError",
    "MissingCredentialError",
    "MissingIdentityError",
    "extract_token",
]
