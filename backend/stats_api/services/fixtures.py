"""Canned analytics payloads served per access type."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from stats_api.security import AccessType


def get_stats_payload(access_type: AccessType | str) -> Dict[str, Any]:
    """Return a fresh payload for ``access_type``."""

    kind = access_type.value if isinstance(access_type, AccessType) else access_type
    if kind == AccessType.MONTHLY.value:
        return {
            "message": "Monthly user data",
            "users": 1500,
            "growth": "+12% from last month",
            "period": "January 2024",
        }
    if kind == AccessType.DAILY.value:
        return {
            "message": "Daily user data",
            "users": 50,
            "activeSessions": 127,
            "date": datetime.now(timezone.utc).date().isoformat(),
        }
    if kind == AccessType.COUNTRY_AVG.value:
        return {
            "message": "Average users per country",
            "average": 75,
            "topCountries": [
                {"country": "United States", "users": 320},
                {"country": "Brazil", "users": 285},
                {"country": "Philippines", "users": 198},
            ],
        }
    return {"message": "Unknown data type"}


__all__ = ["get_stats_payload"]
