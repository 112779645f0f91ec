"""Plain-text renderings of a stats envelope."""
from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, List

from stats_api.services.translator import JSONTranslator

logger = logging.getLogger(__name__)

_SKIPPED_KEYS = {"success", "rateLimit"}
_KEY_LABELS = {"accessType": "Access Type", "topCountries": "Top Countries"}


class ReportFormat(str, Enum):
    STRUCTURED = "structured"
    NATURAL = "natural"


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _label(key: str) -> str:
    if key in _KEY_LABELS:
        return _KEY_LABELS[key]
    return key[:1].upper() + key[1:]


def _list_lines(items: List[Any], indent_level: int) -> List[str]:
    indent = "  " * indent_level
    lines: List[str] = []
    for index, item in enumerate(items, start=1):
        if isinstance(item, (dict, list)):
            lines.append(f"{indent}- Item {index}:")
            lines.append(format_to_human_readable(item, indent_level + 1))
        else:
            lines.append(f"{indent}- {_scalar(item)}")
    return lines


def format_to_human_readable(data: Any, indent_level: int = 0) -> str:
    """Render ``data`` as indented ``Key: value`` lines."""

    indent = "  " * indent_level
    if isinstance(data, list):
        if not data:
            return f"{indent}No items"
        return "\n".join(_list_lines(data, indent_level))
    if not isinstance(data, dict):
        return f"{indent}{_scalar(data)}"

    lines: List[str] = []
    for key, value in data.items():
        if key in _SKIPPED_KEYS:
            continue
        label = _label(key)

        if key == "data":
            lines.append(f"{indent}### Data Analysis")
            lines.append(format_to_human_readable(value, indent_level + 1))
        elif isinstance(value, list):
            if not value:
                lines.append(f"{indent}{label}: No items")
            elif key == "topCountries":
                lines.append(f"{indent}{label}:")
                for index, country in enumerate(value, start=1):
                    if isinstance(country, dict):
                        lines.append(
                            f"{indent}  {index}. {_scalar(country.get('country'))}: "
                            f"{_scalar(country.get('users'))} users"
                        )
                    else:
                        lines.append(f"{indent}  {index}. {_scalar(country)}")
            else:
                lines.append(f"{indent}{label}:")
                lines.extend(_list_lines(value, indent_level + 1))
        elif isinstance(value, dict):
            lines.append(f"{indent}{label}:")
            lines.append(format_to_human_readable(value, indent_level + 1))
        else:
            lines.append(f"{indent}{label}: {_scalar(value)}")

    return "\n".join(lines)


def create_natural_language_report(data: Any) -> str:
    """Render a stats envelope as a short prose report."""

    if not isinstance(data, dict):
        return _scalar(data)

    sections: List[str] = []

    access_type = data.get("accessType")
    if access_type:
        sections.append(
            f"📊 Analytics Report: {str(access_type).replace('_', ' ', 1).upper()}"
        )
        sections.append("")

    if data.get("message"):
        sections.append(f"ℹ️  {data['message']}")
        sections.append("")

    payload = data.get("data")
    if isinstance(payload, dict) and payload:
        sections.append("### 📈 Data Insights")
        if payload.get("message"):
            sections.append(str(payload["message"]))
        if payload.get("average") is not None:
            sections.append(f"• Average: {_scalar(payload['average'])} users")
        if payload.get("users") is not None:
            sections.append(f"• Total Users: {_scalar(payload['users'])}")
        if payload.get("growth"):
            sections.append(f"• Growth: {payload['growth']}")
        if payload.get("period"):
            sections.append(f"• Period: {payload['period']}")
        if payload.get("date"):
            sections.append(f"• Date: {payload['date']}")
        if payload.get("activeSessions") is not None:
            sections.append(f"• Active Sessions: {_scalar(payload['activeSessions'])}")

        countries = payload.get("topCountries")
        if isinstance(countries, list) and countries:
            sections.append("")
            sections.append("### 🌍 Top Performing Countries")
            for index, country in enumerate(countries, start=1):
                if isinstance(country, dict):
                    sections.append(
                        f"{index}. {_scalar(country.get('country'))}: "
                        f"{_scalar(country.get('users'))} users"
                    )
        sections.append("")

    rate_limit = data.get("rateLimit")
    if isinstance(rate_limit, dict):
        sections.append("### ⚡ API Usage")
        sections.append(f"• Remaining Requests: {_scalar(rate_limit.get('remaining'))}")
        reset_time = rate_limit.get("resetTime")
        if reset_time:
            sections.append(f"• Reset Time: {_format_reset_time(reset_time)}")

    return "\n".join(sections)


def _format_reset_time(value: Any) -> str:
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return str(value)
    return parsed.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def render_report(data: Any, report_format: ReportFormat | str) -> str:
    if ReportFormat(report_format) is ReportFormat.STRUCTURED:
        return format_to_human_readable(data)
    return create_natural_language_report(data)


async def create_translated_report(
    translator: JSONTranslator,
    data: Any,
    target_lang: str = "en",
    report_format: ReportFormat | str = ReportFormat.NATURAL,
) -> str:
    """Translate ``data`` and render it; fall back to the untranslated data."""

    try:
        translated = await translator.translate_document(data, target_lang)
        return render_report(translated, report_format)
    except Exception:
        logger.exception(
            "Report creation failed, formatting original data",
            extra={"target_lang": target_lang, "format": str(report_format)},
        )
        return render_report(data, report_format)


__all__ = [
    "ReportFormat",
    "create_natural_language_report",
    "create_translated_report",
    "format_to_human_readable",
    "render_report",
]
