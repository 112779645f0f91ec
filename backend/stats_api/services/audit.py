"""Per-request audit trail stored as JSON lines.

Each served request appends one entry naming the caller (access type and
signature, when the request got that far), the route and the outcome.
"""
from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(slots=True)
class AuditEntry:
    request_id: str
    method: str
    path: str
    status_code: int
    duration_ms: float
    access_type: str | None = None
    signature: str | None = None
    client_ip: str | None = None
    extra: Dict[str, Any] = field(default_factory=dict)
    recorded_at: str = field(default_factory=_utcnow)


class AuditTrail:
    """Append-only JSONL sink shared by every request in the process."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    async def record(self, entry: AuditEntry) -> None:
        line = json.dumps(asdict(entry), ensure_ascii=False)
        async with self._lock:
            await asyncio.to_thread(self._write, line)

    def _write(self, line: str) -> None:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")


__all__ = ["AuditEntry", "AuditTrail"]
