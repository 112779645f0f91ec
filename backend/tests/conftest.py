from __future__ import annotations

from typing import Iterator

import pytest

from stats_api.deps import reset_rate_limiters
from stats_api.main import app


@pytest.fixture
def anyio_backend() -> str:
    """Force anyio-based tests to run with asyncio backend only."""

    return "asyncio"


@pytest.fixture(autouse=True)
def _isolate_app_state() -> Iterator[None]:
    reset_rate_limiters()
    yield
    app.dependency_overrides.clear()
    reset_rate_limiters()
