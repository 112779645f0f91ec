"""Tests for static API key resolution."""
from __future__ import annotations

from pathlib import Path

import pytest

from stats_api.security import AccessGate, AccessType, extract_token

from stubs import COUNTRY_KEY, DAILY_KEY, MONTHLY_KEY, make_settings


@pytest.fixture(name="gate")
def gate_fixture(tmp_path: Path) -> AccessGate:
    return AccessGate.from_settings(make_settings(tmp_path))


def test_registered_keys_resolve_to_access_types(gate: AccessGate) -> None:
    assert gate.resolve(MONTHLY_KEY) is AccessType.MONTHLY
    assert gate.resolve(DAILY_KEY) is AccessType.DAILY
    assert gate.resolve(COUNTRY_KEY) is AccessType.COUNTRY_AVG


@pytest.mark.parametrize(
    "credential",
    ["", None, "garbage", MONTHLY_KEY.upper(), f" {MONTHLY_KEY}", MONTHLY_KEY[:-1]],
)
def test_unknown_credentials_are_unauthorized(gate: AccessGate, credential: str | None) -> None:
    assert gate.resolve(credential) is None


def test_unset_keys_never_match_empty_credential(tmp_path: Path) -> None:
    gate = AccessGate.from_settings(
        make_settings(tmp_path, api_key_monthly="", api_key_daily=None)
    )
    assert gate.configured_types == [AccessType.COUNTRY_AVG]
    assert gate.resolve("") is None
    assert gate.resolve(COUNTRY_KEY) is AccessType.COUNTRY_AVG


def test_duplicate_keys_resolve_to_first_entry() -> None:
    gate = AccessGate([(AccessType.DAILY, "same"), (AccessType.MONTHLY, "same")])
    assert gate.resolve("same") is AccessType.DAILY


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("abc", "abc"),
        ("Bearer abc", "abc"),
        ("  Bearer abc  ", "abc"),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_token(header: str | None, expected: str | None) -> None:
    assert extract_token(header) == expected
