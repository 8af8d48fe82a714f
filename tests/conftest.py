"""Shared fixtures: canned Lens API payloads and a fixed clock."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from lens_profile.config import ProfileConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def load_fixture(name: str) -> dict[str, Any]:
    return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))


def fake_response(status: int = 200, payload: Any = None, *, text: str | None = None) -> MagicMock:
    """A stand-in for requests.Response carrying a JSON payload (or raw text)."""
    r = MagicMock(spec=requests.Response)
    r.status_code = status
    r.ok = 200 <= status < 400
    r.reason = "OK" if r.ok else "Error"
    if text is not None:
        r.text = text
        r.json.side_effect = ValueError("not json")
    else:
        r.text = json.dumps(payload)
        r.json.return_value = payload
    return r


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def posts_response() -> dict[str, Any]:
    return load_fixture("posts_response.json")


@pytest.fixture
def config() -> ProfileConfig:
    return ProfileConfig(
        lens_name="alice",
        namespace="0xNamespace",
        evm_address="0xAlice",
        api_url="https://api.example.com/graphql",
    )


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)
