"""Shared pytest fixtures for the gitlab-mr-client test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson
import pytest

from gitlab_mr.config import ClientSettings

pytest_plugins = ("respx",)

FIXTURES_DIR = Path(__file__).parent / "fixtures"
API_BASE = "https://gitlab.example.com/api/v4"


@pytest.fixture
def settings() -> ClientSettings:
    """Provide client settings with deterministic defaults for tests."""
    return ClientSettings.model_validate(
        {
            "gitlab_api_base": API_BASE,
            "gitlab_token": "token",  # pragma: allowlist secret
            "per_page": 2,
        },
    )


@pytest.fixture
def merge_request_payload() -> dict[str, Any]:
    """Load the merge request payload recorded from the GitLab API."""
    return orjson.loads((FIXTURES_DIR / "merge_request.json").read_bytes())
