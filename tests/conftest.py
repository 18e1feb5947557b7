"""Pytest configuration and shared fixtures for hosting_tools tests."""

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import httpx
import pytest

from hosting_tools.core.config import AppConfig, HostingApiConfig


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def hosting_config() -> HostingApiConfig:
    """Hosting API config pointing at a fake origin."""
    return HostingApiConfig(
        origin="https://hosting.test",
        access_token="test-token",
    )


@pytest.fixture
def sample_channel_data() -> dict[str, Any]:
    """Channel resource as returned by the hosting API."""
    return {
        "name": "projects/my-project/sites/app/channels/pr-1",
        "url": "https://app--pr-1-abc123.web.app",
        "expireTime": "2026-10-25T12:00:00Z",
        "retainedReleaseCount": 10,
        "release": {
            "name": "projects/my-project/sites/app/channels/pr-1/releases/r1",
            "type": "DEPLOY",
            "version": {
                "name": "sites/app/versions/v1",
                "status": "FINALIZED",
            },
        },
    }


@pytest.fixture
def sample_version_data() -> dict[str, Any]:
    """Version resource as returned by the hosting API."""
    return {
        "name": "sites/app/versions/v2",
        "status": "CREATED",
        "config": {
            "rewrites": [{"glob": "**", "path": "/index.html"}],
            "cleanUrls": True,
        },
        "labels": {"deployment-tool": "hosting-tools"},
        "fileCount": "3",
        "versionBytes": "2048",
    }


Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it served."""

    def __init__(self, handler: Handler):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.content) if r.content else None for r in self.requests]


@pytest.fixture
def make_transport() -> Callable[[Handler], RecordingTransport]:
    """Factory for request-recording mock transports."""
    return RecordingTransport


# Pytest configuration
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    """Add the unit marker to every test not marked slow."""
    for item in items:
        if not any(marker.name == "slow" for marker in item.iter_markers()):
            item.add_marker(pytest.mark.unit)


# CLI Testing Fixtures


@pytest.fixture
def mock_console() -> Mock:
    """Create mock Rich console for CLI testing.

    Printed text is stripped of Rich markup and collected in
    ``printed_lines`` for assertions.
    """
    import re
    import sys

    console = Mock()

    status_cm = Mock()
    status_cm.__enter__ = Mock(return_value=status_cm)
    status_cm.__exit__ = Mock(return_value=None)
    console.status.return_value = status_cm

    console.printed_lines = []

    def track_print(text="", **kwargs):
        clean_text = re.sub(r'\[/?[^\]]*\]', '', str(text))
        console.printed_lines.append(clean_text)
        # Also print to actual stdout so Click can capture it
        print(clean_text, file=sys.stdout)

    console.print.side_effect = track_print
    return console


@pytest.fixture
def mock_config() -> AppConfig:
    """App config used by CLI commands under test."""
    config = AppConfig()
    config.hosting.access_token = "test-token"
    return config


@pytest.fixture
def mock_cli_context(mock_config: AppConfig, mock_console: Mock) -> Mock:
    """Create Click context mock following the CLI's ctx.obj layout."""
    ctx = Mock()
    ctx.obj = {
        "config": mock_config,
        "console": mock_console,
        "verbose": False,
        "debug": False
    }
    return ctx
