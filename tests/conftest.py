"""
Pytest configuration and fixtures.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import pytest

from slshooks.config import CONTEXT_ENV_VAR, Settings
from slshooks.core.engine import ExecutionOptions
from slshooks.models.host import HostState


class RecordingEngine:
    """Script engine double that records calls instead of spawning processes."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.calls: list[tuple[str, ExecutionOptions]] = []
        self.fail_with = fail_with

    async def run(self, pattern: str, options: ExecutionOptions) -> None:
        self.calls.append((pattern, options))
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def patterns(self) -> list[str]:
        return [pattern for pattern, _ in self.calls]


@pytest.fixture(autouse=True)
def _clean_context_env():
    """Keep SLS_CONTEXT from leaking between tests."""
    yield
    os.environ.pop(CONTEXT_ENV_VAR, None)


@pytest.fixture
def service_dir(tmp_path: Path) -> Path:
    """Create an empty service directory."""
    service = tmp_path / "service"
    service.mkdir()
    return service


@pytest.fixture
def write_scripts(service_dir: Path):
    """Write a package.json-style manifest into the service directory."""

    def _write(scripts: Any, name: str = "package.json") -> Path:
        manifest = service_dir / name
        manifest.write_text(json.dumps({"name": "test-service", "scripts": scripts}))
        return manifest

    return _write


@pytest.fixture
def host(service_dir: Path) -> HostState:
    """Host state for a service with no plugin configuration."""
    return HostState(
        service_path=service_dir,
        invocation_id="inv-1234",
        version="3.38.0",
        cli_commands=["deploy"],
        cli_options={"stage": "dev", "region": None},
        service={
            "service": "test-service",
            "provider": {"name": "aws", "runtime": "python3.12"},
            "functions": {"hello": {"handler": "handler.hello"}},
            "custom": {},
            "resources": None,
            "unrelated": "dropped",
        },
    )


@pytest.fixture
def engine() -> RecordingEngine:
    return RecordingEngine()


@pytest.fixture
def quiet_settings() -> Settings:
    return Settings(debug=False)
