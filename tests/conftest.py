"""
Test configuration and shared fixtures for Toolkit Broker tests.

Vendor tools here mirror the shapes found in real catalogs (single-product
vendors, a grouped vendor with product-line prefixes) without depending on
the files under catalog/.
"""

from typing import Any, Dict, List
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from toolkit_broker.config import Settings
from toolkit_broker.main import create_app
from toolkit_broker.models.tool import ToolSchema
from toolkit_broker.services.broker import BrokerDispatcher
from toolkit_broker.services.registry import ToolRegistry


def make_tool(name: str, description: str, properties: Dict[str, Any] | None = None) -> ToolSchema:
    """Build a ToolSchema with an object input schema."""
    return ToolSchema(
        name=name,
        description=description,
        inputSchema={"type": "object", "properties": properties or {}},
    )


class FakeClock:
    """Manually advanced monotonic clock for rate limiter tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_tools() -> List[ToolSchema]:
    """Tools across three vendors, including grouped Google product lines"""
    return [
        make_tool("github_list_repos", "List repos", {"visibility": {"type": "string", "enum": ["all", "private"]}}),
        make_tool("github_get_repo", "Get a repo", {"owner": {"type": "string"}, "repo": {"type": "string"}}),
        make_tool("github_create_issue", "Create an issue", {"title": {"type": "string", "description": "Issue title"}}),
        make_tool("github_list_org_repos", "List organization repositories", {"org": {"type": "string"}}),
        make_tool("vercel_list_projects", "List Vercel projects"),
        make_tool("gmail_send_message", "Send an email message", {"to": {"type": "string"}}),
        make_tool("drive_list_files", "List files in Drive"),
        make_tool("calendar_list_events", "List upcoming events"),
    ]


@pytest.fixture
def registry() -> ToolRegistry:
    """Clean registry for each test"""
    return ToolRegistry()


@pytest.fixture
def populated_registry(registry, sample_tools) -> ToolRegistry:
    registry.bulk_register_tools(sample_tools)
    return registry


@pytest.fixture
def dispatcher(populated_registry) -> BrokerDispatcher:
    return BrokerDispatcher(populated_registry)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def github_executor() -> AsyncMock:
    """Executor standing in for the GitHub vendor module"""
    return AsyncMock(return_value={"repos": ["alpha", "beta"]})


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment and from the on-disk catalog"""
    return Settings(
        _env_file=None,
        catalog_path=str(tmp_path / "catalog"),
        api_secret_key=None,
        rate_limit_max_tokens=5,
        rate_limit_refill_rate=1.0,
        credential_env_vars=["GITHUB_TOKEN", "VERCEL_TOKEN"],
    )


@pytest.fixture
def app(settings, sample_tools, github_executor):
    return create_app(settings, tools=sample_tools, executors={"github": github_executor})


@pytest.fixture
def client(app):
    """FastAPI test client with the lifespan run"""
    with TestClient(app) as test_client:
        yield test_client
