# Test cases for main application endpoints
# Tests core FastAPI functionality, startup wiring and logging setup

import logging
from logging.handlers import RotatingFileHandler

import pytest
from fastapi.testclient import TestClient

from toolkit_broker.main import configure_logging, create_app
from toolkit_broker.services.executors import RemoteToolExecutor


def test_root_endpoint(client) -> None:
    """Test the root endpoint returns welcome message."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to Toolkit Broker"}


def test_health_endpoint(client) -> None:
    """Test the health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["message"] == "Service is running"


def test_mcp_is_mounted(app) -> None:
    assert any(getattr(route, "path", "").startswith("/mcp") for route in app.routes)


def test_startup_loads_catalog_from_disk(settings, tmp_path) -> None:
    catalog_dir = tmp_path / "catalog"
    catalog_dir.mkdir()
    (catalog_dir / "neon.yaml").write_text(
        "- name: neon_list_projects\n"
        "  description: List Neon projects\n"
        "  inputSchema: {type: object}\n"
        "- name: neon_broken\n"
    )
    app = create_app(settings.model_copy(update={"executor_base_urls": {"neon": "http://neon-exec:9000"}}))

    with TestClient(app) as client:
        data = client.get("/api/toolkit/categories").json()
        executor = app.state.executors.get("neon")

    # the entry without a description is skipped
    assert data["totalTools"] == 1
    assert data["categories"][0]["displayName"] == "Neon"
    assert isinstance(executor, RemoteToolExecutor)
    assert executor.base_url == "http://neon-exec:9000"


def test_startup_with_alias_file(settings, sample_tools, tmp_path) -> None:
    alias_file = tmp_path / "aliases.yaml"
    alias_file.write_text("aliases:\n  issues: create_issue\n")
    app = create_app(settings.model_copy(update={"aliases_path": str(alias_file)}), tools=sample_tools)

    with TestClient(app):
        resolver = app.state.aliases

    assert resolver.resolve_tool_name("issues") == "github_create_issue"


def test_startup_fails_on_broken_alias_file(settings, sample_tools, tmp_path) -> None:
    alias_file = tmp_path / "aliases.yaml"
    alias_file.write_text("aliases:\n  a: b\n  b: a\n")
    app = create_app(settings.model_copy(update={"aliases_path": str(alias_file)}), tools=sample_tools)

    with pytest.raises(Exception):
        with TestClient(app):
            pass


def test_rate_limiter_follows_settings(client) -> None:
    limiter = client.app.state.rate_limiter
    assert limiter.max_tokens == 5
    assert limiter.refill_rate == 1.0
    assert limiter.idle_ttl is None


def test_rate_limiter_idle_ttl_from_settings(settings, sample_tools) -> None:
    app = create_app(settings.model_copy(update={"rate_limit_idle_ttl": 600.0}), tools=sample_tools)

    with TestClient(app):
        assert app.state.rate_limiter.idle_ttl == 600.0


def test_startup_warns_about_categories_without_executor(app, caplog) -> None:
    with caplog.at_level(logging.INFO):
        with TestClient(app):
            pass

    assert "Executors configured for: ['github']" in caplog.text
    assert "No executor configured for categories: ['google', 'vercel']" in caplog.text


def test_configure_logging_file_handler(tmp_path) -> None:
    log_file = tmp_path / "logs" / "broker.log"
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        configure_logging("INFO", str(log_file))
        configure_logging("INFO", str(log_file))

        added = [h for h in root.handlers if h not in before]
        assert len(added) == 1
        assert isinstance(added[0], RotatingFileHandler)
        assert added[0].maxBytes == 2_000_000
        assert added[0].backupCount == 3

        logging.getLogger("toolkit_broker.test").warning("written to file")
        added[0].flush()
        assert "written to file" in log_file.read_text()
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
