# FastAPI application entry point
# Defines the app factory, lifespan wiring and core routes

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_mcp import FastApiMCP
from pydantic import BaseModel

from . import __version__
from .api import toolkit
from .config import Settings, get_config
from .models.tool import ToolSchema
from .services.aliases import AliasResolver
from .services.broker import BrokerDispatcher
from .services.catalog import coerce_tools, load_catalog
from .services.errors import BrokerError
from .services.executors import ExecutorRegistry, RemoteToolExecutor
from .services.health import toolkit_health
from .services.rate_limiter import TokenBucketRateLimiter
from .services.registry import ToolRegistry

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Console logging, plus a rotating file when `log_file` is set."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    if not log_file:
        return
    root = logging.getLogger()
    log_path = Path(log_file).resolve()
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == log_path:
            return
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3)
    except OSError as e:
        logger.warning(f"File logging disabled, cannot open {log_path}: {e}")
        return
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


def build_executors(settings: Settings) -> ExecutorRegistry:
    """One RemoteToolExecutor per configured category base URL."""
    executors = ExecutorRegistry()
    for category, base_url in settings.executor_base_urls.items():
        executors.register(category, RemoteToolExecutor(base_url, timeout=settings.executor_timeout))
        logger.info(f"Registered remote executor for {category}: {base_url}")
    return executors


def _load_tools(settings: Settings) -> list[ToolSchema]:
    raw_tools = load_catalog(settings.catalog_path)
    report = toolkit_health(raw_tools)
    if report.invalid_count:
        logger.warning(
            f"Catalog has {report.invalid_count} invalid entries out of {report.total}; "
            f"first: {[e.reason for e in report.sample_invalid[:3]]}"
        )
    return coerce_tools(raw_tools)


def create_app(
    settings: Settings | None = None,
    tools: Iterable[ToolSchema] | None = None,
    executors: ExecutorRegistry | Mapping[str, Any] | None = None,
) -> FastAPI:
    """Build the broker application.

    `tools` replaces the on-disk catalog and `executors` replaces the
    executors built from settings; both exist so tests can wire an app
    without touching disk or network.
    """
    settings = settings or get_config()
    configure_logging(settings.log_level, settings.log_file)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle"""
        logger.info("Starting Toolkit Broker...")
        try:
            catalog = list(tools) if tools is not None else _load_tools(settings)

            registry = ToolRegistry()
            registered = registry.bulk_register_tools(catalog)
            logger.info(
                f"Registered {registered} tools across {len(registry.category_names())} categories"
            )

            if isinstance(executors, ExecutorRegistry):
                executor_registry = executors
            elif executors is not None:
                executor_registry = ExecutorRegistry()
                for category, executor in executors.items():
                    executor_registry.register(category, executor)
            else:
                executor_registry = build_executors(settings)
            logger.info(f"Executors configured for: {executor_registry.categories()}")
            unrouted = [c for c in registry.category_names() if c not in executor_registry]
            if unrouted:
                logger.warning(f"No executor configured for categories: {sorted(unrouted)}")

            if settings.aliases_path:
                aliases = AliasResolver.from_file(settings.aliases_path)
            else:
                aliases = AliasResolver()
            logger.info(f"Loaded {len(aliases.get_all_aliases())} tool aliases")

            rate_limiter = TokenBucketRateLimiter(
                max_tokens=settings.rate_limit_max_tokens,
                refill_rate=settings.rate_limit_refill_rate,
                cost_per_request=settings.rate_limit_cost_per_request,
                idle_ttl=settings.rate_limit_idle_ttl,
            )

            app.state.settings = settings
            app.state.registry = registry
            app.state.executors = executor_registry
            app.state.aliases = aliases
            app.state.rate_limiter = rate_limiter
            app.state.dispatcher = BrokerDispatcher(
                registry,
                executors=executor_registry,
                credential_env_vars=settings.credential_env_vars,
            )
        except Exception as e:
            logger.error(f"Startup failed: {e}")
            raise

        logger.info("Toolkit Broker ready")
        yield

        logger.info("Shutting down Toolkit Broker...")
        app.state.rate_limiter.reset()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Toolkit Broker",
        description="Category-based tool catalog and dispatch broker",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.exception_handler(BrokerError)
    async def broker_error_handler(request: Request, exc: BrokerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(toolkit.router)

    @app.get("/", operation_id="root")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Welcome to Toolkit Broker"}

    @app.get("/health", response_model=HealthResponse, operation_id="health")
    async def health() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy", message="Service is running")

    # Mount MCP after all routes exist; only the broker meta-tools are exposed
    mcp_server = FastApiMCP(
        app,
        name="toolkit-broker",
        description=(
            "Browse vendor tool categories, discover tools by keyword and "
            "call them through a single rate-limited entry point."
        ),
        include_operations=[
            "toolkit_list_categories",
            "toolkit_list_tools",
            "toolkit_list_subcategories",
            "toolkit_get_tool_schema",
            "toolkit_discover",
            "toolkit_call",
            "toolkit_health_check",
            "toolkit_validate",
        ],
    )
    mcp_server.mount()

    return app


app = create_app()
