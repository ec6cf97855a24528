# Toolkit broker API
# Catalog browsing, discovery and rate-limited tool execution

import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response

from ..config import Settings
from ..services.aliases import AliasResolver
from ..services.broker import BrokerDispatcher
from ..services.executors import check_response_size
from ..services.rate_limiter import TokenBucketRateLimiter
from ..services.registry import ToolRegistry
from .models import CallRequest, CallResponse, DiscoverRequest, ErrorResponse

router = APIRouter(prefix="/api/toolkit", tags=["toolkit"])
logger = logging.getLogger(__name__)

_error_responses: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse, "description": "Unknown category or tool"},
}


# Dependency injection: services live on app.state, built during lifespan
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> BrokerDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(status_code=503, detail="Broker not initialized")
    return dispatcher


def get_alias_resolver(request: Request) -> AliasResolver:
    return request.app.state.aliases


def get_rate_limiter(request: Request) -> TokenBucketRateLimiter:
    return request.app.state.rate_limiter


@router.get("/categories", operation_id="toolkit_list_categories")
async def list_categories(
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """List all integration categories with tool counts."""
    return dispatcher.list_categories()


@router.get(
    "/categories/{category}/tools",
    operation_id="toolkit_list_tools",
    responses=_error_responses,
)
async def list_tools(
    category: str,
    subcategory: str | None = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """List tool names and descriptions in a category, one page at a time."""
    return dispatcher.list_tools(category, subcategory=subcategory, limit=limit, offset=offset)


@router.get(
    "/categories/{category}/subcategories",
    operation_id="toolkit_list_subcategories",
    responses=_error_responses,
)
async def list_subcategories(
    category: str,
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """List the subcategories of a category (empty for single-product vendors)."""
    return dispatcher.list_subcategories(category)


@router.get(
    "/categories/{category}/tools/{tool_name}",
    operation_id="toolkit_get_tool_schema",
    responses=_error_responses,
)
async def get_tool_schema(
    category: str,
    tool_name: str,
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """Get the full input schema of one tool."""
    return dispatcher.get_tool_schema(category, tool_name)


@router.post("/discover", operation_id="toolkit_discover")
async def discover(
    request: DiscoverRequest,
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """Search the whole catalog by keyword."""
    return dispatcher.discover(request.query, limit=request.limit)


@router.post(
    "/call",
    response_model=CallResponse,
    operation_id="toolkit_call",
    responses={
        **_error_responses,
        403: {"description": "Missing or invalid API key"},
        429: {"description": "Rate limit exceeded"},
        501: {"model": ErrorResponse, "description": "No executor for the category"},
    },
)
async def call_tool(
    request: CallRequest,
    response: Response,
    x_api_key: str | None = Header(None),
    settings: Settings = Depends(get_settings),  # noqa: B008
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
    aliases: AliasResolver = Depends(get_alias_resolver),  # noqa: B008
    rate_limiter: TokenBucketRateLimiter = Depends(get_rate_limiter),  # noqa: B008
) -> CallResponse:
    """Execute a catalog tool by category and name (aliases accepted).

    Order of checks: API key, rate limit, alias resolution, catalog
    validation, execution, response size.
    """
    if settings.requires_api_key and x_api_key != settings.api_secret_key:
        raise HTTPException(status_code=403, detail="Forbidden: Invalid or missing API key")

    rate = rate_limiter.check(x_api_key)
    if not rate.allowed:
        raise HTTPException(status_code=429, detail="Rate limit exceeded", headers=rate.headers())
    response.headers.update(rate.headers())

    tool_name, arguments = aliases.resolve(request.tool_name, request.arguments)
    if aliases.is_alias(request.tool_name):
        logger.info(f"Resolved alias {request.tool_name} -> {tool_name}")

    category = request.category
    if not category:
        found = dispatcher.registry.get_tool_by_full_name(tool_name)
        category = found[0] if found else ToolRegistry.extract_category(tool_name)
    if not category:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot derive a category from tool name '{tool_name}'; pass category explicitly",
        )

    result = await dispatcher.call(category, tool_name, arguments)
    check_response_size(result, settings.max_response_bytes)
    return CallResponse(category=category, tool_name=tool_name, result=result)


@router.get("/health", operation_id="toolkit_health_check")
async def health_check(
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """Broker status, loaded categories and credential presence."""
    return dispatcher.health_check()


@router.post("/validate", operation_id="toolkit_validate")
async def validate_catalog(
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> dict[str, Any]:
    """Scan every registered tool for structural problems."""
    return dispatcher.validate()


@router.get("/meta-tools", operation_id="toolkit_meta_tools")
async def meta_tools(
    dispatcher: BrokerDispatcher = Depends(get_dispatcher),  # noqa: B008
) -> list[dict[str, Any]]:
    """Broker meta-tool definitions with live category enums."""
    return dispatcher.meta_tools()


@router.get("/aliases", operation_id="toolkit_list_aliases")
async def list_aliases(
    aliases: AliasResolver = Depends(get_alias_resolver),  # noqa: B008
) -> dict[str, Any]:
    """All aliases with their canonical targets and parameter transforms."""
    entries = aliases.describe()
    return {"aliases": entries, "total": len(entries)}


@router.get("/aliases/search", operation_id="toolkit_search_aliases")
async def search_aliases(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=100),
    aliases: AliasResolver = Depends(get_alias_resolver),  # noqa: B008
) -> dict[str, Any]:
    """Find aliases by intent, tags or description."""
    matches = aliases.search_by_intent(q, limit=limit)
    return {"query": q, "results": [m.model_dump() for m in matches], "total": len(matches)}


@router.get("/rate-limits", operation_id="toolkit_rate_limits")
async def rate_limit_stats(
    rate_limiter: TokenBucketRateLimiter = Depends(get_rate_limiter),  # noqa: B008
) -> dict[str, Any]:
    """Current bucket levels per caller (keys masked)."""
    return {"buckets": rate_limiter.stats(), "limit": rate_limiter.max_tokens}
