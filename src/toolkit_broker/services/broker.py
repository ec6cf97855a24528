"""Broker dispatcher: catalog queries and validated execution handoff.

The dispatcher answers list/schema/discover queries against one registry
and hands validated calls to an execution callback supplied by the caller.
All validation happens before the callback is touched.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional, Union

from .. import __version__
from ..models.health import BrokerHealth, CategoryHealth
from ..models.tool import ToolSchema
from .broker_tools import generate_broker_tools
from .errors import (
    BrokerError,
    ExecutorMissingError,
    ToolExecutionError,
    ToolNotFoundError,
    UnknownCategoryError,
)
from .executors import ExecuteToolFn, ExecutorRegistry, ToolExecutor, invoke_executor
from .health import toolkit_health
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIAL_ENV_VARS = (
    "GITHUB_TOKEN",
    "VERCEL_TOKEN",
    "NEON_API_KEY",
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
    "GOOGLE_SERVICE_ACCOUNT_KEY",
    "GOOGLE_USER_EMAIL",
)


class BrokerDispatcher:
    """Facade over a ToolRegistry exposing the broker operations."""

    def __init__(
        self,
        registry: ToolRegistry,
        executors: Optional[ExecutorRegistry] = None,
        credential_env_vars: Iterable[str] = DEFAULT_CREDENTIAL_ENV_VARS,
        server_name: str = "toolkit-broker",
    ):
        self.registry = registry
        self.executors = executors
        self.credential_env_vars = tuple(credential_env_vars)
        self.server_name = server_name

    def _require_category(self, category: str) -> None:
        if not self.registry.has_category(category):
            raise UnknownCategoryError(category, self.registry.category_names())

    def _require_tool(self, category: str, tool_name: str) -> ToolSchema:
        self._require_category(category)
        tool = self.registry.get_tool_schema(category, tool_name)
        if tool is None:
            raise ToolNotFoundError(category, tool_name)
        return tool

    def list_categories(self) -> Dict[str, Any]:
        categories = self.registry.get_categories()
        return {
            "categories": [
                cat.model_dump(by_alias=True, exclude={"subcategories"}) for cat in categories
            ],
            "totalCategories": len(categories),
            "totalTools": self.registry.get_total_tool_count(),
        }

    def list_tools(
        self,
        category: str,
        subcategory: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """One page of a category's tools, optionally filtered by subcategory."""
        self._require_category(category)
        limit = max(0, limit)
        offset = max(0, offset)

        if subcategory:
            all_tools = self.registry.list_tools_in_subcategory(category, subcategory)
        else:
            all_tools = self.registry.list_tools_in_category(category)
        page = all_tools[offset:offset + limit]

        return {
            "category": category,
            "subcategory": subcategory or None,
            "tools": [t.model_dump() for t in page],
            "total": len(all_tools),
            "limit": limit,
            "offset": offset,
            "hasMore": offset + limit < len(all_tools),
        }

    def list_subcategories(self, category: str) -> Dict[str, Any]:
        self._require_category(category)
        subcategories = self.registry.get_subcategories(category)
        return {"category": category, "subcategories": subcategories, "total": len(subcategories)}

    def get_tool_schema(self, category: str, tool_name: str) -> Dict[str, Any]:
        tool = self._require_tool(category, tool_name)
        return {
            "category": category,
            "tool": tool.model_dump(include={"name", "description", "inputSchema"}),
        }

    def discover(self, query: str, limit: int = 10) -> Dict[str, Any]:
        results = self.registry.search_tools(query, limit)
        return {
            "query": query,
            "results": [
                {
                    "category": r.category,
                    "name": r.tool.name,
                    "description": r.tool.description,
                    "score": r.score,
                    "matched": r.matched,
                    "inputSchema": r.tool.inputSchema.model_dump(),
                }
                for r in results
            ],
            "total": len(results),
            "limit": limit,
        }

    async def call(
        self,
        category: str,
        tool_name: str,
        arguments: Optional[Dict[str, Any]] = None,
        execute_tool_fn: Optional[Union[ToolExecutor, ExecuteToolFn]] = None,
    ) -> Any:
        """Validate category and tool, then run the tool through the executor.

        Falls back to the dispatcher's ExecutorRegistry when no callback is
        given. The executor's result is returned verbatim.

        Raises:
            UnknownCategoryError: category is not registered
            ToolNotFoundError: tool is not in the category
            ExecutorMissingError: no executor is available
            ToolExecutionError: the executor raised
        """
        self._require_tool(category, tool_name)

        executor = execute_tool_fn
        if executor is None and self.executors is not None:
            executor = self.executors.get(category)
        if executor is None:
            raise ExecutorMissingError(tool_name, category)

        try:
            return await invoke_executor(executor, tool_name, dict(arguments or {}))
        except BrokerError:
            raise
        except Exception as e:
            logger.exception(f"Tool {tool_name} failed in category {category}")
            raise ToolExecutionError(
                f"Tool execution failed: {e}",
                {"category": category, "tool_name": tool_name, "error_type": type(e).__name__},
            ) from e

    def credential_status(self) -> Dict[str, bool]:
        """Presence of each credential variable; values are never read out."""
        return {name: bool(os.environ.get(name)) for name in self.credential_env_vars}

    def health_check(self) -> Dict[str, Any]:
        health = BrokerHealth(
            server=self.server_name,
            version=__version__,
            timestamp=datetime.now(timezone.utc).isoformat(),
            categories=[
                CategoryHealth(name=c.name, enabled=c.enabled, tool_count=c.tool_count)
                for c in self.registry.get_categories()
            ],
            environment=self.credential_status(),
            total_tools=self.registry.get_total_tool_count(),
        )
        return health.model_dump(by_alias=True)

    def validate(self) -> Dict[str, Any]:
        """Run the catalog health validator over every registered tool."""
        return toolkit_health(self.registry.all_tools()).model_dump()

    def meta_tools(self) -> list:
        return [
            t.model_dump(exclude_none=True)
            for t in generate_broker_tools(self.registry.category_names())
        ]
