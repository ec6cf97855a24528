"""Vendor execution seam.

The broker never talks to a vendor API itself. Each vendor integration
implements ``ToolExecutor`` and is registered per category; the
``ExecutorRegistry`` routes a tool call to the executor of the tool's
category.
"""

import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union, runtime_checkable

import httpx

from .errors import ExecutorMissingError, ResponseTooLargeError, ToolExecutionError
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

MAX_RESPONSE_SIZE = 100 * 1024

ExecuteToolFn = Callable[[str, Dict[str, Any]], Union[Awaitable[Any], Any]]


@runtime_checkable
class ToolExecutor(Protocol):
    """Executes tools of one vendor category."""

    async def execute(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        ...


async def invoke_executor(
    executor: Union[ToolExecutor, ExecuteToolFn],
    tool_name: str,
    arguments: Dict[str, Any],
) -> Any:
    """Call either a bare callable or an executor object, awaiting if needed."""
    if callable(executor):
        result = executor(tool_name, arguments)
    elif isinstance(executor, ToolExecutor):
        result = executor.execute(tool_name, arguments)
    else:
        raise TypeError(f"Not a tool executor: {type(executor).__name__}")
    if inspect.isawaitable(result):
        result = await result
    return result


class ExecutorRegistry:
    """Category -> executor mapping, callable as a single execute function."""

    def __init__(self) -> None:
        self._executors: Dict[str, Union[ToolExecutor, ExecuteToolFn]] = {}

    def register(self, category: str, executor: Union[ToolExecutor, ExecuteToolFn]) -> None:
        if category in self._executors:
            logger.info(f"Replacing executor for category {category}")
        self._executors[category] = executor

    def get(self, category: str) -> Optional[Union[ToolExecutor, ExecuteToolFn]]:
        return self._executors.get(category)

    def categories(self) -> list:
        return sorted(self._executors)

    def __contains__(self, category: str) -> bool:
        return category in self._executors

    async def execute(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        category = ToolRegistry.extract_category(tool_name)
        executor = self._executors.get(category) if category else None
        if executor is None:
            raise ExecutorMissingError(tool_name, category)
        return await invoke_executor(executor, tool_name, arguments)

    async def __call__(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        return await self.execute(tool_name, arguments)


class RemoteToolExecutor:
    """Forwards tool calls to an upstream executor service over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self.transport = transport

    async def execute(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        url = f"{self.base_url}/execute"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json={"tool": tool_name, "arguments": arguments},
                )
        except httpx.HTTPError as e:
            raise ToolExecutionError(
                f"Upstream request for {tool_name} failed: {e}",
                {"tool_name": tool_name, "url": url},
            ) from e

        if response.status_code >= 400:
            raise ToolExecutionError(
                f"Upstream executor error ({response.status_code}): {response.text}",
                {"tool_name": tool_name, "status_code": response.status_code},
            )

        body = response.json()
        if isinstance(body, dict) and "result" in body:
            return body["result"]
        return body


def check_response_size(data: Any, max_size: int = MAX_RESPONSE_SIZE) -> Any:
    """Return `data` unchanged unless its JSON form exceeds `max_size` bytes."""
    size = len(json.dumps(data, default=str).encode("utf-8"))
    if size > max_size:
        raise ResponseTooLargeError(size, max_size)
    return data
