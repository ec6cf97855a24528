"""Error taxonomy for the toolkit broker.

Lookup failures, wiring failures and execution failures each get their own
error code so the HTTP layer can translate them without string matching.
"""

from typing import Any, Dict, Iterable, Optional


class BrokerError(Exception):
    """Base exception class for broker errors."""
    status_code = 500

    def __init__(self, message: str, error_code: str = "BROKER_ERROR", details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error_code, "message": self.message, "details": self.details}


class UnknownCategoryError(BrokerError):
    """Category is not present in the registry."""
    status_code = 404

    def __init__(self, category: str, available: Iterable[str]):
        available = sorted(available)
        message = f"Unknown category: {category}. Available categories: {', '.join(available) or '(none)'}"
        super().__init__(message, "UNKNOWN_CATEGORY", {"category": category, "available": available})


class ToolNotFoundError(BrokerError):
    """Tool is not registered in the given category."""
    status_code = 404

    def __init__(self, category: str, tool_name: str):
        message = f"Tool not found: {tool_name} in category {category}"
        super().__init__(message, "TOOL_NOT_FOUND", {"category": category, "tool_name": tool_name})


class ExecutorMissingError(BrokerError):
    """No execution callback is wired for the requested tool."""
    status_code = 501

    def __init__(self, tool_name: str, category: Optional[str] = None):
        where = f" (category {category})" if category else ""
        message = f"No executor configured for tool {tool_name}{where}"
        super().__init__(message, "EXECUTOR_MISSING", {"tool_name": tool_name, "category": category})


class ToolExecutionError(BrokerError):
    """Exception for tool execution errors."""
    status_code = 502

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "TOOL_EXEC_ERROR", details)


class ResponseTooLargeError(BrokerError):
    """Executor result is larger than the configured response cap."""
    status_code = 413

    def __init__(self, size: int, max_size: int):
        message = (
            f"Response too large: {size / 1024:.2f}KB (max: {max_size / 1024:.2f}KB). "
            "Use pagination parameters to reduce response size."
        )
        super().__init__(message, "RESPONSE_TOO_LARGE", {"size": size, "max_size": max_size})


class AliasConfigurationError(BrokerError):
    """Alias table is inconsistent (cycle or malformed entry)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "ALIAS_CONFIG_ERROR", details)


class CatalogLoadError(BrokerError):
    """Exception for unreadable or malformed catalog files."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CATALOG_ERROR", details)
