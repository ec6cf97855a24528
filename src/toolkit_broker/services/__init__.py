# Services package
# Contains the catalog registry, broker dispatch, aliasing and rate limiting

from .aliases import AliasResolver
from .broker import BrokerDispatcher
from .executors import ExecutorRegistry, RemoteToolExecutor, ToolExecutor
from .health import toolkit_health
from .rate_limiter import TokenBucketRateLimiter
from .registry import ToolRegistry

__all__ = [
    "AliasResolver",
    "BrokerDispatcher",
    "ExecutorRegistry",
    "RemoteToolExecutor",
    "ToolExecutor",
    "TokenBucketRateLimiter",
    "ToolRegistry",
    "toolkit_health",
]
