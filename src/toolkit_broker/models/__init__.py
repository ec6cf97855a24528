# Domain models package
# Tool catalog, alias and health report contracts

from .alias import (
    AliasMatch,
    AliasMetadata,
    ChainTransform,
    CustomTransform,
    IdentityTransform,
    ParameterTransform,
    RenameKeyTransform,
    SetDefaultTransform,
)
from .health import BrokerHealth, CategoryHealth, HealthReport, InvalidToolEntry
from .tool import (
    CATEGORY_PATTERN,
    TOOL_NAME_PATTERN,
    TOOL_NAME_PATTERN_TEXT,
    CategoryInfo,
    CategoryMetadata,
    InputSchema,
    ResolvedCategoryMetadata,
    SearchResult,
    ToolSchema,
    ToolSummary,
)

__all__ = [
    "AliasMatch",
    "AliasMetadata",
    "BrokerHealth",
    "CATEGORY_PATTERN",
    "CategoryHealth",
    "CategoryInfo",
    "CategoryMetadata",
    "ChainTransform",
    "CustomTransform",
    "HealthReport",
    "IdentityTransform",
    "InputSchema",
    "InvalidToolEntry",
    "ParameterTransform",
    "RenameKeyTransform",
    "ResolvedCategoryMetadata",
    "SearchResult",
    "SetDefaultTransform",
    "TOOL_NAME_PATTERN",
    "TOOL_NAME_PATTERN_TEXT",
    "ToolSchema",
    "ToolSummary",
]
