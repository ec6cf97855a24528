# Broker meta-tool definitions
# The eight tools that front the whole catalog, with live category enums

from typing import Any

from ..models.tool import InputSchema, ToolSchema

FALLBACK_CATEGORIES = ["github", "vercel", "neon", "upstash", "google", "openai"]


def _category_property(categories: list[str]) -> dict[str, Any]:
    return {
        "type": "string",
        "description": f"Category name. Available: {', '.join(categories)}",
        "enum": categories,
    }


def _tool_name_property() -> dict[str, Any]:
    return {
        "type": "string",
        "description": (
            'Full tool name (e.g., "github_create_repo", "vercel_list_projects", '
            '"gmail_send_message", "stripe_customer_create")'
        ),
    }


def generate_broker_tools(categories: list[str]) -> list[ToolSchema]:
    """Build the broker meta-tools for the given live category names."""
    category_enum = list(categories) or list(FALLBACK_CATEGORIES)
    category_list = ", ".join(category_enum)

    return [
        ToolSchema(
            name="toolkit_list_categories",
            description=(
                "List all available integration categories. Returns category names, "
                f"descriptions, and tool counts. Currently available: {category_list}"
            ),
            inputSchema=InputSchema(),
        ),
        ToolSchema(
            name="toolkit_list_tools",
            description=(
                "List all tools in a specific category without loading their full schemas. "
                "Returns tool names and descriptions only. Optionally filter by subcategory "
                '(e.g., "gmail", "drive" for Google Workspace).'
            ),
            inputSchema=InputSchema(
                properties={
                    "category": _category_property(category_enum),
                    "subcategory": {
                        "type": "string",
                        "description": 'Optional subcategory filter (e.g., "gmail", "drive", "calendar")',
                    },
                    "limit": {"type": "number", "description": "Maximum number of tools to return (default: 50)"},
                    "offset": {"type": "number", "description": "Offset for pagination (default: 0)"},
                },
                required=["category"],
            ),
        ),
        ToolSchema(
            name="toolkit_list_subcategories",
            description=(
                "List all subcategories within a category. Useful for discovering the "
                "structure of large categories like Google Workspace."
            ),
            inputSchema=InputSchema(
                properties={"category": _category_property(category_enum)},
                required=["category"],
            ),
        ),
        ToolSchema(
            name="toolkit_get_tool_schema",
            description=(
                "Get the full schema for a specific tool including input parameters and "
                "descriptions. Use this when you need to know what parameters a tool accepts."
            ),
            inputSchema=InputSchema(
                properties={
                    "category": _category_property(category_enum),
                    "tool_name": _tool_name_property(),
                },
                required=["category", "tool_name"],
            ),
        ),
        ToolSchema(
            name="toolkit_discover",
            description=(
                "Search for tools by keyword across all categories. Returns matching tools "
                "with their categories and descriptions."
            ),
            inputSchema=InputSchema(
                properties={
                    "query": {
                        "type": "string",
                        "description": 'Search query (e.g., "create repo", "deploy", "database")',
                    },
                    "limit": {"type": "number", "description": "Maximum number of results (default: 10)"},
                },
                required=["query"],
            ),
        ),
        ToolSchema(
            name="toolkit_call",
            description=(
                "Execute any tool from any category server-side without loading its "
                "definition into context. Provide the category, tool name, and arguments."
            ),
            inputSchema=InputSchema(
                properties={
                    "category": _category_property(category_enum),
                    "tool_name": _tool_name_property(),
                    "arguments": {"type": "object", "description": "Tool arguments as key-value pairs"},
                },
                required=["category", "tool_name", "arguments"],
            ),
        ),
        ToolSchema(
            name="toolkit_health_check",
            description=(
                "Check broker health and available integrations. Returns server status, "
                "loaded categories, and environment variable status."
            ),
            inputSchema=InputSchema(),
        ),
        ToolSchema(
            name="toolkit_validate",
            description=(
                "Validate all tools in the registry and surface invalid entries. Returns total "
                "count, invalid count, and a sample of invalid tools with reasons."
            ),
            inputSchema=InputSchema(),
        ),
    ]
