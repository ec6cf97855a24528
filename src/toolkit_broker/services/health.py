"""Catalog health validation.

Scans a flat array of raw tool definitions and reports entries that the
registry would reject or silently drop, without raising on bad data.
"""

from typing import Any, Iterable, Mapping

from ..models.health import HealthReport, InvalidToolEntry
from ..models.tool import TOOL_NAME_PATTERN, TOOL_NAME_PATTERN_TEXT, ToolSchema

SAMPLE_INVALID_LIMIT = 20


def _tool_category(entry: Any) -> str:
    name = entry.get("name") if isinstance(entry, Mapping) else None
    if isinstance(name, str) and name:
        return name.split("_", 1)[0] or "unknown"
    return "unknown"


def _invalid_reason(entry: Any) -> str | None:
    if not isinstance(entry, Mapping):
        return "not an object"

    name = entry.get("name")
    if not name or not isinstance(name, str):
        return "missing or invalid name"

    if not TOOL_NAME_PATTERN.match(name):
        return f"name doesn't match {TOOL_NAME_PATTERN_TEXT}"

    input_schema = entry.get("inputSchema")
    # an empty schema object is still a schema
    if input_schema is None or not isinstance(input_schema, Mapping):
        return "missing or invalid inputSchema"

    description = entry.get("description")
    if not description or not isinstance(description, str):
        return "missing or invalid description"

    return None


def toolkit_health(tools: Iterable[Any]) -> HealthReport:
    """Classify each entry and tally entries per name prefix."""
    entries = [t.model_dump() if isinstance(t, ToolSchema) else t for t in tools]
    invalid: list[InvalidToolEntry] = []
    categories: dict[str, int] = {}

    for index, entry in enumerate(entries):
        category = _tool_category(entry)
        categories[category] = categories.get(category, 0) + 1

        reason = _invalid_reason(entry)
        if reason is not None:
            name = entry.get("name") if isinstance(entry, Mapping) else None
            invalid.append(InvalidToolEntry(index=index, name=name, reason=reason))

    return HealthReport(
        total=len(entries),
        valid=len(entries) - len(invalid),
        invalid_count=len(invalid),
        sample_invalid=invalid[:SAMPLE_INVALID_LIMIT],
        categories=categories,
    )
