"""Tool registry: the category -> name -> schema catalog behind the broker.

Categories are derived from tool-name prefixes and auto-created on first
sight, so tools from previously unknown vendors are absorbed without a code
change. Derived fields (tool counts, subcategory lists) are recomputed after
every write, inside the same lock as the write itself.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Iterable

from ..models.tool import (
    CATEGORY_PATTERN,
    TOOL_NAME_PATTERN,
    TOOL_NAME_PATTERN_TEXT,
    CategoryInfo,
    CategoryMetadata,
    SearchResult,
    ToolSchema,
    ToolSummary,
)
from .category_metadata import (
    CATEGORY_METADATA,
    GROUPED_VENDOR_PREFIXES,
    grouped_parent,
    resolve_category_metadata,
)

logger = logging.getLogger(__name__)

# Field priority for search scoring: a term counts once, for the first field it hits
SEARCH_FIELDS = ("name", "description", "schema", "category")

_SEPARATORS_RE = re.compile(r"[_-]+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(value: str | None) -> str:
    """Lowercase, turn separators into spaces, drop punctuation, collapse whitespace."""
    if not value:
        return ""
    text = value.lower()
    text = _SEPARATORS_RE.sub(" ", text)
    text = _NON_ALNUM_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def query_terms(query: str) -> list[str]:
    """Split a query into unique lowercase terms, keeping first-seen order."""
    return list(dict.fromkeys(query.strip().lower().split()))


class ToolRegistry:
    """In-memory catalog of vendor tools grouped by category."""

    def __init__(self, category_metadata: dict[str, CategoryMetadata] | None = None) -> None:
        self._tools_by_category: dict[str, dict[str, ToolSchema]] = {}
        self._categories: dict[str, CategoryInfo] = {}
        self._category_metadata = dict(CATEGORY_METADATA if category_metadata is None else category_metadata)
        self._lock = threading.RLock()

    # Name parsing

    @staticmethod
    def extract_category(tool_name: str) -> str | None:
        """Derive the category from a tool name, or None when it has none."""
        if not tool_name or "_" not in tool_name:
            return None

        grouped = grouped_parent(tool_name)
        if grouped is not None:
            return grouped[0]

        category = tool_name.split("_", 1)[0]
        if not CATEGORY_PATTERN.match(category):
            logger.warning(
                "Invalid category name extracted from tool '%s': '%s'", tool_name, category
            )
            return None
        return category

    @staticmethod
    def extract_subcategory(tool_name: str) -> str | None:
        """Product-line prefix of a grouped-vendor tool (e.g. gmail_send -> gmail)."""
        grouped = grouped_parent(tool_name)
        if grouped is None:
            return None
        return grouped[1][:-1]

    # Writes

    def ensure_category(self, category_name: str) -> CategoryInfo:
        """Create the category if missing; a no-op when it already exists."""
        with self._lock:
            existing = self._categories.get(category_name)
            if existing is not None:
                return existing

            resolved = resolve_category_metadata(category_name, self._category_metadata)
            info = CategoryInfo(
                name=category_name,
                display_name=resolved.metadata.display_name,
                description=resolved.metadata.description,
                tool_count=0,
                enabled=resolved.metadata.enabled,
            )
            self._categories[category_name] = info
            self._tools_by_category.setdefault(category_name, {})
            if resolved.source == "synthesized":
                logger.warning(
                    "Auto-created category '%s' with default metadata. "
                    "Consider adding it to CATEGORY_METADATA.",
                    category_name,
                )
            return info

    def register_tool(self, category: str, tool: ToolSchema) -> None:
        """Insert or overwrite a single tool; last write wins within a category."""
        with self._lock:
            self.ensure_category(category)
            self._tools_by_category[category][tool.name] = tool.model_copy(deep=True)
            self._refresh_category(category)

    def bulk_register_tools(self, tools: Iterable[ToolSchema]) -> int:
        """Register many tools, skipping those whose name yields no category.

        Returns the number of tools registered. Counts and subcategory lists
        are recomputed once every tool has been inserted.
        """
        registered = 0
        with self._lock:
            for tool in tools:
                category = self.extract_category(tool.name)
                if category is None:
                    logger.warning("Skipping tool '%s' - could not extract category", tool.name)
                    continue

                if not TOOL_NAME_PATTERN.match(tool.name):
                    logger.warning(
                        "Tool '%s' does not match %s; it will be reported by toolkit validation",
                        tool.name,
                        TOOL_NAME_PATTERN_TEXT,
                    )

                self.ensure_category(category)

                if category in GROUPED_VENDOR_PREFIXES and not tool.subcategory:
                    subcategory = self.extract_subcategory(tool.name)
                    if subcategory:
                        tool = tool.model_copy(update={"subcategory": subcategory})

                self._tools_by_category[category][tool.name] = tool.model_copy(deep=True)
                registered += 1

            for category_name in self._categories:
                self._refresh_category(category_name)

        logger.debug("Registered %d tools across %d categories", registered, len(self._categories))
        return registered

    def _refresh_category(self, category: str) -> None:
        info = self._categories[category]
        tools = self._tools_by_category.get(category, {})
        info.tool_count = len(tools)
        info.subcategories = self._collect_subcategories(tools.values())

    @staticmethod
    def _collect_subcategories(tools: Iterable[ToolSchema]) -> list[str]:
        return sorted({tool.subcategory for tool in tools if tool.subcategory})

    # Reads

    def get_categories(self) -> list[CategoryInfo]:
        with self._lock:
            return [info.model_copy(deep=True) for info in self._categories.values()]

    def get_category(self, name: str) -> CategoryInfo | None:
        with self._lock:
            info = self._categories.get(name)
            return info.model_copy(deep=True) if info is not None else None

    def has_category(self, name: str) -> bool:
        with self._lock:
            return name in self._categories

    def has_tool(self, category: str, tool_name: str) -> bool:
        with self._lock:
            return tool_name in self._tools_by_category.get(category, {})

    def category_names(self) -> list[str]:
        with self._lock:
            return list(self._categories)

    def list_tools_in_category(self, category: str) -> list[ToolSummary]:
        """Name/description pairs in registration order; empty for unknown categories."""
        with self._lock:
            tools = self._tools_by_category.get(category, {})
            return [ToolSummary(name=t.name, description=t.description) for t in tools.values()]

    def list_tools_in_subcategory(self, category: str, subcategory: str) -> list[ToolSummary]:
        with self._lock:
            tools = self._tools_by_category.get(category, {})
            return [
                ToolSummary(name=t.name, description=t.description)
                for t in tools.values()
                if t.subcategory == subcategory
            ]

    def get_subcategories(self, category: str) -> list[str]:
        with self._lock:
            return self._collect_subcategories(self._tools_by_category.get(category, {}).values())

    def get_tool_schema(self, category: str, tool_name: str) -> ToolSchema | None:
        """Exact lookup; None signals absence."""
        with self._lock:
            tool = self._tools_by_category.get(category, {}).get(tool_name)
            return tool.model_copy(deep=True) if tool is not None else None

    def get_tool_by_full_name(self, full_name: str) -> tuple[str, ToolSchema] | None:
        """Find a tool by its full name, deriving the category from the prefix."""
        category = self.extract_category(full_name)
        if category is None:
            return None
        tool = self.get_tool_schema(category, full_name)
        if tool is None:
            return None
        return category, tool

    def all_tools(self) -> list[ToolSchema]:
        with self._lock:
            return [
                t.model_copy(deep=True)
                for tools in self._tools_by_category.values()
                for t in tools.values()
            ]

    def get_total_tool_count(self) -> int:
        with self._lock:
            return sum(len(tools) for tools in self._tools_by_category.values())

    # Discovery

    def search_tools(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Keyword search across every category.

        Each query term adds one point for the first field it appears in,
        checked in SEARCH_FIELDS order. Results are ordered by score
        descending, then category and tool name ascending.
        """
        terms = query_terms(query)
        if not terms or limit <= 0:
            return []

        results: list[SearchResult] = []
        with self._lock:
            for category, tools in self._tools_by_category.items():
                for tool in tools.values():
                    haystacks = {
                        "name": normalize_text(tool.name),
                        "description": normalize_text(tool.description),
                        "schema": normalize_text(tool.schema_hints()),
                        "category": category,
                    }
                    score = 0
                    matched: list[str] = []
                    for term in terms:
                        for field in SEARCH_FIELDS:
                            text = haystacks[field]
                            if text and term in text:
                                score += 1
                                if field not in matched:
                                    matched.append(field)
                                break
                    if score > 0:
                        results.append(
                            SearchResult(category=category, tool=tool, score=score, matched=matched)
                        )

        results.sort(key=lambda r: (-r.score, r.category, r.tool.name))
        return [r.model_copy(update={"tool": r.tool.model_copy(deep=True)}) for r in results[:limit]]
