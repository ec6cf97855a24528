# Tool domain models
# Core models for tool catalog entries, categories and search results

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Canonical whole-name rule shared by the registry and the health validator
TOOL_NAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")
TOOL_NAME_PATTERN_TEXT = "^[A-Za-z0-9._-]{1,64}$"

# Category names are the lowercase alphanumeric prefix of a tool name
CATEGORY_PATTERN = re.compile(r"^[a-z0-9]+$")


class InputSchema(BaseModel):
    """JSON-Schema-like description of the arguments a tool accepts."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ToolSchema(BaseModel):
    """One invocable operation contributed by a vendor module."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Globally unique tool name")
    description: str = Field(..., min_length=1, description="Human-readable description")
    inputSchema: InputSchema = Field(  # noqa: N815
        default_factory=InputSchema, description="Accepted arguments"
    )
    subcategory: str | None = Field(
        default=None, description="Product line within a grouped vendor"
    )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Ensure description is not blank."""
        if not v.strip():
            raise ValueError("Tool description cannot be empty")
        return v

    def schema_hints(self) -> str:
        """Property names, property descriptions and enum values as one string."""
        parts: list[str] = []
        for key, prop in self.inputSchema.properties.items():
            desc = ""
            enum_values = ""
            if isinstance(prop, dict):
                if isinstance(prop.get("description"), str):
                    desc = prop["description"]
                if isinstance(prop.get("enum"), list):
                    enum_values = " ".join(str(v) for v in prop["enum"])
            parts.append(f"{key} {desc} {enum_values}")
        return " ".join(parts)


class ToolSummary(BaseModel):
    """Name/description projection used by listings (schema withheld)."""

    name: str
    description: str


class CategoryMetadata(BaseModel):
    """Human-facing metadata for a vendor namespace."""

    display_name: str = Field(..., serialization_alias="displayName")
    description: str
    enabled: bool = True


class ResolvedCategoryMetadata(BaseModel):
    """Category metadata tagged with where it came from."""

    metadata: CategoryMetadata
    source: Literal["predefined", "synthesized"]


class CategoryInfo(BaseModel):
    """A vendor/integration namespace and its derived fields."""

    name: str
    display_name: str = Field(..., serialization_alias="displayName")
    description: str
    tool_count: int = Field(0, ge=0, serialization_alias="toolCount")
    enabled: bool = True
    subcategories: list[str] = Field(default_factory=list)


class SearchResult(BaseModel):
    """A discovery hit with its relevance score."""

    category: str
    tool: ToolSchema
    score: int = Field(..., gt=0)
    matched: list[str] = Field(
        default_factory=list, description="Fields that matched at least one term"
    )
