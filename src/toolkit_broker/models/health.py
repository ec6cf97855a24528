# Health report models
# Output of the catalog validator and the broker health check

from typing import Any

from pydantic import BaseModel, Field


class InvalidToolEntry(BaseModel):
    """A single structurally invalid catalog entry."""

    index: int
    name: Any = None
    reason: str


class HealthReport(BaseModel):
    """Counts and samples produced by scanning a flat tool array."""

    total: int
    valid: int
    invalid_count: int
    sample_invalid: list[InvalidToolEntry] = Field(default_factory=list)
    categories: dict[str, int] = Field(default_factory=dict)


class CategoryHealth(BaseModel):
    """Per-category status reported by the broker health check."""

    name: str
    enabled: bool
    tool_count: int = Field(..., serialization_alias="toolCount")


class BrokerHealth(BaseModel):
    """Broker status: categories, credential presence and totals."""

    status: str = "healthy"
    server: str
    version: str
    timestamp: str
    categories: list[CategoryHealth]
    environment: dict[str, bool]
    total_tools: int = Field(..., serialization_alias="totalTools")
