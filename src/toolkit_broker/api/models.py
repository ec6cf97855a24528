# API request/response models
# Pydantic models for toolkit endpoint data validation

from typing import Any

from pydantic import BaseModel, Field, field_validator


class DiscoverRequest(BaseModel):
    """Request model for keyword tool discovery."""

    query: str = Field(..., min_length=1, description="Keywords describing the task")
    limit: int = Field(10, ge=1, le=100, description="Maximum tools to return")

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Ensure query is not empty."""
        if not v.strip():
            raise ValueError("Query cannot be empty")
        return v


class CallRequest(BaseModel):
    """Request model for broker tool execution."""

    category: str | None = Field(
        None, description="Category; derived from the canonical tool name when omitted"
    )
    tool_name: str = Field(..., min_length=1, description="Tool name or alias")
    arguments: dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class CallResponse(BaseModel):
    """Response model for broker tool execution."""

    category: str
    tool_name: str
    result: Any


class ErrorResponse(BaseModel):
    """Error body returned for broker failures."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
