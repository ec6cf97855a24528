# Test cases for domain models and category metadata
# Tests validation rules and serialized field names

import pytest
from pydantic import ValidationError

from toolkit_broker.models import CategoryInfo, ToolSchema
from toolkit_broker.services.category_metadata import (
    grouped_parent,
    resolve_category_metadata,
    synthesize_default_metadata,
)


def test_tool_schema_defaults() -> None:
    tool = ToolSchema(name="github_list_repos", description="List repos")

    assert tool.inputSchema.type == "object"
    assert tool.inputSchema.properties == {}
    assert tool.subcategory is None


def test_tool_schema_rejects_blank_description() -> None:
    with pytest.raises(ValidationError):
        ToolSchema(name="github_x", description="  ")


def test_tool_schema_is_frozen() -> None:
    tool = ToolSchema(name="github_x", description="d")
    with pytest.raises(ValidationError):
        tool.name = "github_y"


def test_input_schema_keeps_extra_keys() -> None:
    tool = ToolSchema.model_validate({
        "name": "github_x",
        "description": "d",
        "inputSchema": {"type": "object", "additionalProperties": False},
    })
    assert tool.inputSchema.model_dump()["additionalProperties"] is False


def test_schema_hints() -> None:
    tool = ToolSchema(
        name="github_list_repos",
        description="d",
        inputSchema={
            "properties": {
                "sort": {"type": "string", "description": "Sort field", "enum": ["created", "pushed"]},
                "page": "not a dict",
            }
        },
    )
    hints = tool.schema_hints()

    assert "sort Sort field created pushed" in hints
    assert "page" in hints


def test_category_info_serializes_camel_case() -> None:
    info = CategoryInfo(name="github", display_name="GitHub", description="d", tool_count=3)
    assert info.model_dump(by_alias=True)["displayName"] == "GitHub"
    assert info.model_dump(by_alias=True)["toolCount"] == 3


def test_resolve_metadata_source() -> None:
    assert resolve_category_metadata("stripe").source == "predefined"

    resolved = resolve_category_metadata("acme")
    assert resolved.source == "synthesized"
    assert resolved.metadata == synthesize_default_metadata("acme")


def test_grouped_parent() -> None:
    assert grouped_parent("sheets_append_row") == ("google", "sheets_")
    assert grouped_parent("github_list_repos") is None
