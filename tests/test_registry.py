"""Tests for the tool registry: category derivation, registration and search"""

import logging

import pytest
from pydantic import ValidationError

from toolkit_broker.models.tool import CategoryMetadata
from toolkit_broker.services.registry import ToolRegistry, normalize_text, query_terms

from .conftest import make_tool


class TestExtractCategory:
    """Category derivation from tool names"""

    @pytest.mark.parametrize(
        "tool_name, expected",
        [
            ("github_list_repos", "github"),
            ("stripe_customer_create", "stripe"),
            ("n8n_run_workflow", "n8n"),
            ("google_search", "google"),
            ("gmail_send_message", "google"),
            ("drive_list_files", "google"),
            ("licensing_list_assignments", "google"),
            ("acme_do_thing", "acme"),
        ],
    )
    def test_prefix_or_grouped_parent(self, tool_name, expected):
        assert ToolRegistry.extract_category(tool_name) == expected

    @pytest.mark.parametrize("tool_name", ["", "norepo", "bad name!", "listrepos"])
    def test_no_underscore_has_no_category(self, tool_name):
        assert ToolRegistry.extract_category(tool_name) is None

    def test_invalid_prefix_is_rejected_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert ToolRegistry.extract_category("GitHub_list_repos") is None
        assert "Invalid category name extracted" in caplog.text

    def test_subcategory_only_for_grouped_vendors(self):
        assert ToolRegistry.extract_subcategory("gmail_send_message") == "gmail"
        assert ToolRegistry.extract_subcategory("calendar_list_events") == "calendar"
        assert ToolRegistry.extract_subcategory("github_list_repos") is None


class TestRegistration:
    """Registration writes and derived fields"""

    def test_two_tools_one_category(self, registry):
        registry.bulk_register_tools([
            make_tool("github_list_repos", "List repos"),
            make_tool("github_get_repo", "Get a repo"),
        ])

        categories = registry.get_categories()
        assert [c.name for c in categories] == ["github"]
        assert categories[0].tool_count == 2
        assert categories[0].display_name == "GitHub"

    def test_underivable_name_is_skipped(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            registered = registry.bulk_register_tools([
                make_tool("bad name!", "Broken entry"),
                make_tool("github_list_repos", "List repos"),
            ])

        assert registered == 1
        assert registry.get_total_tool_count() == 1
        assert "could not extract category" in caplog.text

    def test_counts_match_tools_after_every_bulk_call(self, registry, sample_tools):
        registry.bulk_register_tools(sample_tools[:3])
        registry.bulk_register_tools(sample_tools[2:])
        # re-registering the same name overwrites
        registry.bulk_register_tools([make_tool("github_list_repos", "List repos again")])

        for info in registry.get_categories():
            assert info.tool_count == len(registry.list_tools_in_category(info.name))
        assert registry.get_total_tool_count() == len(sample_tools)
        assert registry.get_tool_schema("github", "github_list_repos").description == "List repos again"

    def test_ensure_category_is_idempotent(self, registry):
        first = registry.ensure_category("github").model_dump()
        second = registry.ensure_category("github").model_dump()

        assert first == second
        assert registry.category_names() == ["github"]

    def test_register_tool_updates_count(self, registry):
        registry.register_tool("vercel", make_tool("vercel_list_projects", "List projects"))
        registry.register_tool("vercel", make_tool("vercel_list_deployments", "List deployments"))

        assert registry.get_category("vercel").tool_count == 2

    def test_unknown_vendor_gets_synthesized_metadata(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            registry.bulk_register_tools([make_tool("acme_launch_rocket", "Launch a rocket")])

        info = registry.get_category("acme")
        assert info.display_name == "Acme"
        assert info.description == "Acme integration tools"
        assert info.enabled is True
        assert "Auto-created category 'acme'" in caplog.text

    def test_known_vendor_does_not_warn(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            registry.ensure_category("stripe")
        assert "Auto-created" not in caplog.text

    def test_custom_metadata_table(self):
        registry = ToolRegistry(category_metadata={
            "acme": CategoryMetadata(display_name="ACME Corp", description="Rockets", enabled=False),
        })
        info = registry.ensure_category("acme")

        assert info.display_name == "ACME Corp"
        assert info.enabled is False

    def test_noncanonical_name_registers_with_warning(self, registry, caplog):
        long_name = "github_" + "x" * 70
        with caplog.at_level(logging.WARNING):
            registry.bulk_register_tools([make_tool(long_name, "Too long")])

        assert registry.has_tool("github", long_name)
        assert "does not match" in caplog.text


class TestGroupedVendor:
    """Google Workspace tools grouped under one category"""

    def test_subcategories_attached(self, populated_registry):
        assert populated_registry.get_subcategories("google") == ["calendar", "drive", "gmail"]
        assert populated_registry.get_category("google").subcategories == ["calendar", "drive", "gmail"]
        assert populated_registry.get_tool_schema("google", "gmail_send_message").subcategory == "gmail"

    def test_single_vendor_has_no_subcategories(self, populated_registry):
        assert populated_registry.get_subcategories("github") == []

    def test_list_by_subcategory(self, populated_registry):
        tools = populated_registry.list_tools_in_subcategory("google", "drive")
        assert [t.name for t in tools] == ["drive_list_files"]

    def test_missing_subcategory_is_empty(self, populated_registry):
        assert populated_registry.list_tools_in_subcategory("google", "photos") == []

    def test_explicit_subcategory_is_kept(self, registry):
        tool = make_tool("gmail_send_message", "Send mail").model_copy(update={"subcategory": "mail"})
        registry.bulk_register_tools([tool])
        assert registry.get_subcategories("google") == ["mail"]


class TestReads:
    """Lookups and listing behavior"""

    def test_listing_unknown_category_is_empty(self, populated_registry):
        assert populated_registry.list_tools_in_category("nope") == []

    def test_missing_schema_is_none(self, populated_registry):
        assert populated_registry.get_tool_schema("github", "github_delete_everything") is None
        assert populated_registry.get_tool_schema("nope", "github_list_repos") is None

    def test_listing_keeps_registration_order(self, populated_registry):
        names = [t.name for t in populated_registry.list_tools_in_category("github")]
        assert names == ["github_list_repos", "github_get_repo", "github_create_issue", "github_list_org_repos"]

    def test_get_categories_returns_copies(self, populated_registry):
        populated_registry.get_categories()[0].tool_count = 999
        assert populated_registry.get_category("github").tool_count == 4

    def test_schema_reads_return_copies(self, populated_registry):
        schema = populated_registry.get_tool_schema("github", "github_get_repo")
        schema.inputSchema.properties["secret"] = {"type": "string"}
        populated_registry.all_tools()[0].inputSchema.properties["secret"] = {"type": "string"}
        hit = populated_registry.search_tools("repo")[0]
        hit.tool.inputSchema.properties["secret"] = {"type": "string"}

        stored = populated_registry.get_tool_schema("github", "github_get_repo")
        assert set(stored.inputSchema.properties) == {"owner", "repo"}
        assert populated_registry.search_tools("secret") == []

    def test_registered_tool_is_detached_from_caller(self, registry):
        properties = {"owner": {"type": "string"}}
        tool = make_tool("github_get_repo", "Get a repo", properties)
        registry.register_tool("github", tool)
        registry.bulk_register_tools([make_tool("github_list_repos", "List repos", properties)])

        properties["owner"]["type"] = "integer"
        tool.inputSchema.required.append("owner")

        for name in ("github_get_repo", "github_list_repos"):
            stored = registry.get_tool_schema("github", name)
            assert stored.inputSchema.properties["owner"] == {"type": "string"}
            assert stored.inputSchema.required == []

    def test_input_schema_is_frozen(self, populated_registry):
        schema = populated_registry.get_tool_schema("github", "github_get_repo")
        with pytest.raises(ValidationError):
            schema.inputSchema.type = "array"

    def test_get_tool_by_full_name(self, populated_registry):
        category, tool = populated_registry.get_tool_by_full_name("gmail_send_message")
        assert category == "google"
        assert tool.name == "gmail_send_message"
        assert populated_registry.get_tool_by_full_name("github_missing") is None
        assert populated_registry.get_tool_by_full_name("nounderscore") is None


class TestSearch:
    """Keyword scoring and ordering"""

    def test_term_counts_once(self, registry):
        registry.bulk_register_tools([make_tool("github_list_repos", "List repos")])

        results = registry.search_tools("list", 10)
        assert len(results) == 1
        assert results[0].score == 1
        assert results[0].matched == ["name"]

    def test_ties_break_by_name(self, registry):
        # registered in reverse name order
        registry.bulk_register_tools([
            make_tool("github_list_repos", "List repos"),
            make_tool("github_get_repo", "Get a repo"),
        ])

        results = registry.search_tools("repo", 10)
        assert [r.tool.name for r in results] == ["github_get_repo", "github_list_repos"]
        assert results[0].score == results[1].score == 1

    def test_ties_break_by_category_first(self, registry):
        registry.bulk_register_tools([
            make_tool("vercel_list_projects", "List projects"),
            make_tool("neon_list_projects", "List projects"),
        ])

        results = registry.search_tools("list projects", 10)
        assert [r.category for r in results] == ["neon", "vercel"]
        assert all(r.score == 2 for r in results)

    def test_higher_score_first(self, populated_registry):
        results = populated_registry.search_tools("list repositories", 10)
        assert results[0].tool.name == "github_list_org_repos"
        assert results[0].score == 2

    def test_schema_and_category_fields(self, populated_registry):
        schema_hit = populated_registry.search_tools("visibility", 10)
        assert [r.tool.name for r in schema_hit] == ["github_list_repos"]
        assert schema_hit[0].matched == ["schema"]

        category_hit = populated_registry.search_tools("google", 10)
        assert {r.tool.name for r in category_hit} == {
            "gmail_send_message", "drive_list_files", "calendar_list_events",
        }
        assert all(r.matched == ["category"] for r in category_hit)

    def test_repeated_terms_count_once(self, registry):
        registry.bulk_register_tools([make_tool("github_list_repos", "List repos")])
        assert registry.search_tools("list list LIST", 10)[0].score == 1

    def test_limit_and_empty_query(self, populated_registry):
        assert len(populated_registry.search_tools("list", 2)) == 2
        assert populated_registry.search_tools("   ", 10) == []
        assert populated_registry.search_tools("list", 0) == []
        assert populated_registry.search_tools("zzzz", 10) == []


def test_normalize_text():
    assert normalize_text("GitHub_list-repos (v2)!") == "github list repos v2"
    assert normalize_text(None) == ""


def test_query_terms_dedupe_in_order():
    assert query_terms("  Create REPO create ") == ["create", "repo"]
