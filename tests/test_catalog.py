"""
Tests for the widget catalog: indexes, entries and template loading
"""

import pytest

from noodleseed_mcp.catalog import (
    WIDGET_MIME_TYPE,
    BusinessTypeArguments,
    Catalog,
    CatalogEntry,
    default_entries,
    load_default_catalog,
    widget_files
)
from noodleseed_mcp.catalog.widgets import FALLBACK_MARKUP
from noodleseed_mcp.core import CatalogError, ToolOutput


def make_entry(entry_id: str, uri: str) -> CatalogEntry:
    return CatalogEntry(
        id=entry_id,
        uri=uri,
        title=entry_id.title(),
        invoking_label="Working...",
        invoked_label="Done",
        response_text=f"{entry_id} response",
        arguments_model=BusinessTypeArguments,
        response_builder=lambda args: ToolOutput(),
    )


class TestCatalogIndexes:
    """Test id and uri lookups"""

    def test_lookup_by_id_and_uri_return_same_entry(self, catalog):
        for entry in catalog.list():
            assert catalog.get_by_id(entry.id) is entry
            assert catalog.get_by_uri(entry.uri) is entry

    def test_missing_lookups_return_none(self, catalog):
        assert catalog.get_by_id("nonexistent") is None
        assert catalog.get_by_uri("ui://widget/nonexistent.html") is None

    def test_list_preserves_order(self):
        entries = [make_entry("alpha", "ui://widget/a.html"), make_entry("beta", "ui://widget/b.html")]
        catalog = Catalog(entries)

        assert [entry.id for entry in catalog.list()] == ["alpha", "beta"]
        assert len(catalog) == 2
        assert "alpha" in catalog
        assert "gamma" not in catalog

    def test_list_is_a_copy(self, catalog):
        listed = catalog.list()
        listed.clear()

        assert len(catalog) == len(default_entries())

    def test_duplicate_id_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate catalog id"):
            Catalog([make_entry("alpha", "ui://widget/a.html"), make_entry("alpha", "ui://widget/b.html")])

    def test_duplicate_uri_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate catalog uri"):
            Catalog([make_entry("alpha", "ui://widget/a.html"), make_entry("beta", "ui://widget/a.html")])


class TestDefaultEntries:
    """Test the built-in NoodleSeed widgets"""

    def test_expected_widgets_present(self, catalog):
        ids = {entry.id for entry in catalog}

        assert ids == {
            "get-started",
            "noodle-seed-platform",
            "noodle-seed-list",
            "noodle-seed-carousel",
            "search",
        }

    def test_presentation_metadata_references_uri(self, catalog):
        entry = catalog.get_by_id("get-started")
        meta = entry.presentation_metadata()

        assert meta["openai/outputTemplate"] == "ui://widget/get-started.html"
        assert meta["openai/toolInvocation/invoking"] == entry.invoking_label
        assert meta["openai/toolInvocation/invoked"] == entry.invoked_label
        assert meta["openai/widgetAccessible"] is True
        assert meta["openai/resultCanProduceWidget"] is True

    def test_widget_mime_type(self, catalog):
        assert all(entry.mime_type == WIDGET_MIME_TYPE for entry in catalog)

    def test_input_schema_requires_business_type(self, catalog):
        schema = catalog.get_by_id("noodle-seed-list").input_schema()

        assert schema["type"] == "object"
        assert "business_type" in schema["properties"]
        assert schema["required"] == ["business_type"]

    def test_placeholder_markup_without_build(self, catalog):
        assert catalog.get_by_id("search").payload == FALLBACK_MARKUP


class TestTemplateLoading:
    """Test reading built widget templates from disk"""

    @pytest.mark.asyncio
    async def test_loads_built_templates(self, tmp_path):
        (tmp_path / "get-started.html").write_text("<div>onboarding</div>", encoding="utf-8")

        catalog = await load_default_catalog(str(tmp_path))

        assert catalog.get_by_id("get-started").payload == "<div>onboarding</div>"
        assert catalog.get_by_id("noodle-seed-list").payload == FALLBACK_MARKUP

    @pytest.mark.asyncio
    async def test_missing_assets_dir_uses_placeholders(self, tmp_path):
        catalog = await load_default_catalog(str(tmp_path / "does-not-exist"))

        assert len(catalog) == len(widget_files())
        assert all(entry.payload == FALLBACK_MARKUP for entry in catalog)
