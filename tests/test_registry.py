"""Tests for the cross-reference registry."""

import pytest

from docindex_cli.registry import RegistryFrozenError, SymbolRegistry


class TestSymbolRegistry:
    """Tests for SymbolRegistry accumulation and lookup."""

    def test_register_static_once(self, registry: SymbolRegistry):
        assert registry.register_static("lib/Widget.render") is True
        assert registry.register_static("lib/Widget.render") is False
        assert registry.all_statics == {"lib/Widget.render"}
        assert registry.has_static("lib/Widget.render")

    def test_register_module_records_library(self, registry: SymbolRegistry):
        registry.register_module("ui/Button")
        registry.register_module("ui/Icon")

        assert registry.has_module("ui/Button")
        assert registry.all_libraries == {"ui"}
        assert registry.has_library("ui")
        assert not registry.has_library("core")

    def test_references_keep_every_citation(self, registry: SymbolRegistry):
        registry.add_reference("ui/Base.Base", "extends", "Button", {"file": "a.js"})
        registry.add_reference("ui/Base.Base", "mixes", "Icon", None)

        citations = registry.references()["ui/Base.Base"]
        assert [c.kind for c in citations] == ["extends", "mixes"]
        assert [c.name for c in citations] == ["Button", "Icon"]

    def test_links_deduplicate_per_module(self, registry: SymbolRegistry):
        registry.add_link("ui/Button", "ui/Icon")
        registry.add_link("ui/Button", "ui/Icon")
        registry.add_link("ui/Button", "ui/Panel")

        assert registry.links() == {"ui/Button": ["ui/Icon", "ui/Panel"]}

    def test_insertion_order_is_irrelevant(self):
        first, second = SymbolRegistry(), SymbolRegistry()
        for name in ("a/One", "b/Two", "a/Three"):
            first.register_module(name)
        for name in ("a/Three", "a/One", "b/Two"):
            second.register_module(name)

        assert first.all_modules == second.all_modules
        assert first.all_libraries == second.all_libraries

    def test_frozen_registry_rejects_mutation(self, registry: SymbolRegistry):
        registry.register_module("ui/Button")
        registry.freeze()

        with pytest.raises(RegistryFrozenError):
            registry.register_module("ui/Icon")
        with pytest.raises(RegistryFrozenError):
            registry.add_link("ui/Icon", "ui/Button")
        assert registry.has_module("ui/Button")

    def test_independent_registries(self):
        first, second = SymbolRegistry(), SymbolRegistry()
        first.register_static("ui/Button.Button")

        assert not second.has_static("ui/Button.Button")

    def test_library_of(self):
        assert SymbolRegistry.library_of("ui/Button.Button") == "ui"
        assert SymbolRegistry.library_of("http://example.com") == "http:"

    def test_stats(self, registry: SymbolRegistry):
        registry.register_module("ui/Button")
        registry.register_static("ui/Button.Button")

        stats = registry.stats()
        assert stats["modules"] == 1
        assert stats["statics"] == 1
        assert stats["references"] == 0
