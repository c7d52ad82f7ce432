"""Tests for search index projection and building."""

import json
from pathlib import Path

import pytest
from conftest import link_description, make_member, make_record

from docindex_cli.indexer import (
    IndexBuilder,
    ProjectionError,
    create_search_index,
    project_page,
    project_record,
    split_front_matter,
)
from docindex_cli.reporter import EXIT_ITEM_FAILURE, EnvironmentFailure


@pytest.fixture
def documented_record():
    render = make_member(
        "render", "lib/Widget",
        description={"type": "root", "children": [{"type": "text", "value": "Draws it."}]},
    )
    render["members"] = {"static": [{"name": "nested", "members": {}}], "instance": []}
    flag = make_member("enabled", "lib/Widget", type={"type": "BooleanLiteralType", "value": False})
    return make_record(
        "lib/Widget",
        members=[render, flag],
        description=link_description("A widget", "lib/Other"),
    )


class TestProjectRecord:
    """Doc record to search document projection."""

    def test_fields(self, documented_record):
        doc = project_record([documented_record])

        assert doc.id == "lib/Widget|docs/modules/lib/Widget"
        assert doc.title == "lib/Widget"
        assert doc.description == "A widget lib/Other"
        assert doc.members == "render enabled nested"
        assert doc.memberDescriptions == "Draws it. false"

    def test_projection_is_idempotent(self, documented_record):
        first = json.dumps(project_record([documented_record]).to_dict())
        second = json.dumps(project_record([documented_record]).to_dict())

        assert first == second

    def test_plain_string_description(self):
        doc = project_record(make_record("lib/Plain", description="Just text"))

        assert doc.description == "Just text"

    def test_record_without_name_fails(self):
        with pytest.raises(ProjectionError):
            project_record([{"description": "nameless"}])
        with pytest.raises(ProjectionError):
            project_record([])


class TestProjectPage:
    """Markdown page to search document projection."""

    def test_front_matter_title(self, temp_dir: Path):
        page = temp_dir / "docs" / "guide.md"
        page.parent.mkdir(parents=True)
        page.write_text("---\ntitle: Getting Started\n---\nInstall the thing.\n")

        doc = project_page(page, temp_dir)

        assert doc.id == "Getting Started|docs/guide"
        assert doc.description == "Install the thing.\n"

    def test_index_page_uses_directory(self, temp_dir: Path):
        page = temp_dir / "docs" / "tutorials" / "index.md"
        page.parent.mkdir(parents=True)
        page.write_text("No front matter here.")

        doc = project_page(page, temp_dir)

        assert doc.title == "index"
        assert doc.id == "index|docs/tutorials"
        assert doc.description == "No front matter here."

    def test_root_index_page(self, temp_dir: Path):
        page = temp_dir / "index.md"
        page.write_text("---\ntitle: Home\n---\nWelcome")

        assert project_page(page, temp_dir).id == "Home|"

    def test_split_front_matter_rejects_scalars(self):
        with pytest.raises(ProjectionError):
            split_front_matter("---\njust a string\n---\nbody")


class TestSearchIndex:
    """The lunr-backed index capability."""

    def test_documents_are_not_stored(self):
        index = create_search_index()
        with pytest.raises(ValueError):
            index.save_document(True)

    def test_add_doc_fills_missing_fields(self):
        index = create_search_index()
        index.add_doc({"id": "Home|", "title": "Home", "description": "welcome aboard"})

        payload = index.to_json()

        assert index.document_count == 1
        assert payload["fields"] == ["title", "description", "members", "memberDescriptions"]
        assert "welcome" in json.dumps(payload["invertedIndex"])


class TestIndexBuilder:
    """Building the index from persisted modules and pages."""

    def _site(self, temp_dir: Path, documented_record) -> Path:
        pages = temp_dir / "pages"
        modules = pages / "docs" / "modules"
        (modules / "lib" / "Widget").mkdir(parents=True)
        (modules / "lib" / "Widget" / "index.json").write_text(json.dumps([documented_record]))
        (modules / "lib" / "Broken").mkdir(parents=True)
        (modules / "lib" / "Broken" / "index.json").write_text("{not json")
        (modules / "lib" / "Nameless").mkdir(parents=True)
        (modules / "lib" / "Nameless" / "index.json").write_text("[{}]")
        (pages / "index.md").write_text("---\ntitle: Home\n---\nWelcome")
        (pages / "docs" / "guide.md").write_text("---\ntitle: Guide\n---\nRead me")
        return pages

    def test_build_skips_failing_items(self, temp_dir: Path, reporter, documented_record):
        pages = self._site(temp_dir, documented_record)
        builder = IndexBuilder(pages / "docs" / "modules", pages, reporter)

        index = builder.build_sync()

        assert index.document_count == 3
        assert len(reporter.failures) == 2
        assert any("has no name" in failure for failure in reporter.failures)
        assert reporter.findings == []
        assert reporter.exit_code == EXIT_ITEM_FAILURE
        refs = json.dumps(index.to_json())
        assert "lib/Widget|docs/modules/lib/Widget" in refs
        assert "Guide|docs/guide" in refs

    def test_missing_modules_dir_is_fatal(self, temp_dir: Path, reporter):
        (temp_dir / "pages").mkdir()
        builder = IndexBuilder(temp_dir / "missing", temp_dir / "pages", reporter)

        with pytest.raises(EnvironmentFailure):
            builder.build_sync()


def test_empty_corpus_is_fatal(temp_dir: Path, reporter):
    (temp_dir / "pages" / "docs" / "modules").mkdir(parents=True)
    builder = IndexBuilder(temp_dir / "pages" / "docs" / "modules", temp_dir / "pages", reporter)

    with pytest.raises(EnvironmentFailure):
        builder.build_sync()
