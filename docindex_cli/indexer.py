"""Search index projection for persisted module docs and markdown pages.

Every module record and page is flattened into a :class:`SearchDocument` and
handed to a lunr index. The index keeps derived fields only, so the ``id`` of
each document carries both the display title and the site path, separated by
``|``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from lunr.builder import Builder
from lunr.stop_word_filter import stop_word_filter
from lunr.trimmer import trimmer

from . import config
from .doc_tree import leaf_values, member_names, record_name, to_text
from .models import SearchDocument
from .reporter import EnvironmentFailure, FindingReporter
from .storage import DocStore

logger = logging.getLogger(__name__)

INDEX_FIELDS = ("title", "description", "members", "memberDescriptions")
MODULES_SITE_PATH = "docs/modules"


class ProjectionError(ValueError):
    """A record or page could not be turned into a search document."""


# ===================================================================
# Index capability
# ===================================================================

class SearchIndex:
    """Thin builder-style wrapper around a lunr index (no stemming).

    Mirrors the ``addField``/``setRef``/``saveDocument``/``addDoc``/``toJSON``
    surface the site's client-side search expects.
    """

    def __init__(self) -> None:
        self._builder = Builder()
        self._builder.pipeline.add(trimmer, stop_word_filter)
        self._lock = threading.Lock()
        self._fields: List[str] = []
        self._ref = "id"
        self.document_count = 0

    def add_field(self, name: str) -> None:
        self._builder.field(name)
        self._fields.append(name)

    def set_ref(self, ref: str) -> None:
        self._builder.ref(ref)
        self._ref = ref

    def save_document(self, save: bool) -> None:
        if save:
            raise ValueError("source documents are never stored in the search index")

    def add_doc(self, doc: Dict[str, Any]) -> None:
        payload = {self._ref: doc[self._ref]}
        for name in self._fields:
            payload[name] = doc.get(name) or ""
        with self._lock:
            self._builder.add(payload)
            self.document_count += 1

    def to_json(self) -> Dict[str, Any]:
        with self._lock:
            return self._builder.build().serialize()


def create_search_index(fields: Sequence[str] = INDEX_FIELDS) -> SearchIndex:
    index = SearchIndex()
    for name in fields:
        index.add_field(name)
    index.set_ref("id")
    index.save_document(False)
    return index


# ===================================================================
# Projection
# ===================================================================

def project_record(docs: Any) -> SearchDocument:
    """Flatten a module's doc record into search fields.

    A persisted module file holds a list of records; only the first is indexed.
    """
    doc = docs[0] if isinstance(docs, list) and docs else docs
    if not isinstance(doc, dict):
        raise ProjectionError("module file holds no doc record")
    title = record_name(doc)
    if not title:
        raise ProjectionError("doc record has no name")

    description = doc.get("description")
    if isinstance(description, str):
        description_text = description
    else:
        description_text = " ".join(to_text(v) for v in leaf_values(description))

    return SearchDocument(
        id=f"{title}|{MODULES_SITE_PATH}/{title}",
        title=title,
        description=description_text,
        members=" ".join(member_names(doc)),
        memberDescriptions=" ".join(to_text(v) for v in leaf_values(doc.get("members"))),
    )


def split_front_matter(contents: str) -> Tuple[Dict[str, Any], str]:
    """Split a ``---`` delimited YAML header from a markdown body."""
    if not contents.startswith("---"):
        return {}, contents
    end = contents.find("\n---", 3)
    if end == -1:
        return {}, contents
    header = contents[3:end]
    body = contents[end + 4:]
    body = body.split("\n", 1)[1] if "\n" in body else ""
    data = yaml.safe_load(header) or {}
    if not isinstance(data, dict):
        raise ProjectionError("front matter is not a mapping")
    return data, body


def project_page(path: Path, pages_root: Path) -> SearchDocument:
    """Turn a markdown page into a search document addressed by its site path."""
    data, body = split_front_matter(path.read_text(encoding="utf-8"))
    title = str(data.get("title") or path.stem)

    target = path.parent if path.stem == "index" else path.with_suffix("")
    relative = target.relative_to(pages_root).as_posix()
    if relative == ".":
        relative = ""

    return SearchDocument(id=f"{title}|{relative}", title=title, description=body)


# ===================================================================
# Index build
# ===================================================================

class IndexBuilder:
    """Builds the search index from persisted module docs and site pages."""

    def __init__(
        self,
        modules_dir: Path = config.MODULES_DIR,
        pages_dir: Path = config.PAGES_DIR,
        reporter: Optional[FindingReporter] = None,
    ) -> None:
        self.modules_dir = Path(modules_dir)
        self.pages_dir = Path(pages_dir)
        self.reporter = reporter or FindingReporter()
        self.store = DocStore(self.modules_dir, self.reporter)

    def _project_modules(self) -> List[SearchDocument]:
        documents = []
        for path in self.store.iter_module_files():
            try:
                documents.append(project_record(self.store.load(path)))
            except Exception as exc:
                self.reporter.item_failed(f"Error parsing {path}: {exc}")
        return documents

    def _project_pages(self) -> List[SearchDocument]:
        if not self.pages_dir.is_dir():
            raise EnvironmentFailure(f"Unable to find documentation pages in {self.pages_dir}")
        documents = []
        for path in sorted(self.pages_dir.rglob("*.md")):
            try:
                documents.append(project_page(path, self.pages_dir))
            except Exception as exc:
                self.reporter.item_failed(f"Error parsing {path}: {exc}")
        return documents

    async def build(self) -> SearchIndex:
        """Project both corpora concurrently, then index them in a stable order."""
        logger.info("Generating search index...")
        modules, pages = await asyncio.gather(
            asyncio.to_thread(self._project_modules),
            asyncio.to_thread(self._project_pages),
        )
        if not modules and not pages:
            raise EnvironmentFailure("Unable to find parsed documentation!")
        index = create_search_index()
        for document in [*modules, *pages]:
            index.add_doc(document.to_dict())
        logger.info("Indexed %d modules and %d pages", len(modules), len(pages))
        return index

    def build_sync(self) -> SearchIndex:
        return asyncio.run(self.build())
