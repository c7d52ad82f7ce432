"""Pytest configuration and fixtures for docindex tests."""

import io
import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator, List, Optional

import pytest
from rich.console import Console

from docindex_cli.parser import DocParser
from docindex_cli.registry import SymbolRegistry
from docindex_cli.reporter import FindingReporter


def make_context(file: str, line: int = 1) -> Dict[str, Any]:
    return {"file": file, "loc": {"start": {"line": line}}}


def make_member(
    name: str,
    memberof: str,
    tags: Optional[List[Dict[str, Any]]] = None,
    line: int = 10,
    file: str = "/work/raw/enact/lib/Widget/Widget.js",
    **extra: Any,
) -> Dict[str, Any]:
    member = {
        "name": name,
        "memberof": memberof,
        "kind": "function",
        "tags": tags or [],
        "context": make_context(file, line),
    }
    member.update(extra)
    return member


def make_record(
    name: str,
    members: Optional[List[Dict[str, Any]]] = None,
    path_name: Optional[str] = None,
    kind: str = "module",
    tags: Optional[List[Dict[str, Any]]] = None,
    description: Optional[Any] = None,
    file: str = "/work/raw/enact/lib/Widget/Widget.js",
) -> Dict[str, Any]:
    return {
        "name": name,
        "kind": kind,
        "path": [{"name": path_name or name, "kind": kind}],
        "description": description or {"type": "root", "children": []},
        "tags": tags or [],
        "members": {"static": members or [], "instance": []},
        "context": make_context(file, 1),
    }


def link_description(text: str, url: str) -> Dict[str, Any]:
    """A markdown AST description containing one link node."""
    return {
        "type": "root",
        "children": [{
            "type": "paragraph",
            "children": [
                {"type": "text", "value": text},
                {"type": "link", "url": url, "children": [{"type": "text", "value": url}]},
            ],
        }],
    }


class StaticParser(DocParser):
    """Returns canned records per directory name; exceptions are raised."""

    def __init__(self, records: Dict[str, Any]):
        self.records = records
        self.calls: List[Path] = []

    async def build(self, directory: Path) -> List[Dict[str, Any]]:
        self.calls.append(directory)
        result = self.records.get(directory.name, [])
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def registry() -> SymbolRegistry:
    return SymbolRegistry()


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), highlight=False, width=200)


@pytest.fixture
def reporter(quiet_console: Console) -> FindingReporter:
    return FindingReporter(strict=False, console=quiet_console)


@pytest.fixture
def strict_reporter(quiet_console: Console) -> FindingReporter:
    return FindingReporter(strict=True, console=quiet_console)


@pytest.fixture
def widget_record() -> Dict[str, Any]:
    """``lib/Widget`` with one static member and a valid @see link."""
    see = {"title": "see", "description": "{@link lib/Other}", "lineNumber": 4}
    return make_record(
        "lib/Widget",
        members=[make_member("render", "lib/Widget", tags=[see])],
        description=link_description("Renders a widget, see ", "lib/Other"),
    )


@pytest.fixture
def other_record() -> Dict[str, Any]:
    return make_record(
        "lib/Other",
        members=[make_member("value", "lib/Other", file="/work/raw/enact/lib/Other/Other.js")],
        file="/work/raw/enact/lib/Other/Other.js",
    )


@pytest.fixture
def packages_tree(temp_dir: Path, widget_record, other_record) -> Path:
    """A ``packages/lib/{Widget,Other}`` tree with pre-extracted ``docs.json``."""
    root = temp_dir / "packages" / "lib"
    for name, record in (("Widget", widget_record), ("Other", other_record)):
        module_dir = root / name
        module_dir.mkdir(parents=True)
        (module_dir / f"{name}.js").write_text(f"/**\n * @module lib/{name}\n */\n")
        (module_dir / "docs.json").write_text(json.dumps([record]))
    return temp_dir / "packages"
