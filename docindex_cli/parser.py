"""Doc-record parser capability and discovery of documented source directories.

Turning doc comments into a doc-record tree is delegated to an external parser
(documentation.js by default). This module only defines the capability the
ingestion pipeline awaits and the helpers that decide which directories to hand
to it.
"""

from __future__ import annotations

import asyncio
import fnmatch
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from . import config

logger = logging.getLogger(__name__)

MODULE_MARKER = "@module"


class ParseFailure(RuntimeError):
    """The external parser could not produce doc records for a directory."""


# ===================================================================
# Parser capability
# ===================================================================

class DocParser(ABC):
    """Abstract base class for doc-record producers."""

    @abstractmethod
    async def build(self, directory: Path) -> List[Dict[str, Any]]:
        """Return the top-level doc records for every documented file in *directory*."""
        ...


class DocumentationJsParser(DocParser):
    """Runs the documentation.js CLI in shallow mode and reads its JSON output."""

    def __init__(self, command: Optional[Sequence[str]] = None) -> None:
        self.command = list(command or config.PARSER_COMMAND)

    async def build(self, directory: Path) -> List[Dict[str, Any]]:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.command, str(directory),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ParseFailure(f"cannot run {self.command[0]}: {exc}") from exc

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise ParseFailure(message or f"{self.command[0]} exited with {process.returncode}")
        return _decode_records(stdout.decode("utf-8"), directory)


class JsonFileParser(DocParser):
    """Reads records that were extracted ahead of time into ``<directory>/<filename>``."""

    def __init__(self, filename: str = "docs.json") -> None:
        self.filename = filename

    async def build(self, directory: Path) -> List[Dict[str, Any]]:
        path = directory / self.filename
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise ParseFailure(f"cannot read {path}: {exc}") from exc
        return _decode_records(text, directory)


def _decode_records(text: str, directory: Path) -> List[Dict[str, Any]]:
    try:
        payload = json.loads(text) if text.strip() else []
    except json.JSONDecodeError as exc:
        raise ParseFailure(f"invalid parser output for {directory}: {exc}") from exc
    if not isinstance(payload, list):
        raise ParseFailure(f"parser output for {directory} is not a list of records")
    return [record for record in payload if isinstance(record, dict)]


# ===================================================================
# Discovery
# ===================================================================

def discover_module_files(
    root: Path,
    pattern: str = config.DEFAULT_PATTERN,
    skip_dirs: Iterable[str] = config.SKIP_DIRS,
) -> List[Path]:
    """Find files under *root* matching *pattern* that declare ``@module``."""
    skip = set(skip_dirs)
    matches: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip and not d.startswith("."))
        for filename in sorted(filenames):
            if not fnmatch.fnmatch(filename, pattern):
                continue
            path = Path(dirpath) / filename
            try:
                text = path.read_text(encoding="utf-8", errors="ignore")
            except OSError as exc:
                logger.warning("Skipping unreadable file %s: %s", path, exc)
                continue
            if MODULE_MARKER in text:
                matches.append(path)
    return matches


def module_directories(files: Iterable[Path]) -> List[Path]:
    """Directories to parse; every documented file's parent is parsed once."""
    return sorted({Path(f).parent for f in files})


def component_directory(directory: Path) -> str:
    """Derive the expected module name from a directory's location.

    ``.../packages/ui/Button`` -> ``ui/Button``; ``.../raw/core/util`` -> ``core/util``;
    anything else keeps its last two segments. A trailing ``src`` is dropped.
    """
    posix = Path(directory).as_posix()
    component = ""
    for marker in ("packages/", "raw/"):
        if marker in posix:
            component = posix.split(marker)[1]
            if component:
                break
    if not component:
        component = "/".join(posix.split("/")[-2:])

    parts = component.split("/")
    if len(parts) > 1 and parts[-1] == "src":
        component = "/".join(parts[:-1])
    return component
