"""Persistence layer for validated doc output and generated site artifacts.

Layout (under the modules directory)::

    <component_dir>/index.json    pruned doc records for one module

Artifacts such as the search index and the library descriptions are written
through :func:`save_json`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from . import config
from .doc_tree import prune_record
from .models import Finding, FindingKind, Severity
from .reporter import EnvironmentFailure, FindingReporter

logger = logging.getLogger(__name__)

UNKNOWN_TAG_PREFIX = "unknown tag "


def save_json(path: Path, payload: Any, indent: Optional[int] = None) -> None:
    """Write *payload* as JSON, creating parent directories.

    Raises:
        EnvironmentFailure: if the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=indent), encoding="utf-8")
    except OSError as exc:
        raise EnvironmentFailure(f"Unable to write {path}: {exc}") from exc


class DocStore:
    """Reads and writes one ``index.json`` per documented module."""

    def __init__(
        self,
        output_dir: Path,
        reporter: FindingReporter,
        allowed_error_tags: Iterable[str] = config.ALLOWED_ERROR_TAGS,
        keys_to_ignore: frozenset = config.KEYS_TO_IGNORE,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.reporter = reporter
        self.allowed_error_tags = frozenset(allowed_error_tags)
        self.keys_to_ignore = keys_to_ignore

    def module_path(self, component_dir: str) -> Path:
        return self.output_dir / component_dir / "index.json"

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def _report_parse_errors(self, errors: List[Any], source: str) -> None:
        for err in errors:
            message = err.get("message") if isinstance(err, dict) else None
            short = message.replace(UNKNOWN_TAG_PREFIX, "") if isinstance(message, str) else ""
            if not short:
                where = source
                text = f"Parse error: {err} in {source}"
            elif short not in self.allowed_error_tags:
                line = err.get("commentLineNumber")
                where = f"{source}:{line}" if line is not None else source
                text = f"Parse error: {message} in {where}"
            else:
                continue
            self.reporter.report(Finding(
                kind=FindingKind.PARSE_ERROR, severity=Severity.ERROR, message=text, location=where,
            ))

    def prune(self, docs: List[Dict[str, Any]], source: str = "") -> List[Any]:
        """Strip diagnostic keys from *docs*, reporting unexpected parse errors."""
        return prune_record(
            docs,
            self.keys_to_ignore,
            on_errors=lambda errors: self._report_parse_errors(errors, source),
        )

    async def save(self, component_dir: str, docs: List[Dict[str, Any]], source: str = "") -> Path:
        """Persist pruned *docs* for the module at *component_dir*.

        Pruning (and any parse-error findings) stays on the calling event loop;
        only the file write runs in a worker thread.

        Raises:
            EnvironmentFailure: if the output directory is not writable
        """
        path = self.module_path(component_dir)
        pruned = self.prune(docs, source)
        await asyncio.to_thread(save_json, path, pruned, 2)
        logger.debug("Saved %s", path)
        return path

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def iter_module_files(self) -> Iterator[Path]:
        if not self.output_dir.is_dir():
            raise EnvironmentFailure(
                f"Unable to find parsed documentation in {self.output_dir}"
            )
        yield from sorted(self.output_dir.rglob("*.json"))

    @staticmethod
    def load(path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))
