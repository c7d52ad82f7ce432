"""Ingestion pipeline: parse, validate, and persist directories, then resolve.

Directories are parsed concurrently (bounded by a semaphore). The registry is
the only shared state; its mutations happen between awaits, so each one is
atomic with respect to the other ingestion tasks. Resolution starts only after
every ingestion task has finished.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from . import config
from .models import Finding
from .parser import DocParser, component_directory
from .registry import SymbolRegistry
from .reporter import EnvironmentFailure, FindingReporter
from .resolver import ReferenceResolver
from .storage import DocStore
from .validator import DocValidator

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Coordinates the external parser, validator, store, and resolver."""

    def __init__(
        self,
        parser: DocParser,
        reporter: FindingReporter,
        registry: Optional[SymbolRegistry] = None,
        store: Optional[DocStore] = None,
        concurrency: int = config.DEFAULT_CONCURRENCY,
        link_exceptions: Iterable[str] = config.LINK_EXCEPTIONS,
        raw_prefix: str = config.RAW_PREFIX,
        show_progress: bool = True,
    ) -> None:
        self.parser = parser
        self.reporter = reporter
        self.registry = registry or SymbolRegistry()
        self.store = store
        self.concurrency = max(1, concurrency)
        self.validator = DocValidator(self.registry, reporter, raw_prefix=raw_prefix)
        self.resolver = ReferenceResolver(
            self.registry, reporter, link_exceptions=link_exceptions, raw_prefix=raw_prefix,
        )
        self.show_progress = show_progress

    async def _ingest_directory(
        self,
        directory: Path,
        semaphore: asyncio.Semaphore,
        progress: Progress,
        task_id,
    ) -> List[Finding]:
        component = component_directory(directory)
        findings: List[Finding] = []
        async with semaphore:
            try:
                docs = await self.parser.build(directory)
                if docs:
                    findings = self.validator.validate(docs, component)
                    if self.store is not None:
                        await self.store.save(component, docs, source=str(directory))
            except EnvironmentFailure:
                raise
            except Exception as exc:
                self.reporter.item_failed(f"Unable to process {directory}: {exc}")
            finally:
                progress.update(task_id, advance=1, file=component)
        return findings

    async def run(self, directories: Iterable[Path]) -> Dict[str, int]:
        """Ingest every directory; returns registry stats once all tasks are done."""
        dirs = list(directories)
        semaphore = asyncio.Semaphore(self.concurrency)
        progress = Progress(
            TextColumn("Parsing:"),
            BarColumn(bar_width=20),
            MofNCompleteColumn(),
            TextColumn("{task.fields[file]}"),
            console=self.reporter.console,
            disable=not self.show_progress,
        )
        with progress:
            task_id = progress.add_task("parse", total=len(dirs), file="")
            await asyncio.gather(*(
                self._ingest_directory(directory, semaphore, progress, task_id)
                for directory in dirs
            ))
        stats = self.registry.stats()
        logger.info("Ingested %d directories: %s", len(dirs), stats)
        return stats

    async def scan(self, directories: Iterable[Path], ignore_external: bool = False) -> List[Finding]:
        """Ingest, then resolve cross references over the completed registry."""
        await self.run(directories)
        return self.resolver.resolve(ignore_external=ignore_external)

    def scan_sync(self, directories: Iterable[Path], ignore_external: bool = False) -> List[Finding]:
        return asyncio.run(self.scan(directories, ignore_external=ignore_external))
