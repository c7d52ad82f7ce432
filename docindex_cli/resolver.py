"""Whole-corpus resolution of harvested references and links."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List

from . import config
from .doc_tree import describe_location
from .models import Finding, FindingKind, Severity
from .registry import SymbolRegistry
from .reporter import FindingReporter

logger = logging.getLogger(__name__)

# library/Module with an optional .member suffix
MODULE_LINK_RE = re.compile(r"^((\w+/\w+)(\.\w+)?)", re.ASCII)


class ReferenceResolver:
    """Resolves ``@extends``/``@mixes`` targets and links against a complete registry."""

    def __init__(
        self,
        registry: SymbolRegistry,
        reporter: FindingReporter,
        link_exceptions: Iterable[str] = config.LINK_EXCEPTIONS,
        raw_prefix: str = config.RAW_PREFIX,
    ) -> None:
        self.registry = registry
        self.reporter = reporter
        self.link_exceptions = frozenset(link_exceptions)
        self.raw_prefix = raw_prefix

    def _is_external(self, identifier: str, ignore_external: bool) -> bool:
        return ignore_external and not self.registry.has_library(self.registry.library_of(identifier))

    def resolve(self, ignore_external: bool = False) -> List[Finding]:
        """Check every harvested reference and link.

        Freezes the registry first: nothing may be ingested once resolution starts.

        Args:
            ignore_external: Skip targets whose library was never scanned in this run

        Returns:
            Findings for unresolved references and links
        """
        self.registry.freeze()
        findings = self._resolve_references(ignore_external)
        findings.extend(self._resolve_links(ignore_external))
        logger.info("Resolution finished with %d finding(s)", len(findings))
        return findings

    def _resolve_references(self, ignore_external: bool) -> List[Finding]:
        findings = []
        references = self.registry.references()
        for target in sorted(references):
            if self._is_external(target, ignore_external) or self.registry.has_static(target):
                continue
            details = []
            for citation in references[target]:
                where = describe_location(
                    {"name": citation.name, "context": citation.context}, self.raw_prefix,
                )
                details.append(f"type: {citation.kind} - {where}")
            findings.append(self.reporter.report(Finding(
                kind=FindingKind.INVALID_REFERENCE,
                severity=Severity.ERROR,
                message=f"Invalid reference: {target}:",
                location=target,
                details=details,
            )))
        return findings

    def _resolve_links(self, ignore_external: bool) -> List[Finding]:
        findings = []
        links = self.registry.links()
        for link in sorted(links):
            if self._is_external(link, ignore_external):
                continue
            match = MODULE_LINK_RE.match(link)
            if not match or match.group(2) in self.link_exceptions:
                continue
            if match.group(3):
                resolved = self.registry.has_static(match.group(0))
            else:
                resolved = self.registry.has_module(match.group(0))
            if resolved:
                continue
            findings.append(self.reporter.report(Finding(
                kind=FindingKind.INVALID_LINK,
                severity=Severity.ERROR,
                message=f"Invalid link: {link}:",
                location=link,
                details=[f"Used in: {module}" for module in links[link]],
            )))
        return findings
