"""Structural validation of one directory's parsed doc records."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from . import config
from .doc_tree import (
    context_file,
    describe_location,
    find_link_urls,
    find_see_tags,
    first_path_entry,
    member_tags,
    record_name,
    static_members,
)
from .models import Finding, FindingKind
from .registry import SymbolRegistry
from .reporter import FindingReporter

logger = logging.getLogger(__name__)

REFERENCE_TAGS = ("extends", "mixes")


def is_valid_see(description: Any) -> bool:
    return isinstance(description, str) and ("{@link" in description or "http" in description)


class DocValidator:
    """Checks one directory's doc records and feeds the shared registry.

    Structural problems are reported immediately; ``@extends``/``@mixes`` targets
    and links are only harvested here and checked later by the resolver, once
    every directory has been ingested.
    """

    def __init__(
        self,
        registry: SymbolRegistry,
        reporter: FindingReporter,
        raw_prefix: str = config.RAW_PREFIX,
    ) -> None:
        self.registry = registry
        self.reporter = reporter
        self.raw_prefix = raw_prefix

    def _where(self, doc: Any) -> str:
        return describe_location(doc, self.raw_prefix)

    def validate(self, docs: List[Dict[str, Any]], expected_name: str) -> List[Finding]:
        """Validate *docs* parsed from the directory whose module should be *expected_name*.

        Args:
            docs: Top-level records emitted by the parser for one directory
            expected_name: Module name derived from the directory layout

        Returns:
            Findings raised for this directory (also sent to the reporter)
        """
        findings: List[Finding] = []
        if not docs:
            return findings

        def emit(finding: Finding) -> None:
            findings.append(self.reporter.report(finding, separate=not findings))

        if len(docs) > 1:
            emit(Finding(
                kind=FindingKind.TOO_MANY_DOCLETS,
                message=f"Too many doclets ({len(docs)}):",
                location=self._where(docs[0]),
                details=[self._where(doc) for doc in docs],
            ))

        doc = docs[0]
        module_name = record_name(doc) or expected_name
        # memberof values naming the module as declared; remapped on a mismatch
        declared_names = {module_name}
        entry = first_path_entry(doc)
        if entry is None or entry[1] != "module":
            name, kind = entry if entry is not None else ("", "missing path")
            emit(Finding(
                kind=FindingKind.NOT_A_MODULE,
                message=f"First item not a module: {name} ({kind}) in {self._where(doc)}",
                location=self._where(doc),
            ))
        elif entry[0] != expected_name:
            emit(Finding(
                kind=FindingKind.MODULE_NAME_MISMATCH,
                message=(
                    f"Module name ({entry[0]}) does not match path: {expected_name} "
                    f"in {self._where(doc)}"
                ),
                location=self._where(doc),
            ))
            declared_names.add(entry[0])
            module_name = expected_name

        uniques: Dict[str, Dict[str, Any]] = {}
        for member in static_members(doc):
            name = member.get("name")
            if not isinstance(name, str):
                continue
            if name in uniques:
                emit(Finding(
                    kind=FindingKind.DUPLICATE_MEMBER,
                    message=(
                        f"Duplicate module member {self._where(member)}, "
                        f"original: {self._where(uniques[name])}"
                    ),
                    location=self._where(member),
                ))
            else:
                uniques[name] = member
                memberof = member.get("memberof") or module_name
                if memberof in declared_names:
                    memberof = module_name
                self.registry.register_static(f"{memberof}.{name}")

            for tag in member_tags(member):
                title = tag.get("title")
                target = tag.get("name")
                if title in REFERENCE_TAGS and isinstance(target, str):
                    context = member.get("context")
                    self.registry.add_reference(
                        target, title, name, context if isinstance(context, dict) else None,
                    )

        for tag, context in find_see_tags(doc):
            description = tag.get("description")
            if not is_valid_see(description):
                where = f"{context_file(context, self.raw_prefix)}:{tag.get('lineNumber', '?')}"
                emit(Finding(
                    kind=FindingKind.INVALID_SEE,
                    message=f"Potentially invalid @see '{description}' at {where}",
                    location=where,
                ))

        for url in find_link_urls(doc):
            self.registry.add_link(url, module_name)

        self.registry.register_module(module_name)
        logger.debug("Validated %s with %d finding(s)", module_name, len(findings))
        return findings
