"""Finding collection, console output, and process exit-code bookkeeping."""

from __future__ import annotations

import logging
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from .models import Finding

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ITEM_FAILURE = 2
EXIT_ENVIRONMENT = 2


class EnvironmentFailure(RuntimeError):
    """Unrecoverable problem with the run environment (missing input, unwritable output)."""


class FindingReporter:
    """Accumulates findings and per-item failures for one run.

    Findings never raise. In strict mode any finding makes the run exit with
    ``EXIT_FINDINGS``; a per-item failure always yields ``EXIT_ITEM_FAILURE``.
    """

    def __init__(self, strict: bool = False, console: Optional[Console] = None) -> None:
        self.strict = strict
        self.console = console or Console(stderr=True, highlight=False)
        self.findings: List[Finding] = []
        self.failures: List[str] = []

    def report(self, finding: Finding, separate: bool = False) -> Finding:
        if separate:
            self.console.print("")
        self.console.print(f"[red]{escape(finding.render())}[/red]")
        logger.debug("%s (%s): %s", finding.kind.value, finding.severity.value, finding.message)
        self.findings.append(finding)
        return finding

    def item_failed(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]")
        logger.error(message)
        self.failures.append(message)

    @property
    def exit_code(self) -> int:
        if self.failures:
            return EXIT_ITEM_FAILURE
        if self.strict and self.findings:
            return EXIT_FINDINGS
        return EXIT_OK

    def summary(self) -> str:
        return f"{len(self.findings)} finding(s), {len(self.failures)} failure(s)"
