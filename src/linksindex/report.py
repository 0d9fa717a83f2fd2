"""Report sinks and the escalation policy applied to check results.

A report is the pair (findings, graph) captured for later diagnosis. The
core checker only returns findings; deciding that a non-empty result is a
failure happens here.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from linksindex.checker import Finding, check
from linksindex.models import LinkedGraph
from linksindex.source import RowSource, load

logger = logging.getLogger(__name__)


class InconsistentIndexError(Exception):
    """Raised when a check run produced findings."""

    def __init__(self, name: str, findings: list[Finding]) -> None:
        self.name = name
        self.findings = findings
        super().__init__(f"{name}: {len(findings)} finding(s), errors.length != 0")


class ReportSink(Protocol):
    """Accepts a check result for durable capture."""

    def write(self, name: str, findings: list[Finding], graph: LinkedGraph) -> None: ...


def build_report(findings: list[Finding], graph: LinkedGraph) -> dict[str, Any]:
    """Build the JSON-serializable report document."""
    return {
        "errors": [f.to_dict() for f in findings],
        "data": graph.to_dict(),
    }


class FileReportSink:
    """Writes ``<directory>/<name>.log`` as a JSON document."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.log"

    def write(self, name: str, findings: list[Finding], graph: LinkedGraph) -> None:
        """Write the report.

        Raises:
            OSError: If the file cannot be written.
        """
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(build_report(findings, graph), f, indent=2, ensure_ascii=False)
            f.write("\n")
        logger.debug("wrote report %s (%d findings)", path, len(findings))


class MemoryReportSink:
    """Keeps reports in memory, keyed by name."""

    def __init__(self) -> None:
        self.reports: dict[str, dict[str, Any]] = {}

    def write(self, name: str, findings: list[Finding], graph: LinkedGraph) -> None:
        self.reports[name] = build_report(findings, graph)


def assert_consistent(
    name: str,
    graph: LinkedGraph,
    findings: list[Finding],
    sink: ReportSink,
) -> None:
    """Capture a report, then fail if there are findings.

    The report is written even when the check passes.

    Raises:
        InconsistentIndexError: If findings is non-empty.
    """
    sink.write(name, findings, graph)
    if findings:
        raise InconsistentIndexError(name, findings)


def auto_assert(name: str, source: RowSource, sink: ReportSink) -> list[Finding]:
    """Load a snapshot, check it and assert it is consistent.

    Returns:
        The (empty) findings list when the index is consistent.

    Raises:
        InconsistentIndexError: If the check produced findings.
    """
    graph = load(source)
    findings = check(graph)
    assert_consistent(name, graph, findings, sink)
    return findings
