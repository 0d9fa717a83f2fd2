"""Checker: verify the reachability index against the live edge set.

Checks run in a fixed order and never stop early:
- per node (node order): subject coverage, then list multiplicity
- per link (link order): every link contributes to at least one entry
- global: the index is empty if and only if the node set is empty

Each offending node or link yields one Finding holding all of its messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from linksindex.models import LinkedGraph, LinkId, Node, NodeId

MSG_NODE_NOT_INDEXED = "!node.indexes_by_index.length"
MSG_ROOT_LISTS = "root node must have only one index in they list"
MSG_LINK_NOT_INDEXED = "!link.indexes.length"
MSG_INDEXES_WITHOUT_NODES = "indexes.length && !nodes.length"
MSG_NODES_WITHOUT_INDEXES = "!indexes.length && nodes.length"


@dataclass
class Finding:
    """A single consistency violation.

    Attributes:
        nodes: Ids of the offending nodes, if any.
        links: Ids of the offending links, if any.
        messages: Human-readable messages, in check order.
    """

    nodes: list[NodeId] | None = None
    links: list[LinkId] | None = None
    messages: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"messages": list(self.messages)}
        if self.nodes is not None:
            result["nodes"] = list(self.nodes)
        if self.links is not None:
            result["links"] = list(self.links)
        return result


@dataclass
class CheckReport:
    """Aggregated outcome of one check run.

    Attributes:
        status: "pass" when there are no findings, "fail" otherwise.
        nodes_checked: Number of nodes in the snapshot.
        links_checked: Number of links in the snapshot.
        indexes_checked: Number of index entries in the snapshot.
        findings: Findings in check order.
    """

    status: Literal["pass", "fail"]
    nodes_checked: int
    links_checked: int
    indexes_checked: int
    findings: list[Finding]

    @property
    def total_findings(self) -> int:
        return len(self.findings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "nodes_checked": self.nodes_checked,
            "links_checked": self.links_checked,
            "indexes_checked": self.indexes_checked,
            "findings": [f.to_dict() for f in self.findings],
        }


def expected_list_count(graph: LinkedGraph, node: Node) -> tuple[int, int]:
    """Compute the list-owner entry count a non-root node should have.

    Every incoming link extends each list its source owns by one step: the
    source contributes all of its own list entries plus one new entry per
    distinct list id. Summing per link (not per ancestor) accounts for nodes
    reached through several parents.

    Args:
        graph: Linked graph.
        node: Node to evaluate.

    Returns:
        Tuple (rI, nI): rI is the plain sum of the sources' list entries,
        nI the expected entry count. Links whose source did not resolve add 0.
    """
    r_i = 0
    n_i = 0
    for link_id in node.links_by_target:
        link = graph.link(link_id)
        source = graph.node(link.source) if link is not None else None
        if source is None:
            continue
        owned = graph.list_entries(source)
        r_i += len(owned)
        n_i += len(owned) + len({entry.list_id for entry in owned})
    return r_i, n_i


def _check_node(graph: LinkedGraph, node: Node) -> list[str]:
    messages: list[str] = []
    if not node.indexes_by_index:
        messages.append(MSG_NODE_NOT_INDEXED)

    if node.links_by_target:
        r_i, n_i = expected_list_count(graph, node)
        count = len(node.indexes_by_list)
        if n_i != count:
            messages.append(f"invalid indexes count rI: {r_i} nI: {n_i} i_by_l: {count}")
    elif len(node.indexes_by_list) != 1:
        messages.append(MSG_ROOT_LISTS)
    return messages


def check(graph: LinkedGraph) -> list[Finding]:
    """Check a linked graph for index consistency.

    Args:
        graph: Output of the linker. Not modified.

    Returns:
        Findings in check order; empty when the index is consistent.
    """
    findings: list[Finding] = []

    for node in graph.nodes:
        messages = _check_node(graph, node)
        if messages:
            findings.append(Finding(nodes=[node.id], messages=messages))

    for link in graph.links:
        if not link.indexes:
            findings.append(Finding(links=[link.id], messages=[MSG_LINK_NOT_INDEXED]))

    if graph.indexes and not graph.nodes:
        findings.append(Finding(messages=[MSG_INDEXES_WITHOUT_NODES]))
    if not graph.indexes and graph.nodes:
        findings.append(Finding(messages=[MSG_NODES_WITHOUT_INDEXES]))

    return findings


def summarize(graph: LinkedGraph, findings: list[Finding]) -> CheckReport:
    """Aggregate a check run into a CheckReport."""
    return CheckReport(
        status="fail" if findings else "pass",
        nodes_checked=len(graph.nodes),
        links_checked=len(graph.links),
        indexes_checked=len(graph.indexes),
        findings=findings,
    )
