"""Linker: rebuild a navigable graph from flat, foreign-key-only rows.

Three passes, strictly ordered:
1. nodes are indexed by id and given empty derived collections
2. links resolve their source/target/auxiliary nodes
3. index entries resolve their link, subject node and list owner

Links must be linked before index entries because entries reference links.
Dangling or null foreign keys are left unresolved; judging them is the
checker's job. Ids must be unique per collection: every handle is resolved
through the id tables, so a repeated id raises RowError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from linksindex.models import IndexEntry, Link, LinkedGraph, Node, RowError, RowSet

logger = logging.getLogger(__name__)


def _link_nodes(graph: LinkedGraph, nodes: Iterable[Node]) -> None:
    for row in nodes:
        if row.id in graph.nodes_by_id:
            raise RowError("node", f"duplicate id {row.id!r}", row.to_row())
        node = Node(id=row.id)
        graph.nodes.append(node)
        graph.nodes_by_id[node.id] = node


def _link_links(graph: LinkedGraph, links: Iterable[Link]) -> int:
    """Resolve link endpoints. Returns the number of unresolved references."""
    unresolved = 0
    for row in links:
        if row.id in graph.links_by_id:
            raise RowError("link", f"duplicate id {row.id!r}", row.to_row())
        link = replace(row, source=None, target=None, node=None, indexes=[])
        graph.links.append(link)
        graph.links_by_id[link.id] = link

        source = graph.node(link.source_id)
        if source is not None:
            link.source = source.id
            source.links_by_source.append(link.id)
        elif link.source_id is not None:
            unresolved += 1

        target = graph.node(link.target_id)
        if target is not None:
            link.target = target.id
            target.links_by_target.append(link.id)
        elif link.target_id is not None:
            unresolved += 1

        aux = graph.node(link.node_id)
        if aux is not None:
            link.node = aux.id
            aux.links_by_node.append(link.id)
        elif link.node_id is not None:
            unresolved += 1
    return unresolved


def _link_indexes(graph: LinkedGraph, entries: Iterable[IndexEntry]) -> int:
    """Resolve index entry references. Returns the number of unresolved references."""
    unresolved = 0
    for row in entries:
        if row.id in graph.indexes_by_id:
            raise RowError("index", f"duplicate id {row.id!r}", row.to_row())
        entry = replace(row, link=None, index_node=None, list_node=None)
        graph.indexes.append(entry)
        graph.indexes_by_id[entry.id] = entry

        link = graph.link(entry.index_link_id)
        if link is not None:
            entry.link = link.id
            link.indexes.append(entry.id)
        elif entry.index_link_id is not None:
            unresolved += 1

        subject = graph.node(entry.index_node_id)
        if subject is not None:
            entry.index_node = subject.id
            subject.indexes_by_index.append(entry.id)
        elif entry.index_node_id is not None:
            unresolved += 1

        owner = graph.node(entry.list_node_id)
        if owner is not None:
            entry.list_node = owner.id
            owner.indexes_by_list.append(entry.id)
        elif entry.list_node_id is not None:
            unresolved += 1
    return unresolved


def link(
    nodes: Iterable[Node],
    links: Iterable[Link],
    index_entries: Iterable[IndexEntry],
) -> LinkedGraph:
    """Link three flat collections into a LinkedGraph.

    The input entities are copied, never mutated, so linking the same rows
    twice yields equal graphs.

    Args:
        nodes: Node rows.
        links: Link rows.
        index_entries: Reachability index rows.

    Returns:
        A new LinkedGraph with every derived collection populated.

    Raises:
        RowError: If an id repeats within one collection.
    """
    graph = LinkedGraph(nodes=[], links=[], indexes=[])
    _link_nodes(graph, nodes)
    unresolved = _link_links(graph, links)
    unresolved += _link_indexes(graph, index_entries)

    logger.debug(
        "linked %d nodes, %d links, %d index entries (%d unresolved references)",
        len(graph.nodes),
        len(graph.links),
        len(graph.indexes),
        unresolved,
    )
    return graph


def link_rows(rows: RowSet) -> LinkedGraph:
    """Link the collections of a RowSet."""
    return link(rows.nodes, rows.links, rows.index_entries)
