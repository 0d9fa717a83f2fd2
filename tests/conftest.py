"""Pytest configuration and fixtures for linksindex tests."""

from __future__ import annotations

import os

import pytest

from linksindex.models import IndexEntry, Link, Node, RowSet

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")


@pytest.fixture
def chain_rows() -> RowSet:
    """A consistent linear graph.

    Structure: a -> b -> c

    Each node owns one list: the path from the root down to itself.
    """
    return RowSet(
        nodes=[Node("a"), Node("b"), Node("c")],
        links=[
            Link(1, "a", "b", 1),
            Link(2, "b", "c", 1),
        ],
        index_entries=[
            IndexEntry(1, "a", "a", "La", 0),
            IndexEntry(2, "b", "a", "Lb", 0),
            IndexEntry(3, "b", "b", "Lb", 1, 1),
            IndexEntry(4, "c", "a", "Lc", 0),
            IndexEntry(5, "c", "b", "Lc", 1, 1),
            IndexEntry(6, "c", "c", "Lc", 2, 2),
        ],
    )


@pytest.fixture
def diamond_rows() -> RowSet:
    """A consistent diamond graph.

    Structure:
         a
        / \\
       b   c
        \\ /
         d

    d is reached through two parents, so it owns two lists (one per path)
    of three entries each.
    """
    return RowSet(
        nodes=[Node("a"), Node("b"), Node("c"), Node("d")],
        links=[
            Link(1, "a", "b", 1),
            Link(2, "a", "c", 1),
            Link(3, "b", "d", 1),
            Link(4, "c", "d", 1),
        ],
        index_entries=[
            IndexEntry(1, "a", "a", "La", 0),
            IndexEntry(2, "b", "a", "Lb", 0),
            IndexEntry(3, "b", "b", "Lb", 1, 1),
            IndexEntry(4, "c", "a", "Lc", 0),
            IndexEntry(5, "c", "c", "Lc", 1, 2),
            IndexEntry(6, "d", "a", "Ld1", 0),
            IndexEntry(7, "d", "b", "Ld1", 1, 1),
            IndexEntry(8, "d", "d", "Ld1", 2, 3),
            IndexEntry(9, "d", "a", "Ld2", 0),
            IndexEntry(10, "d", "c", "Ld2", 1, 2),
            IndexEntry(11, "d", "d", "Ld2", 2, 4),
        ],
    )
