"""linksindex - rebuild and verify a links reachability index."""

from __future__ import annotations

from linksindex.checker import CheckReport, Finding, check, summarize
from linksindex.linker import link, link_rows
from linksindex.models import IndexEntry, Link, LinkedGraph, Node, RowError, RowSet

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Model
    "IndexEntry",
    "Link",
    "LinkedGraph",
    "Node",
    "RowError",
    "RowSet",
    # Core
    "CheckReport",
    "Finding",
    "check",
    "link",
    "link_rows",
    "summarize",
]
