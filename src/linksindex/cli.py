"""linksindex CLI - Main entry point."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from linksindex import __version__
from linksindex.checker import check, summarize
from linksindex.cli_utils import (
    EXIT_USER_ERROR,
    EXIT_VALIDATION_FAILED,
    configure_logging,
    db_option,
    json_option,
    quiet_option,
    verbose_option,
    warning,
    wire_config,
)
from linksindex.config import LinksIndexConfig
from linksindex.crud import (
    add_index_entry,
    add_link,
    add_node,
    clear,
    list_index_entries,
    list_links,
    list_nodes,
    remove_link,
    remove_node,
)
from linksindex.database import DatabaseError, IndexDB
from linksindex.models import RowError
from linksindex.report import FileReportSink
from linksindex.schema import init_database
from linksindex.source import DatabaseRowSource, JsonRowSource, RowSource, load

app = typer.Typer(
    name="linksindex",
    help="Links index checker - verify a reachability index against its edges.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)


# -----------------------------------------------------------------------------
# Output Helpers
# -----------------------------------------------------------------------------


def _output_success(message: str, quiet: bool = False) -> None:
    """Print a success message."""
    if not quiet:
        console.print(f"[green]Success:[/green] {message}")


def _output_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[red]Error:[/red] {message}")


def _output_info(message: str, quiet: bool = False) -> None:
    """Print an info message."""
    if not quiet:
        console.print(message)


def _exit_error(message: str, exit_code: int = EXIT_USER_ERROR) -> NoReturn:
    """Print error and exit."""
    _output_error(message)
    raise typer.Exit(code=exit_code)


def _existing_db_path(config: LinksIndexConfig, base: Path) -> Path:
    db_path = config.get_db_path(base)
    if not db_path.exists():
        _exit_error(f"Database not found: {db_path}. Run 'linksindex init' first.")
    return db_path


def _mutate(db_path: str | None, action: Any) -> Any:
    """Run action(db) inside a transaction on the configured store."""
    base = Path.cwd()
    config = wire_config(db_path=db_path, start_dir=base)
    path = _existing_db_path(config, base)
    try:
        with IndexDB(path, auto_init=False) as db, db.transaction():
            return action(db)
    except (ValueError, sqlite3.Error, DatabaseError) as e:
        _exit_error(str(e))


# -----------------------------------------------------------------------------
# Version and Main Callbacks
# -----------------------------------------------------------------------------


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"linksindex version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Links index checker - verify a reachability index against its edges."""
    pass


# -----------------------------------------------------------------------------
# Store Commands
# -----------------------------------------------------------------------------


@app.command()
def init(
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Create the store and its nodes, links and links_indexes tables."""
    base = Path.cwd()
    config = wire_config(db_path=db_path, start_dir=base)
    path = config.get_db_path(base)
    try:
        init_database(path)
    except (sqlite3.Error, OSError) as e:
        _exit_error(f"Failed to initialize database: {e}")
    _output_success(f"Initialized {path}", quiet)


@app.command("add-node")
def add_node_command(
    node_id: str = typer.Argument(..., help="Node id."),
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Insert a node."""
    _mutate(db_path, lambda db: add_node(db, node_id))
    _output_success(f"Added node {node_id}", quiet)


@app.command("add-link")
def add_link_command(
    source_id: str = typer.Argument(..., help="Source node id."),
    target_id: str = typer.Argument(..., help="Target node id."),
    type_id: int = typer.Option(1, "--type", "-t", help="Link type id."),
    node_id: str | None = typer.Option(None, "--node", "-n", help="Auxiliary node id."),
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Insert a link from SOURCE_ID to TARGET_ID and print its id."""
    link_id = _mutate(db_path, lambda db: add_link(db, source_id, target_id, type_id, node_id))
    if quiet:
        console.print(str(link_id))
    else:
        _output_success(f"Added link {link_id}: {source_id} -> {target_id}")


@app.command("add-index")
def add_index_command(
    list_node_id: str = typer.Argument(..., help="Node owning the list."),
    index_node_id: str = typer.Argument(..., help="Node being indexed."),
    list_id: str = typer.Argument(..., help="List id."),
    depth: int = typer.Argument(..., help="Depth within the list."),
    link_id: int | None = typer.Option(None, "--link", "-l", help="Link that produced the entry."),
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Insert a reachability index entry and print its id."""
    entry_id = _mutate(
        db_path,
        lambda db: add_index_entry(db, list_node_id, index_node_id, list_id, depth, link_id),
    )
    if quiet:
        console.print(str(entry_id))
    else:
        _output_success(f"Added index entry {entry_id}")


@app.command("remove-node")
def remove_node_command(
    node_id: str = typer.Argument(..., help="Node id."),
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Delete a node."""
    if not _mutate(db_path, lambda db: remove_node(db, node_id)):
        _exit_error(f"Node not found: {node_id}")
    _output_success(f"Removed node {node_id}", quiet)


@app.command("remove-link")
def remove_link_command(
    link_id: int = typer.Argument(..., help="Link id."),
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Delete a link."""
    if not _mutate(db_path, lambda db: remove_link(db, link_id)):
        _exit_error(f"Link not found: {link_id}")
    _output_success(f"Removed link {link_id}", quiet)


@app.command("clear")
def clear_command(
    db_path: str | None = db_option(),
    quiet: bool = quiet_option(),
) -> None:
    """Delete all nodes, links and index entries."""
    _mutate(db_path, clear)
    _output_success("Cleared nodes, links and links_indexes", quiet)


@app.command("list")
def list_entities(
    entity: str = typer.Argument(
        "nodes",
        help="Entity type to list: nodes, links, or indexes.",
    ),
    db_path: str | None = db_option(),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
) -> None:
    """List stored rows.

    Usage:
      linksindex list nodes     - List all nodes
      linksindex list links     - List all links
      linksindex list indexes   - List all index entries
    """
    listers = {"nodes": list_nodes, "links": list_links, "indexes": list_index_entries}
    entity = entity.lower()
    if entity not in listers:
        _exit_error(f"Invalid entity type: {entity}. Must be one of: {', '.join(listers)}")

    base = Path.cwd()
    config = wire_config(db_path=db_path, start_dir=base)
    path = _existing_db_path(config, base)
    with IndexDB(path, auto_init=False) as db:
        rows = listers[entity](db)

    if json_output:
        console.print_json(json.dumps({entity: rows}))
        return

    if not rows:
        _output_info(f"No {entity} stored.", quiet)
        return

    if quiet:
        for row in rows:
            console.print(str(row["id"]))
        return

    table = Table(title=entity.capitalize())
    for column in rows[0]:
        table.add_column(column, style="cyan" if column == "id" else None)
    for row in rows:
        table.add_row(*("-" if v is None else str(v) for v in row.values()))
    console.print(table)


# -----------------------------------------------------------------------------
# Check Command
# -----------------------------------------------------------------------------


def _print_findings(findings: list[Any]) -> None:
    table = Table(title="Findings")
    table.add_column("#", justify="right")
    table.add_column("Nodes", style="cyan")
    table.add_column("Links", style="cyan")
    table.add_column("Messages", style="red")
    for number, finding in enumerate(findings, start=1):
        table.add_row(
            str(number),
            ", ".join(finding.nodes) if finding.nodes else "-",
            ", ".join(str(i) for i in finding.links) if finding.links else "-",
            "\n".join(finding.messages),
        )
    console.print(table)


@app.command("check")
def check_command(
    db_path: str | None = db_option(),
    from_json: Path | None = typer.Option(
        None,
        "--from-json",
        help="Read rows from a JSON file (or a previous report) instead of the store.",
    ),
    report_dir: str | None = typer.Option(
        None,
        "--report-dir",
        help="Directory receiving the report dump (default: .linksindex).",
    ),
    name: str | None = typer.Option(
        None,
        "--name",
        help="Base name of the report dump (default: check).",
    ),
    no_report: bool = typer.Option(
        False,
        "--no-report",
        help="Do not write a report dump.",
    ),
    json_output: bool = json_option(),
    quiet: bool = quiet_option(),
    verbose: bool = verbose_option(),
) -> None:
    """Link the stored rows and check the reachability index.

    Checks that every node is indexed, that root nodes own exactly one list
    entry, that every other node owns as many entries as its parents imply,
    that every link is indexed, and that the index is empty exactly when
    there are no nodes.

    Exits with code 2 if any finding is reported.
    """
    configure_logging(verbose)
    base = Path.cwd()
    config = wire_config(
        db_path=db_path, report_dir=report_dir, report_name=name, start_dir=base
    )

    sink = None if no_report else FileReportSink(config.get_report_dir(base))

    try:
        if from_json is not None:
            graph = load(JsonRowSource(from_json))
        else:
            path = _existing_db_path(config, base)
            with IndexDB(path, auto_init=False) as db:
                source: RowSource = DatabaseRowSource(db)
                graph = load(source)
    except (RowError, OSError, json.JSONDecodeError, DatabaseError, sqlite3.Error) as e:
        _exit_error(f"Failed to load rows: {e}")

    if graph.is_empty() and not (quiet or json_output):
        warning("No rows to check")

    findings = check(graph)
    report = summarize(graph, findings)

    if sink is not None:
        try:
            sink.write(config.report_name, findings, graph)
        except OSError as e:
            _exit_error(f"Failed to write report: {e}")

    if json_output:
        result: dict[str, Any] = report.to_dict()
        if sink is not None:
            result["report_path"] = str(sink.path_for(config.report_name))
        console.print_json(json.dumps(result))
    else:
        if report.status == "pass":
            _output_success("Index is consistent", quiet)
        else:
            _output_error(f"Index has {report.total_findings} finding(s)")

        if not quiet:
            console.print(
                f"  Nodes: {report.nodes_checked}  Links: {report.links_checked}"
                f"  Index entries: {report.indexes_checked}"
            )
            if findings:
                _print_findings(findings)
            if sink is not None:
                console.print(f"  Report: {sink.path_for(config.report_name)}")

    if findings:
        raise typer.Exit(code=EXIT_VALIDATION_FAILED)


if __name__ == "__main__":
    app()
