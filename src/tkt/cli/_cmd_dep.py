"""Dependency commands for tk CLI: dep, undep, dep tree."""

from __future__ import annotations

import typer

from tkt.deptree import DependencyTree
from tkt.parser import format_id_list
from tkt.storage import FileStorage, require_tickets

from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output

_DEP_DOC = """\
Add a dependency: the first ticket will depend on the second.

Also supports `tk dep tree [--full] <id>` to show the dependency tree of
a ticket. --full shows every occurrence instead of only the deepest one.\
"""


def _show_tree(
    storage: FileStorage,
    root: str,
    *,
    full: bool,
    json_output: bool,
) -> None:
    tickets = require_tickets(storage)
    root_id = storage.resolver.resolve(root)
    tree = DependencyTree.build(tickets, root_id, full=full)
    if is_json_output(json_output):
        echo_json({"root": root_id, "lines": tree.render()})
    else:
        tree.render_to(typer.echo)


def register(app: typer.Typer) -> None:
    """Register dep and undep commands."""

    @app.command("dep", help=_DEP_DOC)
    @report_errors
    def dependency(
        ticket_id: str = typer.Argument(..., help="Ticket ID, or 'tree'"),
        depends_on: str = typer.Argument(..., help="Ticket it depends on"),
        full: bool = typer.Option(
            False,
            "--full",
            help="Tree: show all occurrences (disable deduplication)",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        storage = get_storage(tickets_dir)

        if ticket_id == "tree":
            _show_tree(storage, depends_on, full=full, json_output=json_output)
            return

        ticket = storage.get(ticket_id)
        dep = storage.get(depends_on)

        if dep.id in ticket.deps:
            typer.echo("Dependency already exists")
            return

        new_deps = [*ticket.deps, dep.id]
        resolved = storage.update_field(ticket.id, "deps", format_id_list(new_deps))
        if is_json_output(json_output):
            echo_json({"id": resolved, "deps": new_deps})
        else:
            typer.echo(f"Added dependency: {resolved} -> {dep.id}")

    @app.command("undep")
    @report_errors
    def undependency(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        depends_on: str = typer.Argument(..., help="Dependency to remove"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Remove a dependency.

        The dependency may be given as a partial ID; it also matches deps
        that no longer exist in the store.
        """
        storage = get_storage(tickets_dir)
        ticket = storage.get(ticket_id)

        kept = [d for d in ticket.deps if depends_on not in d]
        if len(kept) == len(ticket.deps):
            msg = "dependency not found"
            raise ValueError(msg)

        resolved = storage.update_field(ticket.id, "deps", format_id_list(kept))
        if is_json_output(json_output):
            echo_json({"id": resolved, "deps": kept})
        else:
            typer.echo(f"Removed dependency: {resolved} -/-> {depends_on}")
