"""Prune command for tk CLI: remove dangling references."""

from __future__ import annotations

import typer

from tkt.deps import find_dangling, prune_dangling

from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register the prune command."""

    @app.command("prune")
    @report_errors
    def prune(
        fix: bool = typer.Option(
            False,
            "--fix",
            help="Actually remove dangling references (default is dry-run)",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Find deps, links, and parents that point at deleted tickets."""
        storage = get_storage(tickets_dir)
        tickets = storage.list()
        dangling = find_dangling(tickets)

        if is_json_output(json_output):
            removed = prune_dangling(storage, dangling) if fix else 0
            echo_json(
                {
                    "fixed": fix,
                    "removed": removed,
                    "tickets": [
                        {
                            "id": refs.ticket.id,
                            "deps": refs.deps,
                            "links": refs.links,
                            "parent": refs.parent,
                        }
                        for refs in dangling
                    ],
                },
            )
            return

        if not tickets:
            typer.echo("No tickets found.")
            return
        if not dangling:
            typer.echo("No dangling references found.")
            return

        typer.echo(f"Found dangling references in {len(dangling)} ticket(s):\n")
        for refs in dangling:
            ticket = refs.ticket
            typer.echo(f"{ticket.id} [{ticket.status.value}] {ticket.title}")
            if refs.deps:
                typer.echo(f"  deps: {', '.join(refs.deps)} (do not exist)")
            if refs.links:
                typer.echo(f"  links: {', '.join(refs.links)} (do not exist)")
            if refs.parent:
                typer.echo(f"  parent: {refs.parent} (does not exist)")

        if not fix:
            typer.echo("\nRun with --fix to remove these references.")
            return

        removed = prune_dangling(storage, dangling)
        typer.echo(f"\nRemoved {removed} dangling reference(s).")
