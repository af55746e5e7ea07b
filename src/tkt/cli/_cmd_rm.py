"""Delete command for tk CLI."""

from __future__ import annotations

import logging

import typer

from tkt.deps import find_children, find_dependants
from tkt.errors import TicketError
from tkt.parser import format_id_list

from ._formatting import format_ticket_ref
from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output

logger = logging.getLogger(__name__)


def register(app: typer.Typer) -> None:
    """Register the rm command."""

    @app.command("rm")
    @report_errors
    def remove(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        force: bool = typer.Option(
            False,
            "--force",
            "-f",
            help="Remove links first (still refuses if dependants/children exist)",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Delete a ticket after verifying it is safe to remove.

        Refuses when other tickets depend on it or name it as parent, and
        when it has links unless --force is given.
        """
        storage = get_storage(tickets_dir)
        target = storage.get(ticket_id)
        all_tickets = storage.list()

        dependants = find_dependants(all_tickets, target.id)
        if dependants:
            refs = "\n".join(format_ticket_ref(t) for t in dependants)
            msg = f"cannot delete {target.id}: ticket has dependants\n\n{refs}"
            raise TicketError(msg)

        children = find_children(all_tickets, target.id)
        if children:
            refs = "\n".join(format_ticket_ref(t) for t in children)
            msg = f"cannot delete {target.id}: ticket has children\n\n{refs}"
            raise TicketError(msg)

        if target.links and not force:
            by_id = {t.id: t for t in all_tickets}
            refs = "\n".join(
                format_ticket_ref(by_id[lnk]) for lnk in target.links if lnk in by_id
            )
            msg = (
                f"cannot delete {target.id}: ticket has links\n\n{refs}\n\n"
                "Use --force to remove links and delete"
            )
            raise TicketError(msg)

        unlinked = 0
        for linked_id in target.links:
            if not storage.exists(linked_id):
                logger.debug("Skipping dangling link %s", linked_id)
                continue
            linked = storage.get(linked_id)
            remaining = [lnk for lnk in linked.links if lnk != target.id]
            storage.update_field(linked.id, "links", format_id_list(remaining))
            unlinked += 1

        storage.delete(target.id)

        if is_json_output(json_output):
            echo_json({"deleted": target.id, "links_removed": unlinked})
        elif unlinked:
            typer.echo(f"Removed {unlinked} link(s) and deleted ticket: {target.id}")
        else:
            typer.echo(f"Deleted ticket: {target.id}")
