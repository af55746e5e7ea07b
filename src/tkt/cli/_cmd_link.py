"""Link commands for tk CLI: link, unlink."""

from __future__ import annotations

import typer

from tkt.parser import format_id_list

from ._helpers import DIR_HELP, get_storage, report_errors
from ._json_state import echo_json, is_json_output


def register(app: typer.Typer) -> None:
    """Register link and unlink commands."""

    @app.command("link")
    @report_errors
    def link(
        ticket_ids: list[str] = typer.Argument(
            ...,
            help="Two or more ticket IDs to link together",
        ),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Link tickets together (symmetric: A links B implies B links A)."""
        if len(ticket_ids) < 2:
            msg = "link requires at least two ticket IDs"
            raise ValueError(msg)

        storage = get_storage(tickets_dir)
        ids = [storage.get(partial).id for partial in ticket_ids]

        added = 0
        for current in ids:
            ticket = storage.get(current)
            new_links = list(ticket.links)
            for other in ids:
                if other != current and other not in new_links:
                    new_links.append(other)
            if len(new_links) != len(ticket.links):
                added += len(new_links) - len(ticket.links)
                storage.update_field(current, "links", format_id_list(new_links))

        if is_json_output(json_output):
            echo_json({"ids": ids, "added": added})
        elif added == 0:
            typer.echo("All links already exist")
        else:
            typer.echo(f"Added {added} link(s) between {len(ids)} tickets")

    @app.command("unlink")
    @report_errors
    def unlink(
        ticket_id: str = typer.Argument(..., help="Ticket ID (partial IDs allowed)"),
        target_id: str = typer.Argument(..., help="Linked ticket to detach"),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        tickets_dir: str | None = typer.Option(None, "--dir", help=DIR_HELP),
    ) -> None:
        """Remove the link between two tickets, on both sides."""
        storage = get_storage(tickets_dir)
        source = storage.get(ticket_id)
        target = storage.get(target_id)

        if target.id not in source.links:
            msg = "link not found"
            raise ValueError(msg)

        storage.update_field(
            source.id,
            "links",
            format_id_list(lnk for lnk in source.links if lnk != target.id),
        )
        storage.update_field(
            target.id,
            "links",
            format_id_list(lnk for lnk in target.links if lnk != source.id),
        )

        if is_json_output(json_output):
            echo_json({"removed": [source.id, target.id]})
        else:
            typer.echo(f"Removed link: {source.id} <-> {target.id}")
