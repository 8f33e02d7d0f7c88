"""CLI commands for the Order aggregate.

Core lifecycle commands go through RentalService so every rejection is
reported with the rule that failed.
"""

from __future__ import annotations

import click

from rms.application.dto import OrderDTO, ReservationRequest
from rms.application.show_order import ShowOrderHandler
from rms.domain.exceptions import DomainException, StorageError
from rms.infrastructure.bootstrap import Container
from rms.infrastructure.cli.results import unwrap

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Item:     #{dto.item_id}")
    click.echo(f"Customer: #{dto.customer_id}   Staff: {dto.staff_id}")
    click.echo(f"Period:   {dto.delivery_date} -> {dto.due_date}")
    if dto.event_date:
        click.echo(f"Event:    {dto.event_date}")
    if dto.return_date:
        click.echo(f"Returned: {dto.return_date}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Rental fee':<20} {dto.rental_fee:>12}")
    if dto.discount_percentage:
        click.echo(f"  {'Discount':<20} {str(dto.discount_percentage) + '%':>12}")
    click.echo(f"  {'Penalty':<20} {dto.penalty_fee:>12}")
    click.echo(f"  {'Advance':<20} {dto.advance_payment:>12}")
    click.echo(f"  {'-' * 33}")
    click.echo(f"  {'Total due':<20} {dto.total_due:>12}")
    click.echo(f"  {'Balance':<20} {dto.balance:>12}")
    if dto.notes:
        click.echo(f"\nNotes: {dto.notes}")
    for note in dto.status_notes:
        click.echo(f"  - {note}")


@click.command("check")
@click.option("--item", "item_id", required=True, help="Item ID.")
@click.option("--from", "start", required=True, type=DATE, help="Delivery date.")
@click.option("--to", "end", required=True, type=DATE, help="Due date.")
@click.pass_obj
def order_check(app: Container, item_id: str, start, end) -> None:
    """Check whether an item is free for a date range."""
    dto = unwrap(app.rental_service().check_availability(item_id, start.date(), end.date()))
    if dto.available:
        click.echo(f"Item #{item_id} is available.")
    else:
        click.echo(f"Item #{item_id} is taken by order #{dto.conflicting_order_id}.")


@click.command("create")
@click.option("--item", "item_id", required=True, help="Item ID.")
@click.option("--customer", "customer_id", required=True, type=int, help="Customer ID.")
@click.option("--staff", "staff_id", required=True, help="Staff member creating the order.")
@click.option("--from", "start", required=True, type=DATE, help="Delivery date.")
@click.option("--to", "end", required=True, type=DATE, help="Due date.")
@click.option("--advance", default="0", help="Advance payment.")
@click.option("--event", type=DATE, default=None, help="Event date.")
@click.option("--discount", type=int, default=0, help="Discount percent (frequent customers).")
@click.option("--notes", default="", help="Free-text notes.")
@click.pass_obj
def order_create(
    app: Container,
    item_id: str,
    customer_id: int,
    staff_id: str,
    start,
    end,
    advance: str,
    event,
    discount: int,
    notes: str,
) -> None:
    """Reserve an item for a customer."""
    request = ReservationRequest(
        item_id=item_id,
        customer_id=customer_id,
        staff_id=staff_id,
        delivery_date=start.date(),
        due_date=end.date(),
        advance_payment=advance,
        notes=notes,
        event_date=event.date() if event else None,
        discount_percentage=discount,
    )
    dto = unwrap(app.rental_service().create_order(request))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option(
    "--set",
    "new_status",
    required=True,
    type=click.Choice(["pending", "on_course", "finished", "canceled"]),
    help="New status.",
)
@click.option("--notes", default=None, help="Required when finishing or canceling.")
@click.option("--penalty", default=None, help="Penalty fee charged on return.")
@click.pass_obj
def order_status(
    app: Container,
    order_id: int,
    new_status: str,
    notes: str | None,
    penalty: str | None,
) -> None:
    """Move an order to another status."""
    dto = unwrap(app.rental_service().transition_status(order_id, new_status, notes, penalty))
    click.echo(f"Order #{dto.id} is {dto.status}.")


@click.command("edit")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--from", "start", type=DATE, default=None, help="New delivery date.")
@click.option("--to", "end", type=DATE, default=None, help="New due date.")
@click.option("--notes", default=None, help="Replace the notes.")
@click.pass_obj
def order_edit(app: Container, order_id: int, start, end, notes: str | None) -> None:
    """Reschedule a live order or change its notes."""
    dto = unwrap(
        app.rental_service().update_order(
            order_id,
            start.date() if start else None,
            end.date() if end else None,
            notes,
        )
    )
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(app: Container, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(app.order_repo)

    try:
        dto = handler.handle(order_id)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="Only orders in this status.")
@click.option("--customer", "customer_id", type=int, default=None, help="Only this customer.")
@click.option("--item", "item_id", default=None, help="Only this item.")
@click.option("--from", "start", type=DATE, default=None, help="Created on or after this date.")
@click.option("--to", "end", type=DATE, default=None, help="Created on or before this date.")
@click.pass_obj
def order_list(
    app: Container,
    status: str | None,
    customer_id: int | None,
    item_id: str | None,
    start,
    end,
) -> None:
    """List orders, optionally only those created in a date range."""
    orders = unwrap(app.rental_service().list_orders(
        status,
        customer_id,
        item_id,
        start.date() if start else None,
        end.date() if end else None,
    ))

    if not orders:
        click.echo("No orders found.")
        return
    click.echo(f"{'ID':<6} {'Item':<6} {'Customer':>8}  {'Delivery':<10} {'Due':<10} {'Status':<10}")
    click.echo("-" * 58)
    for o in orders:
        click.echo(
            f"{o.id:<6} {o.item_id:<6} {o.customer_id:>8}  "
            f"{o.delivery_date.isoformat():<10} {o.due_date.isoformat():<10} {o.status:<10}"
        )


@click.command("reconcile")
@click.pass_obj
def reconcile(app: Container) -> None:
    """Re-sync item statuses with live orders."""
    report = unwrap(app.rental_service().reconcile())
    click.echo(
        f"Checked {report.checked} item(s): {len(report.changed)} changed, "
        f"{len(report.conflicts)} skipped."
    )
