"""CLI commands for inventory items."""

from __future__ import annotations

import click

from rms.application.check_availability import FindAvailableItemsHandler
from rms.application.manage_items import (
    AddItemHandler,
    ListItemsHandler,
    SetItemStatusHandler,
    UpdateItemHandler,
)
from rms.domain.exceptions import DomainException, StorageError
from rms.infrastructure.bootstrap import Container

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _print_items(items) -> None:
    if not items:
        click.echo("No items found.")
        return
    click.echo(f"{'ID':<6} {'Name':<24} {'Price':>10} {'Status':<12} {'Rentals':>8}")
    click.echo("-" * 64)
    for i in items:
        click.echo(f"{i.id:<6} {i.name:<24} {i.price:>10} {i.status:<12} {i.rental_count:>8}")


@click.command("add")
@click.option("--name", required=True, help="Item name.")
@click.option("--price", required=True, help="Rental fee (e.g. 1500.00).")
@click.option("--size", default=None, help="Size label.")
@click.option("--color", default=None, help="Color.")
@click.pass_obj
def item_add(app: Container, name: str, price: str, size: str | None, color: str | None) -> None:
    """Add a new item to the inventory."""
    handler = AddItemHandler(app.item_repo)

    try:
        dto = handler.handle(name=name, price=price, size=size, color=color)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{dto.id} '{dto.name}' added at {dto.price}")


@click.command("list")
@click.option("--status", default=None, help="Only items with this status.")
@click.pass_obj
def item_list(app: Container, status: str | None) -> None:
    """List inventory items."""
    try:
        items = ListItemsHandler(app.item_repo).handle(status)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))
    _print_items(items)


@click.command("available")
@click.option("--from", "start", type=DATE, default=None, help="Delivery date.")
@click.option("--to", "end", type=DATE, default=None, help="Due date.")
@click.option("--event", type=DATE, default=None, help="Event date (uses the event window).")
@click.pass_obj
def item_available(app: Container, start, end, event) -> None:
    """List items free for a date range or an event."""
    if event is None and (start is None or end is None):
        raise click.UsageError("Give --event, or both --from and --to.")
    handler = FindAvailableItemsHandler(app.item_repo, app.order_repo)

    try:
        items = handler.handle(
            delivery_date=start.date() if start else None,
            due_date=end.date() if end else None,
            event_date=event.date() if event else None,
        )
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))
    _print_items(items)


@click.command("status")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option(
    "--set",
    "new_status",
    required=True,
    type=click.Choice(["available", "reserved", "maintenance", "damaged", "unlisted"]),
    help="New status.",
)
@click.option("--expect", default=None, help="Only change if the status is currently this.")
@click.pass_obj
def item_status(app: Container, item_id: str, new_status: str, expect: str | None) -> None:
    """Change an item's status (manual override unless --expect is given)."""
    handler = SetItemStatusHandler(app.item_repo)

    try:
        dto = handler.handle(item_id, new_status, expected=expect)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{dto.id} is now {dto.status}")


@click.command("update")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--price", default=None, help="New rental fee.")
@click.option("--description", default=None, help="New description.")
@click.pass_obj
def item_update(app: Container, item_id: str, price: str | None, description: str | None) -> None:
    """Update an item's fee or description."""
    handler = UpdateItemHandler(app.item_repo)

    try:
        dto = handler.handle(item_id, price=price, description=description)
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item #{dto.id} updated ({dto.price})")
