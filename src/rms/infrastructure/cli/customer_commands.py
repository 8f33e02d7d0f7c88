"""CLI commands for customers."""

from __future__ import annotations

import click

from rms.application.manage_customers import RegisterCustomerHandler
from rms.domain.exceptions import DomainException, StorageError
from rms.infrastructure.bootstrap import Container
from rms.infrastructure.cli.results import unwrap

STATUSES = ["active", "inactive", "blacklisted", "frequent"]


@click.command("add")
@click.option("--name", required=True, help="First name.")
@click.option("--last-name", default=None, help="Last name.")
@click.option("--phone", required=True, help="Phone number (used to find existing customers).")
@click.option("--email", default=None, help="Email address.")
@click.option("--document-url", default=None, help="URL of the scanned identification.")
@click.pass_obj
def customer_add(
    app: Container,
    name: str,
    last_name: str | None,
    phone: str,
    email: str | None,
    document_url: str | None,
) -> None:
    """Register a customer (or find the one with this phone)."""
    handler = RegisterCustomerHandler(app.customer_repo, app.order_repo)

    try:
        dto = handler.handle(
            name, phone, last_name=last_name, email=email, id_document_url=document_url
        )
    except (DomainException, StorageError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Customer #{dto.id} {dto.full_name} ({dto.status})")


@click.command("list")
@click.option("--status", type=click.Choice(STATUSES), default=None, help="Filter by status.")
@click.pass_obj
def customer_list(app: Container, status: str | None) -> None:
    """List customers with their derived status."""
    customers = unwrap(app.rental_service().list_customers(status))

    if not customers:
        click.echo("No customers found.")
        return
    click.echo(f"{'ID':<6} {'Name':<28} {'Phone':<14} {'Status':<12} {'Rentals':>8}")
    click.echo("-" * 72)
    for c in customers:
        click.echo(f"{c.id:<6} {c.full_name:<28} {c.phone:<14} {c.status:<12} {c.rental_count:>8}")


@click.command("status")
@click.option("--id", "customer_id", required=True, type=int, help="Customer ID.")
@click.pass_obj
def customer_status(app: Container, customer_id: int) -> None:
    """Show a customer's current status."""
    dto = unwrap(app.rental_service().customer_status(customer_id))
    click.echo(f"Customer #{dto.customer_id}: {dto.status.value} ({dto.rental_count} rentals)")


@click.command("set-status")
@click.option("--id", "customer_id", required=True, type=int, help="Customer ID.")
@click.option("--status", required=True, type=click.Choice(STATUSES), help="New status.")
@click.pass_obj
def customer_set_status(app: Container, customer_id: int, status: str) -> None:
    """Manually set a customer's status."""
    unwrap(app.rental_service().set_customer_status(customer_id, status))
    click.echo(f"Customer #{customer_id} set to {status}.")
