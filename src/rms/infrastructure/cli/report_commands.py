"""CLI commands for the dashboard and rental history reports."""

from __future__ import annotations

import click

from rms.application.reports import Granularity
from rms.infrastructure.bootstrap import Container
from rms.infrastructure.cli.results import unwrap

DATE = click.DateTime(formats=["%Y-%m-%d"])


def _day(value):
    return value.date() if value else None


@click.command("dashboard")
@click.pass_obj
def report_dashboard(app: Container) -> None:
    """Headline numbers for today."""
    stats = unwrap(app.rental_service().dashboard())
    rows = (
        ("Active rentals", stats.active_rentals),
        ("Pending returns", stats.pending_returns),
        ("Cancellations", stats.cancellations),
        ("Customers", stats.total_customers),
        ("Rentals today", stats.rentals_today),
        ("Rentals this month", stats.rentals_this_month),
        ("Rentals this year", stats.rentals_this_year),
    )
    for title, value in rows:
        click.echo(f"{title:<20} {value:>6}")
    if stats.top_item_id is None:
        click.echo(f"{'Top item':<20} {'-':>6}")
    else:
        name = stats.top_item_name or f"#{stats.top_item_id}"
        click.echo(f"{'Top item':<20} {name} ({stats.top_item_rentals} rentals)")


@click.command("rentals")
@click.option(
    "--by",
    "granularity",
    type=click.Choice([g.value for g in Granularity]),
    default=Granularity.DAY.value,
    show_default=True,
    help="Bucket size.",
)
@click.option("--from", "start", type=DATE, default=None, help="First day counted.")
@click.option("--to", "end", type=DATE, default=None, help="Last day counted (default today).")
@click.pass_obj
def report_rentals(app: Container, granularity: str, start, end) -> None:
    """Orders created per day, month or year."""
    rows = unwrap(app.rental_service().rentals_by_period(granularity, _day(start), _day(end)))
    click.echo(f"{'Period':<10} {'Rentals':>8}")
    for row in rows:
        click.echo(f"{row.label:<10} {row.count:>8}")


@click.command("history")
@click.option("--from", "start", type=DATE, default=None, help="Created on or after this date.")
@click.option("--to", "end", type=DATE, default=None, help="Created on or before this date.")
@click.pass_obj
def report_history(app: Container, start, end) -> None:
    """Totals for the orders created in a date range."""
    summary = unwrap(app.rental_service().history_summary(_day(start), _day(end)))
    click.echo(f"{'Rentals':<14} {summary.total_rentals:>10}")
    click.echo(f"{'Cancellations':<14} {summary.cancellations:>10}")
    click.echo(f"{'Revenue':<14} {summary.revenue:>10}")
    if summary.busiest_day is not None:
        click.echo(
            f"{'Busiest day':<14} {summary.busiest_day.isoformat():>10} "
            f"({summary.busiest_day_rentals} rentals)"
        )
