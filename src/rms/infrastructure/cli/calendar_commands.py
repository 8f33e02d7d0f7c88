"""CLI commands for the calendar and notifications."""

from __future__ import annotations

import click

from rms.application.dto import ActivityKind
from rms.infrastructure.bootstrap import Container
from rms.infrastructure.cli.results import unwrap

DATE = click.DateTime(formats=["%Y-%m-%d"])

PLURALS = {ActivityKind.DELIVERY.value: "deliveries", ActivityKind.RETURN.value: "returns"}


def _print_activities(activities) -> None:
    if not activities:
        click.echo("Nothing scheduled.")
        return
    click.echo(f"{'Date':<10} {'Kind':<9} {'Order':>6} {'Item':>6} {'Customer':>9}  {'Status':<10}")
    click.echo("-" * 58)
    for a in activities:
        click.echo(
            f"{a.date.isoformat():<10} {a.kind.value:<9} {a.order_id:>6} "
            f"{a.item_id:>6} {a.customer_id:>9}  {a.status:<10}"
        )


@click.command("day")
@click.argument("day", type=DATE)
@click.pass_obj
def calendar_day(app: Container, day) -> None:
    """Everything created, delivered or due on DAY."""
    _print_activities(unwrap(app.rental_service().activities_for_day(day.date())))


@click.command("upcoming")
@click.option("--days", type=int, default=None, help="Look-ahead window (default from settings).")
@click.option(
    "--kind",
    type=click.Choice([ActivityKind.DELIVERY.value, ActivityKind.RETURN.value]),
    default=None,
    help="Only deliveries or only returns (default: both).",
)
@click.pass_obj
def calendar_upcoming(app: Container, days: int | None, kind: str | None) -> None:
    """Upcoming deliveries and returns."""
    window = days if days is not None else app.settings.upcoming_days
    service = app.rental_service()
    kinds = [kind] if kind else [ActivityKind.DELIVERY.value, ActivityKind.RETURN.value]
    for k in kinds:
        click.echo(f"Upcoming {PLURALS[k]} (next {window} days):")
        _print_activities(unwrap(service.upcoming_within_days(window, k)))
        click.echo()


@click.command("month")
@click.argument("year", type=int)
@click.argument("month", type=click.IntRange(1, 12))
@click.pass_obj
def calendar_month(app: Container, year: int, month: int) -> None:
    """Activity counts per day for a month."""
    overview = unwrap(app.rental_service().month_overview(year, month))
    click.echo(f"{'Date':<10} {'Created':>8} {'Deliver':>8} {'Return':>8}")
    for day, counts in overview.items():
        if not counts:
            continue
        click.echo(
            f"{day.isoformat():<10} {counts[ActivityKind.CREATED]:>8} "
            f"{counts[ActivityKind.DELIVERY]:>8} {counts[ActivityKind.RETURN]:>8}"
        )


@click.command("overdue")
@click.pass_obj
def calendar_overdue(app: Container) -> None:
    """Live orders past their due date."""
    _print_activities(unwrap(app.rental_service().overdue_returns()))
