from pathlib import Path

import click

from rms.domain.clock import FixedClock, SystemClock
from rms.infrastructure.bootstrap import Container
from rms.infrastructure.cli.calendar_commands import (
    calendar_day,
    calendar_month,
    calendar_overdue,
    calendar_upcoming,
)
from rms.infrastructure.cli.customer_commands import (
    customer_add,
    customer_list,
    customer_set_status,
    customer_status,
)
from rms.infrastructure.cli.item_commands import (
    item_add,
    item_available,
    item_list,
    item_status,
    item_update,
)
from rms.infrastructure.cli.order_commands import (
    order_check,
    order_create,
    order_edit,
    order_list,
    order_show,
    order_status,
    reconcile,
)
from rms.infrastructure.cli.report_commands import (
    report_dashboard,
    report_history,
    report_rentals,
)
from rms.infrastructure.config import Settings
from rms.infrastructure.logging import configure_logging


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the JSON data files.",
)
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Pretend today is this date (YYYY-MM-DD).",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path | None, today) -> None:
    """RMS: dress rental management"""
    settings = Settings.from_env()
    if data_dir is not None:
        settings = Settings(
            data_dir=data_dir,
            lock_timeout_seconds=settings.lock_timeout_seconds,
            upcoming_days=settings.upcoming_days,
            log_level=settings.log_level,
            log_json=settings.log_json,
        )
    configure_logging(settings)
    clock = FixedClock(today.date()) if today is not None else SystemClock()
    ctx.obj = Container(settings=settings, clock=clock)


@cli.group()
def item() -> None:
    """Manage inventory items."""


@cli.group()
def order() -> None:
    """Manage reservations."""


@cli.group()
def customer() -> None:
    """Manage customers."""


@cli.group()
def calendar() -> None:
    """Calendar and notifications."""


@cli.group()
def report() -> None:
    """Dashboard and rental history."""


# Register subcommands
item.add_command(item_add)
item.add_command(item_available)
item.add_command(item_list)
item.add_command(item_status)
item.add_command(item_update)
order.add_command(order_check)
order.add_command(order_create)
order.add_command(order_edit)
order.add_command(order_list)
order.add_command(order_show)
order.add_command(order_status)
customer.add_command(customer_add)
customer.add_command(customer_list)
customer.add_command(customer_set_status)
customer.add_command(customer_status)
calendar.add_command(calendar_day)
calendar.add_command(calendar_month)
calendar.add_command(calendar_overdue)
calendar.add_command(calendar_upcoming)
report.add_command(report_dashboard)
report.add_command(report_history)
report.add_command(report_rentals)
cli.add_command(reconcile)
