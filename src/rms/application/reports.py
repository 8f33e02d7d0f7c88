"""Application services: dashboard and rental history reports.

Read-only aggregates over the order rows. A rental is counted on the day
its order was created, whatever its status is now.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from enum import Enum

from rms.application.dto import DashboardDTO, HistorySummaryDTO, PeriodCountDTO
from rms.domain.clock import Clock, SystemClock, add_days
from rms.domain.exceptions import ValidationError
from rms.domain.model.order import Order, OrderStatus
from rms.domain.model.value_objects import Money
from rms.domain.repository.customer_repository import CustomerRepository
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository


class Granularity(Enum):
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


_LABELS = {Granularity.DAY: "%Y-%m-%d", Granularity.MONTH: "%Y-%m", Granularity.YEAR: "%Y"}


def parse_granularity(value: str | Granularity) -> Granularity:
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(value.strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown period '{value}', use day, month or year") from exc


def bucket_start(day: date, granularity: Granularity) -> date:
    if granularity == Granularity.DAY:
        return day
    if granularity == Granularity.MONTH:
        return day.replace(day=1)
    return date(day.year, 1, 1)


def next_bucket(start: date, granularity: Granularity) -> date:
    if granularity == Granularity.DAY:
        return add_days(start, 1)
    if granularity == Granularity.MONTH:
        return date(start.year + start.month // 12, start.month % 12 + 1, 1)
    return date(start.year + 1, 1, 1)


def created_between(orders: list[Order], start: date | None, end: date | None) -> list[Order]:
    """Orders created within ``[start, end]``; a missing bound is open."""
    if start is not None and end is not None and start > end:
        raise ValidationError(
            f"Start date {start.isoformat()} is after end date {end.isoformat()}"
        )
    return [
        o for o in orders
        if (start is None or o.created_on >= start) and (end is None or o.created_on <= end)
    ]


class DashboardStatsHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        item_repo: ItemRepository,
        customer_repo: CustomerRepository,
        clock: Clock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._item_repo = item_repo
        self._customer_repo = customer_repo
        self._clock = clock or SystemClock()

    def handle(self) -> DashboardDTO:
        """Headline numbers as of today.

        Pending returns are orders out with a customer whose due date has
        come. The top item is the one with the most orders of any status;
        on a tie the item ordered first wins.
        """
        today = self._clock.today()
        this_month = bucket_start(today, Granularity.MONTH)
        orders = self._order_repo.list_all()

        top_item_id, top_count = None, 0
        ranking = Counter(o.item_id for o in orders).most_common(1)
        if ranking:
            top_item_id, top_count = ranking[0]
        top_item = self._item_repo.get_by_id(top_item_id) if top_item_id else None

        return DashboardDTO(
            active_rentals=sum(1 for o in orders if o.is_live),
            pending_returns=sum(
                1 for o in orders
                if o.status == OrderStatus.ON_COURSE and o.due_date <= today
            ),
            cancellations=sum(1 for o in orders if o.status == OrderStatus.CANCELED),
            total_customers=len(self._customer_repo.list_all()),
            rentals_today=sum(1 for o in orders if o.created_on == today),
            rentals_this_month=sum(
                1 for o in orders if bucket_start(o.created_on, Granularity.MONTH) == this_month
            ),
            rentals_this_year=sum(1 for o in orders if o.created_on.year == today.year),
            top_item_id=top_item_id,
            top_item_name=top_item.name if top_item else None,
            top_item_rentals=top_count,
        )


class RentalsByPeriodHandler:
    """Orders created per day, month or year, one row per bucket (zeros kept)."""

    def __init__(self, order_repo: OrderRepository, clock: Clock | None = None) -> None:
        self._order_repo = order_repo
        self._clock = clock or SystemClock()

    def handle(
        self,
        granularity: str | Granularity,
        start: date | None = None,
        end: date | None = None,
    ) -> list[PeriodCountDTO]:
        granularity = parse_granularity(granularity)
        orders = self._order_repo.list_all()
        end = end or self._clock.today()
        if start is None:
            start = self._default_start(granularity, end, orders)

        counts = Counter(
            bucket_start(o.created_on, granularity) for o in created_between(orders, start, end)
        )
        rows = []
        bucket = bucket_start(start, granularity)
        while bucket <= end:
            rows.append(PeriodCountDTO(
                label=bucket.strftime(_LABELS[granularity]),
                start=bucket,
                count=counts[bucket],
            ))
            bucket = next_bucket(bucket, granularity)
        return rows

    @staticmethod
    def _default_start(granularity: Granularity, end: date, orders: list[Order]) -> date:
        # day -> this month, month -> this year, year -> since the first order
        if granularity == Granularity.DAY:
            return bucket_start(end, Granularity.MONTH)
        if granularity == Granularity.MONTH:
            return bucket_start(end, Granularity.YEAR)
        first = min((o.created_on for o in orders), default=end)
        return bucket_start(min(first, end), Granularity.YEAR)


class HistorySummaryHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, start: date | None = None, end: date | None = None) -> HistorySummaryDTO:
        orders = created_between(self._order_repo.list_all(), start, end)
        kept = [o for o in orders if o.status != OrderStatus.CANCELED]
        revenue = sum((o.total_due for o in kept), Money.zero())

        busiest_day, busiest_count = None, 0
        ranking = Counter(o.created_on for o in orders).most_common(1)
        if ranking:
            busiest_day, busiest_count = ranking[0]

        return HistorySummaryDTO(
            total_rentals=len(orders),
            cancellations=len(orders) - len(kept),
            revenue=str(revenue),
            busiest_day=busiest_day,
            busiest_day_rentals=busiest_count,
        )
