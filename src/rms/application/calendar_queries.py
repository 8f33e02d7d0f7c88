"""Application services: calendar and notification projections.

Read-only views over the current order rows. Every order can produce up to
three activities: the day it was created, its delivery date and its due
(return) date.
"""

from __future__ import annotations

from collections import Counter
from datetime import date

from rms.application.dto import ActivityDTO, ActivityKind
from rms.domain.clock import Clock, SystemClock, add_days, day_bucket, month_days
from rms.domain.exceptions import ValidationError
from rms.domain.model.order import Order
from rms.domain.repository.order_repository import OrderRepository

DEFAULT_UPCOMING_LIMIT = 20

_KIND_ORDER = {ActivityKind.CREATED: 0, ActivityKind.DELIVERY: 1, ActivityKind.RETURN: 2}


def activities_of(order: Order) -> list[ActivityDTO]:
    dates = (
        (ActivityKind.CREATED, day_bucket(order.created_at)),
        (ActivityKind.DELIVERY, order.delivery_date),
        (ActivityKind.RETURN, order.due_date),
    )
    return [
        ActivityDTO(
            order_id=order.id,  # type: ignore[arg-type]
            kind=kind,
            item_id=order.item_id,
            customer_id=order.customer_id,
            status=order.status.value,
            date=day,
        )
        for kind, day in dates
    ]


def parse_activity_kind(value: str | ActivityKind) -> ActivityKind:
    if isinstance(value, ActivityKind):
        return value
    try:
        return ActivityKind(value.strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown activity kind '{value}'") from exc


class ActivitiesForDayHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, day: date) -> list[ActivityDTO]:
        day = day_bucket(day)
        activities = [
            a
            for order in self._order_repo.list_touching(day, day)
            for a in activities_of(order)
            if a.date == day
        ]
        return sorted(activities, key=lambda a: (_KIND_ORDER[a.kind], a.order_id))


class UpcomingWithinDaysHandler:
    """Deliveries or returns of live orders due in the next ``n`` days."""

    def __init__(self, order_repo: OrderRepository, clock: Clock | None = None) -> None:
        self._order_repo = order_repo
        self._clock = clock or SystemClock()

    def handle(
        self,
        days: int,
        kind: str | ActivityKind,
        limit: int | None = DEFAULT_UPCOMING_LIMIT,
    ) -> list[ActivityDTO]:
        if days < 0:
            raise ValidationError("Number of days cannot be negative")
        wanted = parse_activity_kind(kind)
        if wanted == ActivityKind.CREATED:
            raise ValidationError("Upcoming activities are deliveries or returns")

        start = self._clock.today()
        end = add_days(start, days)
        upcoming = [
            a
            for order in self._order_repo.list_touching(start, end)
            if order.is_live
            for a in activities_of(order)
            if a.kind == wanted and start <= a.date <= end
        ]
        upcoming.sort(key=lambda a: (a.date, a.order_id))
        return upcoming[:limit] if limit is not None else upcoming


class MonthOverviewHandler:
    """Activity counts per day, for a month calendar grid."""

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, year: int, month: int) -> dict[date, Counter[ActivityKind]]:
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month {month}")
        days = month_days(year, month)
        overview: dict[date, Counter[ActivityKind]] = {d: Counter() for d in days}
        for order in self._order_repo.list_touching(days[0], days[-1]):
            for activity in activities_of(order):
                if activity.date in overview:
                    overview[activity.date][activity.kind] += 1
        return overview


class OverdueReturnsHandler:

    def __init__(self, order_repo: OrderRepository, clock: Clock | None = None) -> None:
        self._order_repo = order_repo
        self._clock = clock or SystemClock()

    def handle(self) -> list[ActivityDTO]:
        today = self._clock.today()
        overdue = [
            a
            for order in self._order_repo.list_all()
            if order.is_live and order.due_date < today
            for a in activities_of(order)
            if a.kind == ActivityKind.RETURN
        ]
        return sorted(overdue, key=lambda a: (a.date, a.order_id))
