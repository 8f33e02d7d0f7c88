"""Domain service: Reservation Conflict Resolver.

Decides whether an item can be reserved for a date range by looking at the
live (pending / on course) orders already placed against it. Read-only and
never cached: order creation runs it again under the item lock.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from rms.domain.clock import event_window
from rms.domain.exceptions import EntityNotFoundError
from rms.domain.model.item import Item
from rms.domain.model.value_objects import DateRange
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflicting_order_id: int | None = None


class AvailabilityService:

    def __init__(
        self,
        item_repo: ItemRepository,
        order_repo: OrderRepository,
    ) -> None:
        self._item_repo = item_repo
        self._order_repo = order_repo

    def check_availability(
        self,
        item_id: str,
        delivery_date: date,
        due_date: date,
        exclude_order_id: int | None = None,
    ) -> AvailabilityResult:
        """Report the lowest-id live order overlapping the range, if any.

        ``exclude_order_id`` lets an order being rescheduled ignore itself.
        Raises ValidationError for an inverted range and EntityNotFoundError
        for an unknown item.
        """
        requested = DateRange(delivery_date, due_date)
        if self._item_repo.get_by_id(item_id) is None:
            raise EntityNotFoundError(f"Item '{item_id}' not found")

        conflicts = sorted(
            o.id
            for o in self._order_repo.list_for_item(item_id, live_only=True)
            if o.id != exclude_order_id and o.period.overlaps(requested)
        )
        if conflicts:
            return AvailabilityResult(available=False, conflicting_order_id=conflicts[0])
        return AvailabilityResult(available=True)

    def find_available_items(self, delivery_date: date, due_date: date) -> list[Item]:
        """Rentable items with no live order overlapping the range."""
        requested = DateRange(delivery_date, due_date)
        occupied = {
            o.item_id
            for o in self._order_repo.list_all()
            if o.is_live and o.period.overlaps(requested)
        }
        return [
            item for item in self._item_repo.list_all()
            if item.status.is_rentable and item.id not in occupied
        ]

    def find_available_for_event(self, event_date: date) -> list[Item]:
        window = event_window(event_date)
        return self.find_available_items(window.start, window.end)
