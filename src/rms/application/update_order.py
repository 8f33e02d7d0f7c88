"""Application service: Update Order Details use case.

Rescheduling re-runs the conflict check against every other live order on
the item, under the item lock, before anything is saved. A new range may
not start or end before today.
"""

from __future__ import annotations

from datetime import date

import structlog

from rms.application.dto import OrderDTO, order_to_dto
from rms.application.locking import KeyedLock
from rms.domain.clock import Clock, SystemClock
from rms.domain.exceptions import EntityNotFoundError, SlotUnavailableError, ValidationError
from rms.domain.model.order import Order
from rms.domain.model.value_objects import DateRange
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.service.availability_service import AvailabilityService

logger = structlog.get_logger(__name__)


class UpdateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        item_repo: ItemRepository,
        locks: KeyedLock | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._item_repo = item_repo
        self._locks = locks or KeyedLock()
        self._clock = clock or SystemClock()

    def handle(
        self,
        order_id: int,
        delivery_date: date | None = None,
        due_date: date | None = None,
        notes: str | None = None,
    ) -> OrderDTO:
        order = self._load_editable(order_id)

        with self._locks.hold(order.item_id):
            # Another request may have closed the order while we waited.
            order = self._load_editable(order_id)
            period = DateRange(
                delivery_date or order.delivery_date,
                due_date or order.due_date,
            )
            if period != order.period:
                self._reject_past(order, period)
                result = AvailabilityService(self._item_repo, self._order_repo).check_availability(
                    order.item_id, period.start, period.end, exclude_order_id=order.id
                )
                if not result.available:
                    raise SlotUnavailableError(
                        f"Item '{order.item_id}' is already reserved for {period} "
                        f"(order #{result.conflicting_order_id})",
                        conflicting_order_id=result.conflicting_order_id,
                    )
                order.reschedule(period)
            if notes is not None:
                order.notes = notes.strip()
            self._order_repo.save(order)

        logger.info("Order updated", order_id=order.id, period=str(order.period))
        return order_to_dto(order)

    def _load_editable(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        if order.status.is_terminal:
            raise ValidationError(
                f"Order #{order_id} is {order.status.value} and can no longer be edited"
            )
        return order

    def _reject_past(self, order: Order, period: DateRange) -> None:
        # An order already delivered keeps its past delivery date.
        today = self._clock.today()
        if period.start != order.delivery_date and period.start < today:
            raise ValidationError(
                f"Delivery date {period.start.isoformat()} is in the past (today is {today.isoformat()})"
            )
        if period.end < today:
            raise ValidationError(
                f"Due date {period.end.isoformat()} is in the past (today is {today.isoformat()})"
            )
