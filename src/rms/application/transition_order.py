"""Application service: Transition Order Status use case.

Validates the requested change against the lifecycle graph (inside the
Order aggregate) and, on a terminal transition, releases the item unless
another live order still claims it.
"""

from __future__ import annotations

import structlog

from rms.application.dto import OrderDTO, order_to_dto
from rms.application.locking import KeyedLock
from rms.domain.clock import Clock, SystemClock
from rms.domain.exceptions import EntityNotFoundError, ValidationError
from rms.domain.model.order import Order, OrderStatus
from rms.domain.model.value_objects import Money
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.service.item_registry import ItemRegistry

logger = structlog.get_logger(__name__)


def parse_order_status(value: str | OrderStatus) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Unknown order status '{value}' (expected one of {allowed})") from exc


class TransitionOrderHandler:

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
        new_status: str | OrderStatus,
        notes: str | None = None,
        penalty_fee: str | None = None,
    ) -> OrderDTO:
        status = parse_order_status(new_status)
        penalty = Money.of(penalty_fee) if penalty_fee is not None else None
        order = self._load(order_id)

        with self._locks.hold(order.item_id):
            order = self._load(order_id)
            previous = order.status
            changed = order.transition_to(
                status, notes=notes, on=self._clock.now(), penalty_fee=penalty
            )
            if not changed:
                return order_to_dto(order)

            self._order_repo.save(order)
            logger.info(
                "Order status changed",
                order_id=order.id,
                previous=previous.value,
                status=status.value,
            )

            if status.is_terminal:
                self._release_item(order)

        return order_to_dto(order)

    # --- Internal helpers -----------------------------------------------------

    def _load(self, order_id: int) -> Order:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order

    def _release_item(self, order: Order) -> None:
        today = self._clock.today()
        still_claimed = [
            o.id
            for o in self._order_repo.list_for_item(order.item_id, live_only=True)
            if o.id != order.id and o.claims_item_on(today)
        ]
        if still_claimed:
            logger.info(
                "Item kept reserved",
                item_id=order.item_id,
                claimed_by=still_claimed,
            )
            return
        ItemRegistry(self._item_repo).release(order.item_id)
