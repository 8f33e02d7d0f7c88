"""Application service: Create Order use case.

Orchestrates the conflict resolver, the item registry and the Order
aggregate. The availability check and both writes happen while holding the
item's lock, so two overlapping reservations on one item can never both
succeed. The item is reserved first; if the order then fails to persist the
reservation is rolled back before the error propagates.
"""

from __future__ import annotations

import structlog

from rms.application.dto import OrderDTO, ReservationRequest, order_to_dto
from rms.application.locking import KeyedLock
from rms.domain.clock import Clock, SystemClock
from rms.domain.exceptions import (
    EntityNotFoundError,
    ItemNotRentableError,
    SlotUnavailableError,
    ValidationError,
)
from rms.domain.model.customer import CustomerStatus
from rms.domain.model.order import Order
from rms.domain.model.value_objects import DateRange, Money
from rms.domain.repository.customer_repository import CustomerRepository
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.service.availability_service import AvailabilityService
from rms.domain.service.customer_classification import classify, rental_count
from rms.domain.service.item_registry import ItemRegistry

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        item_repo: ItemRepository,
        customer_repo: CustomerRepository,
        locks: KeyedLock | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._item_repo = item_repo
        self._customer_repo = customer_repo
        self._locks = locks or KeyedLock()
        self._clock = clock or SystemClock()

    def handle(self, request: ReservationRequest) -> OrderDTO:
        """Reserve an item for a customer.

        Steps:
        1. Validate the range (not before today), the customer and the discount.
        2. Under the item lock, re-run the conflict check.
        3. Reserve the item (compare-and-set on the status we observed).
        4. Persist the order; undo step 3 if that fails.
        """
        period = DateRange(request.delivery_date, request.due_date)
        today = self._clock.today()
        if period.start < today:
            raise ValidationError(
                f"Delivery date {period.start.isoformat()} is in the past "
                f"(today is {today.isoformat()})"
            )
        advance = Money.of(request.advance_payment)
        registry = ItemRegistry(self._item_repo)
        registry.get(request.item_id)

        customer = self._customer_repo.get_by_id(request.customer_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer #{request.customer_id} not found")
        if request.discount_percentage:
            count = rental_count(customer.id, self._order_repo.list_for_customer(customer.id))
            if classify(customer, count) != CustomerStatus.FREQUENT:
                raise ValidationError(
                    f"Discounts are reserved for frequent customers; "
                    f"{customer.full_name} has {count} rental(s)"
                )

        availability = AvailabilityService(self._item_repo, self._order_repo)

        with self._locks.hold(request.item_id):
            result = availability.check_availability(
                request.item_id, period.start, period.end
            )
            if not result.available:
                logger.info(
                    "Reservation rejected",
                    item_id=request.item_id,
                    period=str(period),
                    conflicting_order_id=result.conflicting_order_id,
                )
                raise SlotUnavailableError(
                    f"Item '{request.item_id}' is already reserved for {period} "
                    f"(order #{result.conflicting_order_id})",
                    conflicting_order_id=result.conflicting_order_id,
                )

            item = registry.get(request.item_id)
            if not item.status.is_rentable:
                raise ItemNotRentableError(
                    f"Item '{item.name}' is {item.status.value} and cannot be rented"
                )

            order = Order.create(
                item_id=item.id,
                customer_id=customer.id,  # type: ignore[arg-type]
                staff_id=request.staff_id,
                period=period,
                rental_fee=item.price,  # fee snapshot
                advance_payment=advance,
                notes=request.notes,
                event_date=request.event_date,
                discount_percentage=request.discount_percentage,
                contract_url=request.contract_url,
                created_at=self._clock.now(),
            )

            observed = item.status
            registry.reserve(item.id, observed)
            try:
                self._order_repo.save(order)
            except Exception:
                registry.unreserve(item.id, observed)
                raise

        logger.info(
            "Order created",
            order_id=order.id,
            item_id=order.item_id,
            customer_id=order.customer_id,
            staff_id=order.staff_id,
            period=str(period),
        )
        return order_to_dto(order)
