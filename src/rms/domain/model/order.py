"""Order aggregate: the reservation of one item by one customer.

The Order owns its lifecycle. The allowed status changes form a small
directed graph; every other change is rejected here, before any handler
touches the item.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum

from rms.domain.exceptions import (
    InvalidTransitionError,
    MissingNotesError,
    ValidationError,
)
from rms.domain.model.value_objects import DateRange, Money


class OrderStatus(Enum):
    PENDING = "pending"
    ON_COURSE = "on_course"
    FINISHED = "finished"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({OrderStatus.FINISHED, OrderStatus.CANCELED})
LIVE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.ON_COURSE})

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.ON_COURSE, OrderStatus.FINISHED, OrderStatus.CANCELED}
    ),
    OrderStatus.ON_COURSE: frozenset({OrderStatus.FINISHED, OrderStatus.CANCELED}),
    OrderStatus.FINISHED: frozenset(),
    OrderStatus.CANCELED: frozenset(),
}

# Discounts staff may grant to frequent customers, in percent.
DISCOUNT_OPTIONS = (0, 10, 20, 30, 50, 100)


@dataclass(frozen=True)
class StatusNote:
    """Explanation recorded with a terminal transition."""

    status: OrderStatus
    text: str
    recorded_at: datetime


@dataclass
class Order:
    """Aggregate root for reservations.

    Use ``Order.create()`` for new orders; it enforces the creation rules.
    ``__init__`` stays simple so repositories can rebuild stored orders
    without re-validating them.
    """

    id: int | None
    item_id: str
    customer_id: int
    staff_id: str
    delivery_date: date
    due_date: date
    rental_fee: Money
    status: OrderStatus = OrderStatus.PENDING
    advance_payment: Money = field(default_factory=Money.zero)
    penalty_fee: Money = field(default_factory=Money.zero)
    discount_percentage: int = 0
    notes: str = ""
    event_date: date | None = None
    return_date: date | None = None
    contract_url: str | None = None
    status_notes: list[StatusNote] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        item_id: str,
        customer_id: int,
        staff_id: str,
        period: DateRange,
        rental_fee: Money,
        advance_payment: Money | None = None,
        notes: str = "",
        event_date: date | None = None,
        discount_percentage: int = 0,
        contract_url: str | None = None,
        created_at: datetime | None = None,
    ) -> Order:
        if not staff_id or not str(staff_id).strip():
            raise ValidationError("Staff id is required")
        if discount_percentage not in DISCOUNT_OPTIONS:
            raise ValidationError(
                f"Discount must be one of {', '.join(map(str, DISCOUNT_OPTIONS))} percent"
            )

        order = Order(
            id=None,
            item_id=item_id,
            customer_id=customer_id,
            staff_id=str(staff_id).strip(),
            delivery_date=period.start,
            due_date=period.end,
            rental_fee=rental_fee,
            advance_payment=advance_payment or Money.zero(),
            discount_percentage=discount_percentage,
            notes=(notes or "").strip(),
            event_date=event_date,
            contract_url=contract_url,
        )
        if created_at is not None:
            order.created_at = created_at

        if order.total_due < order.advance_payment:
            raise ValidationError(
                f"Advance payment {order.advance_payment} exceeds the amount due {order.total_due}"
            )
        return order

    # --- State transitions ----------------------------------------------------

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in TRANSITIONS[self.status]

    def transition_to(
        self,
        new_status: OrderStatus,
        notes: str | None = None,
        on: datetime | None = None,
        penalty_fee: Money | None = None,
    ) -> bool:
        """Move the order along the lifecycle graph.

        Returns False when ``new_status`` is the current status (no-op) and
        True when the order changed. Terminal targets require notes; a
        finished order records its return date and any penalty, which no
        other target accepts.
        """
        if new_status == self.status:
            return False
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot move order #{self.id} from {self.status.value} to {new_status.value}"
            )
        if new_status.is_terminal and not (notes and notes.strip()):
            raise MissingNotesError(
                f"Notes are required to mark order #{self.id} as {new_status.value}"
            )
        if penalty_fee is not None and new_status != OrderStatus.FINISHED:
            raise ValidationError(
                f"A penalty can only be charged when finishing order #{self.id}, "
                f"not when it becomes {new_status.value}"
            )

        when = on or datetime.now(timezone.utc)
        if new_status.is_terminal:
            self.status_notes.append(StatusNote(new_status, notes.strip(), when))
        if new_status == OrderStatus.FINISHED:
            self.return_date = when.date()
            if penalty_fee is not None:
                self.penalty_fee = penalty_fee
        self.status = new_status
        return True

    def reschedule(self, period: DateRange) -> None:
        if self.status.is_terminal:
            raise ValidationError(
                f"Order #{self.id} is {self.status.value} and can no longer be edited"
            )
        self.delivery_date = period.start
        self.due_date = period.end

    # --- Queries --------------------------------------------------------------

    @property
    def is_live(self) -> bool:
        return self.status in LIVE_STATUSES

    @property
    def created_on(self) -> date:
        return self.created_at.date()

    @property
    def period(self) -> DateRange:
        return DateRange(self.delivery_date, self.due_date)

    def claims_item_on(self, today: date) -> bool:
        """True while this order keeps its item out of circulation.

        A live order claims the item until its due date; an order that is
        on course keeps claiming it after that, until it is returned.
        """
        if not self.is_live:
            return False
        return self.due_date >= today or self.status == OrderStatus.ON_COURSE

    @property
    def discount(self) -> Money:
        return self.rental_fee.percentage(self.discount_percentage)

    @property
    def total_due(self) -> Money:
        return self.rental_fee - self.discount + self.penalty_fee

    @property
    def balance(self) -> Money:
        if self.total_due <= self.advance_payment:
            return Money.zero()
        return self.total_due - self.advance_payment
