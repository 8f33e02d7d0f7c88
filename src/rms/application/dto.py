"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the callers (CLI, service boundary) and the
application layer without exposing domain internals. Dates stay calendar
dates; money is pre-formatted for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from rms.domain.model.customer import Customer, CustomerStatus
from rms.domain.model.item import Item
from rms.domain.model.order import Order


@dataclass(frozen=True)
class ReservationRequest:
    """Input: what staff asked to reserve."""

    item_id: str
    customer_id: int
    staff_id: str
    delivery_date: date
    due_date: date
    advance_payment: str | Decimal | int = "0"
    notes: str = ""
    event_date: date | None = None
    discount_percentage: int = 0
    contract_url: str | None = None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a reservation as displayed to staff."""

    id: int
    item_id: str
    customer_id: int
    staff_id: str
    status: str
    delivery_date: date
    due_date: date
    rental_fee: str  # formatted, e.g. "$1500.00"
    discount_percentage: int
    advance_payment: str
    penalty_fee: str
    total_due: str
    balance: str
    notes: str
    created_at: str
    event_date: date | None = None
    return_date: date | None = None
    contract_url: str | None = None
    status_notes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ItemDTO:
    id: str
    name: str
    price: str
    status: str
    rental_count: int
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class CustomerDTO:
    id: int
    full_name: str
    phone: str
    status: str  # derived by the classification rule
    stored_status: str
    rental_count: int
    email: str | None = None
    id_document_url: str | None = None


@dataclass(frozen=True)
class CustomerStatusDTO:
    customer_id: int
    status: CustomerStatus
    rental_count: int


@dataclass(frozen=True)
class AvailabilityDTO:
    item_id: str
    available: bool
    conflicting_order_id: int | None = None


class ActivityKind(Enum):
    CREATED = "created"
    DELIVERY = "delivery"
    RETURN = "return"


@dataclass(frozen=True)
class ActivityDTO:
    order_id: int
    kind: ActivityKind
    item_id: str
    customer_id: int
    status: str
    date: date


@dataclass(frozen=True)
class DashboardDTO:
    """Headline counts for the shop dashboard."""

    active_rentals: int
    pending_returns: int
    cancellations: int
    total_customers: int
    rentals_today: int
    rentals_this_month: int
    rentals_this_year: int
    top_item_id: str | None = None
    top_item_name: str | None = None
    top_item_rentals: int = 0


@dataclass(frozen=True)
class PeriodCountDTO:
    label: str
    start: date
    count: int


@dataclass(frozen=True)
class HistorySummaryDTO:
    total_rentals: int
    cancellations: int
    revenue: str
    busiest_day: date | None = None
    busiest_day_rentals: int = 0


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        item_id=order.item_id,
        customer_id=order.customer_id,
        staff_id=order.staff_id,
        status=order.status.value,
        delivery_date=order.delivery_date,
        due_date=order.due_date,
        rental_fee=str(order.rental_fee),
        discount_percentage=order.discount_percentage,
        advance_payment=str(order.advance_payment),
        penalty_fee=str(order.penalty_fee),
        total_due=str(order.total_due),
        balance=str(order.balance),
        notes=order.notes,
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        event_date=order.event_date,
        return_date=order.return_date,
        contract_url=order.contract_url,
        status_notes=[f"{n.status.value}: {n.text}" for n in order.status_notes],
    )


def item_to_dto(item: Item) -> ItemDTO:
    return ItemDTO(
        id=item.id,
        name=item.name,
        price=str(item.price),
        status=item.status.value,
        rental_count=item.rental_count,
        size=item.size,
        color=item.color,
    )


def customer_to_dto(customer: Customer, status: CustomerStatus, count: int) -> CustomerDTO:
    return CustomerDTO(
        id=customer.id,  # type: ignore[arg-type]
        full_name=customer.full_name,
        phone=customer.phone,
        status=status.value,
        stored_status=customer.status.value,
        rental_count=count,
        email=customer.email,
        id_document_url=customer.id_document_url,
    )
