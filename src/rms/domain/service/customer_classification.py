"""Domain rule: customer classification.

A pure projection over the order set, evaluated on every read. Customers
with three or more orders are shown as ``frequent`` unless they are
blacklisted. Nothing is persisted and nothing is ever demoted: a manual
revert to ``active`` is re-promoted on the next read while the threshold
still holds.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from rms.domain.model.customer import Customer, CustomerStatus
from rms.domain.model.order import Order

FREQUENT_THRESHOLD = 3


def rental_count(customer_id: int, orders: Iterable[Order]) -> int:
    return sum(1 for o in orders if o.customer_id == customer_id)


def rental_counts(orders: Iterable[Order]) -> Counter[int]:
    """Orders per customer in one pass, for list views."""
    return Counter(o.customer_id for o in orders)


def classify(customer: Customer, count: int) -> CustomerStatus:
    if count >= FREQUENT_THRESHOLD and customer.status not in (
        CustomerStatus.BLACKLISTED,
        CustomerStatus.FREQUENT,
    ):
        return CustomerStatus.FREQUENT
    return customer.status
