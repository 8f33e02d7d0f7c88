"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from rms.domain.model.order import LIVE_STATUSES, Order


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, ordered by ID."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order (assigns an ID to new ones)."""

    # --- Filter queries -------------------------------------------------------
    # Backends with real query support should override these.

    def list_for_item(self, item_id: str, live_only: bool = False) -> list[Order]:
        return [
            o for o in self.list_all()
            if o.item_id == item_id and (not live_only or o.status in LIVE_STATUSES)
        ]

    def list_for_customer(self, customer_id: int) -> list[Order]:
        return [o for o in self.list_all() if o.customer_id == customer_id]

    def list_touching(self, start: date, end: date) -> list[Order]:
        """Orders created, delivered or due within ``[start, end]``."""
        return [
            o for o in self.list_all()
            if start <= o.created_at.date() <= end
            or start <= o.delivery_date <= end
            or start <= o.due_date <= end
        ]
