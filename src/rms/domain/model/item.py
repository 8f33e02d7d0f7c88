"""Item aggregate: a unique rentable dress.

Items live independently of orders. Their ``status`` is owned by the
ItemRegistry; callers never assign it directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rms.domain.exceptions import ValidationError
from rms.domain.model.value_objects import Money


class ItemStatus(Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"
    DAMAGED = "damaged"
    UNLISTED = "unlisted"

    @property
    def is_rentable(self) -> bool:
        return self in (ItemStatus.AVAILABLE, ItemStatus.RESERVED)

    @property
    def is_manual_override(self) -> bool:
        return not self.is_rentable


@dataclass
class Item:
    """Aggregate root for inventory.

    ``rental_count`` only grows; the registry decrements it solely to roll
    back a reservation that was never committed.
    """

    id: str
    name: str
    price: Money
    status: ItemStatus = ItemStatus.AVAILABLE
    rental_count: int = 0
    size: str | None = None
    color: str | None = None
    description: str | None = None
    image_url: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(item_id: str, name: str, price: Money, **details: str | None) -> Item:
        if not name or not name.strip():
            raise ValidationError("Item name is required")
        if price.is_zero:
            raise ValidationError("Rental price must be greater than zero")
        return Item(id=item_id, name=name.strip(), price=price, **details)

    def update_price(self, new_price: Money) -> None:
        """Change the rental fee.

        Existing orders are unaffected: they keep the fee captured when
        they were reserved.
        """
        if new_price.is_zero:
            raise ValidationError("Rental price must be greater than zero")
        self.price = new_price
