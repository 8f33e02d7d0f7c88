"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions. Nothing here is a
process-wide singleton: callers build a Container and pass it along.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rms.application.locking import KeyedLock
from rms.application.service import RentalService
from rms.domain.clock import Clock, SystemClock
from rms.infrastructure.config import Settings
from rms.infrastructure.persistence.json_customer_repository import (
    JsonCustomerRepository,
)
from rms.infrastructure.persistence.json_item_repository import JsonItemRepository
from rms.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)


@dataclass
class Container:
    settings: Settings
    clock: Clock = field(default_factory=SystemClock)

    def __post_init__(self) -> None:
        data_dir = self.settings.data_dir
        self.item_repo = JsonItemRepository(data_dir / "items.json")
        self.order_repo = JsonOrderRepository(data_dir / "orders.json")
        self.customer_repo = JsonCustomerRepository(data_dir / "customers.json")
        self.locks = KeyedLock(
            self.settings.lock_timeout_seconds, lock_dir=data_dir / "locks"
        )

    def rental_service(self) -> RentalService:
        return RentalService(
            item_repo=self.item_repo,
            order_repo=self.order_repo,
            customer_repo=self.customer_repo,
            locks=self.locks,
            clock=self.clock,
        )
