"""Domain service: Inventory Item Registry.

The registry is the only writer of ``Item.status``. Status changes driven by
reservations go through compare-and-set: the caller states which status it
observed, and the write fails with ConflictError if another writer got there
first. That is what stops two concurrent reservations from both acting on an
item they each saw as ``available``.

``force_status`` is the unconditional path for manual staff overrides.
"""

from __future__ import annotations

import dataclasses

import structlog

from rms.domain.exceptions import ConflictError, EntityNotFoundError, ValidationError
from rms.domain.model.item import Item, ItemStatus
from rms.domain.model.value_objects import Money
from rms.domain.repository.item_repository import ItemRepository

logger = structlog.get_logger(__name__)


class ItemRegistry:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._item_repo = item_repo

    # --- Reads ----------------------------------------------------------------

    def get(self, item_id: str) -> Item:
        item = self._item_repo.get_by_id(item_id)
        if item is None:
            raise EntityNotFoundError(f"Item '{item_id}' not found")
        return item

    def list_all(self, status: ItemStatus | None = None) -> list[Item]:
        items = self._item_repo.list_all()
        if status is not None:
            items = [i for i in items if i.status == status]
        return items

    # --- Administrative -------------------------------------------------------

    def register(self, name: str, price: Money, **details: str | None) -> Item:
        if name and self._item_repo.get_by_name(name.strip()) is not None:
            raise ValidationError(f"Item '{name.strip()}' already exists")
        item = Item.create(self._item_repo.next_id(), name, price, **details)
        self._item_repo.save(item)
        logger.info("Item registered", item_id=item.id, name=item.name, price=str(item.price))
        return item

    def update_details(
        self,
        item_id: str,
        price: Money | None = None,
        **details: str | None,
    ) -> Item:
        """Edit price or descriptive fields. Never touches the status."""
        item = self.get(item_id)
        if price is not None:
            item.update_price(price)
        for name, value in details.items():
            if name not in ("size", "color", "description", "image_url"):
                raise ValidationError(f"Unknown item field '{name}'")
            if value is not None:
                setattr(item, name, value)
        # Conditional on the status we read, so a concurrent status change
        # is never overwritten by a details edit.
        if not self._item_repo.save_if_status(item, item.status):
            raise ConflictError(f"Item '{item_id}' changed while being edited")
        return item

    # --- Status mutation ------------------------------------------------------

    def set_status(
        self,
        item_id: str,
        expected_current: ItemStatus,
        new_status: ItemStatus,
    ) -> Item:
        """Compare-and-set the item status."""
        return self._compare_and_set(item_id, expected_current, new_status)

    def force_status(self, item_id: str, new_status: ItemStatus) -> Item:
        """Unconditional status write for manual overrides."""
        item = self.get(item_id)
        previous = item.status
        item.status = new_status
        self._item_repo.save(item)
        logger.info(
            "Item status overridden",
            item_id=item_id,
            previous=previous.value,
            status=new_status.value,
        )
        return item

    def reserve(self, item_id: str, expected_current: ItemStatus) -> Item:
        """CAS to ``reserved`` and count the rental in the same write."""
        return self._compare_and_set(
            item_id, expected_current, ItemStatus.RESERVED, rental_delta=1
        )

    def unreserve(self, item_id: str, restore_status: ItemStatus) -> Item:
        """Undo a ``reserve`` whose order could not be persisted."""
        item = self._compare_and_set(
            item_id, ItemStatus.RESERVED, restore_status, rental_delta=-1
        )
        logger.warning("Item reservation rolled back", item_id=item_id, status=restore_status.value)
        return item

    def release(self, item_id: str) -> Item | None:
        """Return a reserved item to ``available``.

        Items under a manual override (maintenance, damaged, unlisted) stay
        as they are. Returns None when nothing was changed.
        """
        item = self.get(item_id)
        if item.status != ItemStatus.RESERVED:
            logger.info("Item not released", item_id=item_id, status=item.status.value)
            return None
        try:
            return self._compare_and_set(item_id, ItemStatus.RESERVED, ItemStatus.AVAILABLE)
        except ConflictError:
            logger.warning("Item changed during release, left as is", item_id=item_id)
            return None

    # --- Internal helpers -----------------------------------------------------

    def _compare_and_set(
        self,
        item_id: str,
        expected: ItemStatus,
        new_status: ItemStatus,
        rental_delta: int = 0,
    ) -> Item:
        current = self.get(item_id)
        if current.status != expected:
            raise ConflictError(
                f"Item '{item_id}' is {current.status.value}, expected {expected.value}"
            )

        updated = dataclasses.replace(
            current,
            status=new_status,
            rental_count=max(current.rental_count + rental_delta, 0),
        )
        if not self._item_repo.save_if_status(updated, expected):
            raise ConflictError(
                f"Item '{item_id}' status changed concurrently, expected {expected.value}"
            )

        if expected != new_status:
            logger.info(
                "Item status changed",
                item_id=item_id,
                previous=expected.value,
                status=new_status.value,
            )
        return updated
