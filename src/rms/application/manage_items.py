"""Application services: inventory administration use cases."""

from __future__ import annotations

from rms.application.dto import ItemDTO, item_to_dto
from rms.domain.exceptions import ValidationError
from rms.domain.model.item import ItemStatus
from rms.domain.model.value_objects import Money
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.service.item_registry import ItemRegistry


def parse_item_status(value: str | ItemStatus) -> ItemStatus:
    if isinstance(value, ItemStatus):
        return value
    try:
        return ItemStatus(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in ItemStatus)
        raise ValidationError(f"Unknown item status '{value}' (expected one of {allowed})") from exc


class AddItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._registry = ItemRegistry(item_repo)

    def handle(self, name: str, price: str, **details: str | None) -> ItemDTO:
        """Add a new dress to the inventory."""
        return item_to_dto(self._registry.register(name, Money.of(price), **details))


class UpdateItemHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._registry = ItemRegistry(item_repo)

    def handle(self, item_id: str, price: str | None = None, **details: str | None) -> ItemDTO:
        """Edit an item's fee or description.

        Existing orders keep the fee they captured when reserved.
        """
        new_price = Money.of(price) if price is not None else None
        return item_to_dto(self._registry.update_details(item_id, new_price, **details))


class SetItemStatusHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._registry = ItemRegistry(item_repo)

    def handle(
        self,
        item_id: str,
        new_status: str | ItemStatus,
        expected: str | ItemStatus | None = None,
    ) -> ItemDTO:
        """Set an item's status.

        With ``expected`` the write is a compare-and-set; without it the
        write is a manual override.
        """
        status = parse_item_status(new_status)
        if expected is None:
            item = self._registry.force_status(item_id, status)
        else:
            item = self._registry.set_status(item_id, parse_item_status(expected), status)
        return item_to_dto(item)


class ListItemsHandler:

    def __init__(self, item_repo: ItemRepository) -> None:
        self._registry = ItemRegistry(item_repo)

    def handle(self, status: str | None = None) -> list[ItemDTO]:
        wanted = parse_item_status(status) if status else None
        return [item_to_dto(i) for i in self._registry.list_all(wanted)]
