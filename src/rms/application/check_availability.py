"""Application service: availability queries."""

from __future__ import annotations

from datetime import date

from rms.application.dto import AvailabilityDTO, ItemDTO, item_to_dto
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.service.availability_service import AvailabilityService


class CheckAvailabilityHandler:

    def __init__(self, item_repo: ItemRepository, order_repo: OrderRepository) -> None:
        self._service = AvailabilityService(item_repo, order_repo)

    def handle(self, item_id: str, delivery_date: date, due_date: date) -> AvailabilityDTO:
        result = self._service.check_availability(item_id, delivery_date, due_date)
        return AvailabilityDTO(
            item_id=item_id,
            available=result.available,
            conflicting_order_id=result.conflicting_order_id,
        )


class FindAvailableItemsHandler:

    def __init__(self, item_repo: ItemRepository, order_repo: OrderRepository) -> None:
        self._service = AvailabilityService(item_repo, order_repo)

    def handle(
        self,
        delivery_date: date | None = None,
        due_date: date | None = None,
        event_date: date | None = None,
    ) -> list[ItemDTO]:
        """Free items for a range, or for the window around an event date."""
        if event_date is not None:
            items = self._service.find_available_for_event(event_date)
        else:
            items = self._service.find_available_items(delivery_date, due_date)
        return [item_to_dto(i) for i in items]
