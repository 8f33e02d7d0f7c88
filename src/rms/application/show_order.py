"""Application service: Show / List Orders use cases (queries)."""

from __future__ import annotations

from datetime import date

from rms.application.dto import OrderDTO, order_to_dto
from rms.application.reports import created_between
from rms.application.transition_order import parse_order_status
from rms.domain.exceptions import EntityNotFoundError
from rms.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order)


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        status: str | None = None,
        customer_id: int | None = None,
        item_id: str | None = None,
        created_from: date | None = None,
        created_to: date | None = None,
    ) -> list[OrderDTO]:
        """Order history, filtered; the date bounds apply to the creation day."""
        wanted = parse_order_status(status) if status else None
        orders = created_between(self._order_repo.list_all(), created_from, created_to)
        return [
            order_to_dto(o)
            for o in orders
            if (wanted is None or o.status == wanted)
            and (customer_id is None or o.customer_id == customer_id)
            and (item_id is None or o.item_id == item_id)
        ]
