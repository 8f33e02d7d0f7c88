"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from rms.domain.model.order import Order, OrderStatus, StatusNote
from rms.domain.model.value_objects import Money
from rms.domain.repository.order_repository import OrderRepository
from rms.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        with self._file.malformed():
            return self._next_id(self._file.load())

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw.get("id") == order_id:
                return self._file.decode(raw, self._to_domain)
        return None

    def list_all(self) -> list[Order]:
        orders = [self._file.decode(raw, self._to_domain) for raw in self._file.load()]
        return sorted(orders, key=lambda o: o.id)

    def list_for_item(self, item_id: str, live_only: bool = False) -> list[Order]:
        live = {OrderStatus.PENDING.value, OrderStatus.ON_COURSE.value}
        return [
            self._file.decode(raw, self._to_domain)
            for raw in self._file.load()
            if raw.get("item_id") == item_id and (not live_only or raw.get("status") in live)
        ]

    def save(self, order: Order) -> None:
        def upsert(records: list[dict]) -> None:
            # ID assignment happens under the file lock so concurrent
            # creations never share an ID.
            if order.id is None:
                order.id = self._next_id(records)
            for i, raw in enumerate(records):
                if raw["id"] == order.id:
                    records[i] = self._to_raw(order)
                    return
            records.append(self._to_raw(order))

        self._file.update(upsert)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _next_id(records: list[dict]) -> int:
        if not records:
            return 1
        return max(r["id"] for r in records) + 1

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "item_id": order.item_id,
            "customer_id": order.customer_id,
            "staff_id": order.staff_id,
            "status": order.status.value,
            "delivery_date": order.delivery_date.isoformat(),
            "due_date": order.due_date.isoformat(),
            "event_date": order.event_date.isoformat() if order.event_date else None,
            "return_date": order.return_date.isoformat() if order.return_date else None,
            "rental_fee": str(order.rental_fee.amount),
            "currency": order.rental_fee.currency,
            "discount_percentage": order.discount_percentage,
            "advance_payment": str(order.advance_payment.amount),
            "penalty_fee": str(order.penalty_fee.amount),
            "notes": order.notes,
            "contract_url": order.contract_url,
            "status_notes": [
                {
                    "status": n.status.value,
                    "text": n.text,
                    "recorded_at": n.recorded_at.isoformat(),
                }
                for n in order.status_notes
            ],
            "created_at": order.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "MXN")

        def money(key: str) -> Money:
            return Money(Decimal(raw.get(key) or "0"), currency)

        def optional_date(key: str) -> date | None:
            return date.fromisoformat(raw[key]) if raw.get(key) else None

        return Order(
            id=raw["id"],
            item_id=raw["item_id"],
            customer_id=raw["customer_id"],
            staff_id=raw["staff_id"],
            status=OrderStatus(raw["status"]),
            delivery_date=date.fromisoformat(raw["delivery_date"]),
            due_date=date.fromisoformat(raw["due_date"]),
            event_date=optional_date("event_date"),
            return_date=optional_date("return_date"),
            rental_fee=money("rental_fee"),
            discount_percentage=raw.get("discount_percentage", 0),
            advance_payment=money("advance_payment"),
            penalty_fee=money("penalty_fee"),
            notes=raw.get("notes") or "",
            contract_url=raw.get("contract_url"),
            status_notes=[
                StatusNote(
                    status=OrderStatus(n["status"]),
                    text=n["text"],
                    recorded_at=datetime.fromisoformat(n["recorded_at"]),
                )
                for n in raw.get("status_notes", [])
            ],
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
