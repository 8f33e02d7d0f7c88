"""JSON-file-backed implementation of ItemRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from rms.domain.model.item import Item, ItemStatus
from rms.domain.model.value_objects import Money
from rms.domain.repository.item_repository import ItemRepository
from rms.infrastructure.persistence.json_file import JsonFile


class JsonItemRepository(ItemRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ItemRepository interface ---------------------------------------------

    def next_id(self) -> str:
        records = self._file.load()
        if not records:
            return "1"
        with self._file.malformed():
            return str(max(int(r["id"]) for r in records) + 1)

    def get_by_id(self, item_id: str) -> Item | None:
        for raw in self._file.load():
            if raw.get("id") == item_id:
                return self._file.decode(raw, self._to_domain)
        return None

    def get_by_name(self, name: str) -> Item | None:
        for raw in self._file.load():
            if str(raw.get("name", "")).lower() == name.lower():
                return self._file.decode(raw, self._to_domain)
        return None

    def list_all(self) -> list[Item]:
        return [self._file.decode(raw, self._to_domain) for raw in self._file.load()]

    def save(self, item: Item) -> None:
        def upsert(records: list[dict]) -> None:
            for i, raw in enumerate(records):
                if raw["id"] == item.id:
                    records[i] = self._to_raw(item)
                    return
            records.append(self._to_raw(item))

        self._file.update(upsert)

    def save_if_status(self, item: Item, expected: ItemStatus) -> bool:
        def compare_and_set(records: list[dict]) -> bool:
            for i, raw in enumerate(records):
                if raw["id"] == item.id:
                    if raw["status"] != expected.value:
                        return False
                    records[i] = self._to_raw(item)
                    return True
            return False

        return self._file.update(compare_and_set)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: Item) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "price": str(item.price.amount),
            "currency": item.price.currency,
            "status": item.status.value,
            "rental_count": item.rental_count,
            "size": item.size,
            "color": item.color,
            "description": item.description,
            "image_url": item.image_url,
            "created_at": item.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Item:
        return Item(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), raw.get("currency", "MXN")),
            status=ItemStatus(raw.get("status", "available")),
            rental_count=raw.get("rental_count", 0),
            size=raw.get("size"),
            color=raw.get("color"),
            description=raw.get("description"),
            image_url=raw.get("image_url"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
