"""JSON-file-backed implementation of CustomerRepository."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from rms.domain.model.customer import Customer, CustomerStatus
from rms.domain.repository.customer_repository import CustomerRepository
from rms.infrastructure.persistence.json_file import JsonFile


class JsonCustomerRepository(CustomerRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- CustomerRepository interface -----------------------------------------

    def get_by_id(self, customer_id: int) -> Customer | None:
        for raw in self._file.load():
            if raw.get("id") == customer_id:
                return self._file.decode(raw, self._to_domain)
        return None

    def get_by_phone(self, phone: str) -> Customer | None:
        for raw in self._file.load():
            if phone in (raw.get("phone"), raw.get("second_phone")):
                return self._file.decode(raw, self._to_domain)
        return None

    def list_all(self) -> list[Customer]:
        return [self._file.decode(raw, self._to_domain) for raw in self._file.load()]

    def save(self, customer: Customer) -> None:
        def upsert(records: list[dict]) -> None:
            if customer.id is None:
                customer.id = max((r["id"] for r in records), default=0) + 1
            for i, raw in enumerate(records):
                if raw["id"] == customer.id:
                    records[i] = self._to_raw(customer)
                    return
            records.append(self._to_raw(customer))

        self._file.update(upsert)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(customer: Customer) -> dict:
        return {
            "id": customer.id,
            "name": customer.name,
            "last_name": customer.last_name,
            "phone": customer.phone,
            "second_phone": customer.second_phone,
            "email": customer.email,
            "address": customer.address,
            "id_document_url": customer.id_document_url,
            "status": customer.status.value,
            "created_at": customer.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Customer:
        return Customer(
            id=raw["id"],
            name=raw["name"],
            last_name=raw.get("last_name") or "",
            phone=raw["phone"],
            second_phone=raw.get("second_phone"),
            email=raw.get("email"),
            address=raw.get("address"),
            id_document_url=raw.get("id_document_url"),
            status=CustomerStatus(raw.get("status", "active")),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
