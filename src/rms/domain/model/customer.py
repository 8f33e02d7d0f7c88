"""Customer aggregate."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from rms.domain.exceptions import ValidationError


class CustomerStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BLACKLISTED = "blacklisted"
    FREQUENT = "frequent"


@dataclass
class Customer:
    """A person renting dresses.

    ``status`` holds the stored (manually set) status. The status shown to
    staff is derived on read by the classification rule and may differ.
    """

    id: int | None
    name: str
    phone: str
    last_name: str = ""
    second_phone: str | None = None
    email: str | None = None
    address: str | None = None
    id_document_url: str | None = None  # opaque URL from document storage
    status: CustomerStatus = CustomerStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def create(name: str, phone: str, **details: str | None) -> Customer:
        if not name or not name.strip():
            raise ValidationError("Customer name is required")
        if not phone or not phone.strip():
            raise ValidationError("Customer phone is required")
        given = {k: v for k, v in details.items() if v is not None}
        return Customer(id=None, name=name.strip(), phone=phone.strip(), **given)

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.last_name}".strip()
