"""Application services: customer use cases.

The status shown for a customer is always derived on read by the
classification rule; only manual changes are stored.
"""

from __future__ import annotations

import structlog

from rms.application.dto import CustomerDTO, CustomerStatusDTO, customer_to_dto
from rms.domain.exceptions import EntityNotFoundError, ValidationError
from rms.domain.model.customer import Customer, CustomerStatus
from rms.domain.repository.customer_repository import CustomerRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.service.customer_classification import (
    classify,
    rental_count,
    rental_counts,
)

logger = structlog.get_logger(__name__)


def parse_customer_status(value: str | CustomerStatus) -> CustomerStatus:
    if isinstance(value, CustomerStatus):
        return value
    try:
        return CustomerStatus(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in CustomerStatus)
        raise ValidationError(
            f"Unknown customer status '{value}' (expected one of {allowed})"
        ) from exc


class RegisterCustomerHandler:

    def __init__(self, customer_repo: CustomerRepository, order_repo: OrderRepository) -> None:
        self._customer_repo = customer_repo
        self._order_repo = order_repo

    def handle(self, name: str, phone: str, **details: str | None) -> CustomerDTO:
        """Register a customer, or return the one already using ``phone``."""
        existing = self._customer_repo.get_by_phone(phone.strip()) if phone else None
        if existing is not None:
            count = rental_count(existing.id, self._order_repo.list_for_customer(existing.id))
            return customer_to_dto(existing, classify(existing, count), count)

        customer = Customer.create(name, phone, **details)
        self._customer_repo.save(customer)
        logger.info("Customer registered", customer_id=customer.id)
        return customer_to_dto(customer, customer.status, 0)


class CustomerStatusHandler:

    def __init__(self, customer_repo: CustomerRepository, order_repo: OrderRepository) -> None:
        self._customer_repo = customer_repo
        self._order_repo = order_repo

    def handle(self, customer_id: int) -> CustomerStatusDTO:
        customer = self._customer_repo.get_by_id(customer_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer #{customer_id} not found")
        count = rental_count(customer_id, self._order_repo.list_for_customer(customer_id))
        return CustomerStatusDTO(
            customer_id=customer_id,
            status=classify(customer, count),
            rental_count=count,
        )


class ListCustomersHandler:

    def __init__(self, customer_repo: CustomerRepository, order_repo: OrderRepository) -> None:
        self._customer_repo = customer_repo
        self._order_repo = order_repo

    def handle(self, status: str | CustomerStatus | None = None) -> list[CustomerDTO]:
        wanted = parse_customer_status(status) if status else None
        counts = rental_counts(self._order_repo.list_all())

        result: list[CustomerDTO] = []
        for customer in self._customer_repo.list_all():
            count = counts.get(customer.id, 0)
            derived = classify(customer, count)
            if wanted is None or derived == wanted:
                result.append(customer_to_dto(customer, derived, count))
        return result


class SetCustomerStatusHandler:

    def __init__(self, customer_repo: CustomerRepository) -> None:
        self._customer_repo = customer_repo

    def handle(self, customer_id: int, status: str | CustomerStatus) -> None:
        """Manual override. A reverted ``frequent`` may be re-promoted on read."""
        customer = self._customer_repo.get_by_id(customer_id)
        if customer is None:
            raise EntityNotFoundError(f"Customer #{customer_id} not found")
        new_status = parse_customer_status(status)
        previous = customer.status
        customer.status = new_status
        self._customer_repo.save(customer)
        logger.info(
            "Customer status set",
            customer_id=customer_id,
            previous=previous.value,
            status=new_status.value,
        )
