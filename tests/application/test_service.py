"""Tests for the RentalService boundary and its error codes."""

from datetime import date

from rms.application.dto import ActivityKind, ReservationRequest
from rms.application.service import ErrorCode, RentalService, error_code_for
from rms.domain.clock import FixedClock
from rms.domain.exceptions import (
    ItemNotRentableError,
    StorageError,
    ValidationError,
)
from rms.domain.model.customer import Customer, CustomerStatus
from rms.domain.model.item import Item, ItemStatus
from rms.domain.model.value_objects import Money
from rms.infrastructure.persistence.json_order_repository import JsonOrderRepository
from tests.fakes import (
    BrokenOrderRepository,
    FakeCustomerRepository,
    FakeItemRepository,
    FakeOrderRepository,
)


def _setup(order_repo=None):
    item_repo = FakeItemRepository([Item(id="1", name="Red Gown", price=Money.of("1500"))])
    customer_repo = FakeCustomerRepository([
        Customer(id=None, name="Lucia", phone="555-0101"),
        Customer(id=None, name="Marta", phone="555-0102"),
    ])
    service = RentalService(
        item_repo,
        order_repo or FakeOrderRepository(),
        customer_repo,
        clock=FixedClock(date(2025, 6, 1)),
    )
    return item_repo, service


def _request(customer_id=1, start=date(2025, 6, 10), end=date(2025, 6, 12)):
    return ReservationRequest("1", customer_id, "ana", start, end)


class TestScenarios:

    def test_reserve_then_overlap_is_slot_unavailable(self):
        item_repo, service = _setup()
        assert service.create_order(_request()).ok
        assert item_repo.get_by_id("1").status == ItemStatus.RESERVED

        result = service.create_order(_request(2, date(2025, 6, 11), date(2025, 6, 13)))

        assert not result.ok
        assert result.error == ErrorCode.SLOT_UNAVAILABLE
        assert "order #1" in result.message

    def test_finish_needs_notes_then_releases(self):
        item_repo, service = _setup()
        order = service.create_order(_request()).value

        missing = service.transition_status(order.id, "finished", "")
        assert missing.error == ErrorCode.MISSING_NOTES

        done = service.transition_status(order.id, "finished", "returned, minor stain")
        assert done.ok
        assert item_repo.get_by_id("1").status == ItemStatus.AVAILABLE

    def test_third_order_makes_customer_frequent(self):
        _, service = _setup()
        for start in (date(2025, 6, 2), date(2025, 6, 6), date(2025, 6, 10)):
            assert service.create_order(_request(1, start, start)).ok

        result = service.customer_status(1)
        assert result.value.status == CustomerStatus.FREQUENT


class TestErrorCodes:

    def test_invalid_transition(self):
        _, service = _setup()
        order = service.create_order(_request()).value
        service.transition_status(order.id, "canceled", "no show")
        assert service.transition_status(order.id, "pending").error == ErrorCode.INVALID_TRANSITION

    def test_not_found(self):
        _, service = _setup()
        result = service.check_availability("99", date(2025, 6, 10), date(2025, 6, 12))
        assert result.error == ErrorCode.NOT_FOUND
        assert result.value is None

    def test_validation(self):
        _, service = _setup()
        result = service.check_availability("1", date(2025, 6, 12), date(2025, 6, 10))
        assert result.error == ErrorCode.VALIDATION
        assert "after due date" in result.message

    def test_upcoming_negative_days(self):
        _, service = _setup()
        assert service.upcoming_within_days(-2, "return").error == ErrorCode.VALIDATION

    def test_storage_failure_is_not_a_business_error(self):
        item_repo, service = _setup(order_repo=BrokenOrderRepository())
        result = service.create_order(_request())
        assert result.error == ErrorCode.STORAGE
        assert result.message.startswith("Storage unavailable")
        assert item_repo.get_by_id("1").status == ItemStatus.AVAILABLE

    def test_malformed_stored_order_is_storage_error(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text('[{"id": 1, "item_id": "1", "status": "pending"}]', encoding="utf-8")
        _, service = _setup(order_repo=JsonOrderRepository(path))

        result = service.check_availability("1", date(2025, 6, 10), date(2025, 6, 12))

        assert result.error == ErrorCode.STORAGE
        assert "Malformed record in orders.json" in result.message

    def test_error_code_mapping(self):
        assert error_code_for(ItemNotRentableError("x")) == ErrorCode.VALIDATION
        assert error_code_for(ValidationError("x")) == ErrorCode.VALIDATION
        assert error_code_for(StorageError("x")) == ErrorCode.STORAGE


class TestQueries:

    def test_activities_and_upcoming(self):
        _, service = _setup()
        service.create_order(_request(1, date(2025, 6, 3), date(2025, 6, 5)))

        day = service.activities_for_day(date(2025, 6, 1)).value
        assert [a.kind for a in day] == [ActivityKind.CREATED]

        upcoming = service.upcoming_within_days(7, "return").value
        assert [a.date for a in upcoming] == [date(2025, 6, 5)]

    def test_check_availability_reports_conflict(self):
        _, service = _setup()
        service.create_order(_request())
        result = service.check_availability("1", date(2025, 6, 12), date(2025, 6, 14))
        assert result.ok
        assert result.value.available is False
        assert result.value.conflicting_order_id == 1

    def test_list_frequent_customers(self):
        _, service = _setup()
        for start in (date(2025, 6, 2), date(2025, 6, 6), date(2025, 6, 10)):
            service.create_order(_request(2, start, start))

        frequent = service.list_frequent_customers().value
        assert [(c.id, c.status) for c in frequent] == [(2, "frequent")]

    def test_reports(self):
        _, service = _setup()
        service.create_order(_request())

        assert service.dashboard().value.active_rentals == 1
        assert [r.count for r in service.rentals_by_period("day").value] == [1]
        assert service.history_summary(date(2025, 6, 2), date(2025, 6, 1)).error == ErrorCode.VALIDATION
        assert [o.id for o in service.list_orders(created_from=date(2025, 6, 1)).value] == [1]

    def test_reschedule_into_the_past_is_validation(self):
        _, service = _setup()
        order = service.create_order(_request()).value
        result = service.update_order(order.id, delivery_date=date(2025, 5, 30))
        assert result.error == ErrorCode.VALIDATION
        assert "in the past" in result.message
