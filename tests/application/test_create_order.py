"""Tests for the CreateOrder use case."""

from datetime import date

import pytest

from rms.application.create_order import CreateOrderHandler
from rms.application.dto import ReservationRequest
from rms.domain.clock import FixedClock
from rms.domain.exceptions import (
    EntityNotFoundError,
    ItemNotRentableError,
    SlotUnavailableError,
    ValidationError,
)
from rms.domain.model.customer import Customer, CustomerStatus
from rms.domain.model.item import Item, ItemStatus
from rms.domain.model.order import OrderStatus
from rms.domain.model.value_objects import Money
from tests.fakes import (
    BrokenOrderRepository,
    FakeCustomerRepository,
    FakeItemRepository,
    FakeOrderRepository,
)


def _setup(order_repo=None, item_status=ItemStatus.AVAILABLE):
    item_repo = FakeItemRepository([
        Item(id="1", name="Red Gown", price=Money.of("1500"), status=item_status),
    ])
    order_repo = order_repo or FakeOrderRepository()
    customer_repo = FakeCustomerRepository([
        Customer(id=None, name="Lucia", phone="555-0101"),
        Customer(id=None, name="Marta", phone="555-0102"),
    ])
    handler = CreateOrderHandler(
        order_repo, item_repo, customer_repo, clock=FixedClock(date(2025, 6, 1))
    )
    return item_repo, order_repo, customer_repo, handler


def _request(customer_id=1, start=date(2025, 6, 10), end=date(2025, 6, 12), **kwargs):
    return ReservationRequest(
        item_id="1",
        customer_id=customer_id,
        staff_id="ana",
        delivery_date=start,
        due_date=end,
        **kwargs,
    )


class TestCreateOrder:

    def test_creates_pending_order_and_reserves_item(self):
        item_repo, order_repo, _, handler = _setup()
        dto = handler.handle(_request(advance_payment="500"))

        assert dto.id == 1
        assert dto.status == "pending"
        assert dto.rental_fee == "$1500.00"
        assert dto.balance == "$1000.00"
        assert dto.created_at == "2025-06-01 12:00 UTC"
        assert order_repo.get_by_id(1).status == OrderStatus.PENDING

        item = item_repo.get_by_id("1")
        assert item.status == ItemStatus.RESERVED
        assert item.rental_count == 1

    def test_overlapping_second_order_rejected(self):
        item_repo, order_repo, _, handler = _setup()
        handler.handle(_request(customer_id=1))

        with pytest.raises(SlotUnavailableError, match=r"order #1") as exc_info:
            handler.handle(_request(customer_id=2, start=date(2025, 6, 11), end=date(2025, 6, 13)))

        assert exc_info.value.conflicting_order_id == 1
        assert len(order_repo.list_all()) == 1
        assert item_repo.get_by_id("1").rental_count == 1

    def test_back_to_back_orders_both_succeed(self):
        item_repo, order_repo, _, handler = _setup()
        handler.handle(_request(customer_id=1))
        handler.handle(_request(customer_id=2, start=date(2025, 6, 13), end=date(2025, 6, 15)))

        assert len(order_repo.list_all()) == 2
        item = item_repo.get_by_id("1")
        assert item.status == ItemStatus.RESERVED
        assert item.rental_count == 2

    def test_fee_is_snapshot_of_current_price(self):
        item_repo, order_repo, _, handler = _setup()
        handler.handle(_request())
        item = item_repo.get_by_id("1")
        item.update_price(Money.of("2000"))
        item_repo.save(item)

        assert order_repo.get_by_id(1).rental_fee == Money.of("1500")

    def test_inverted_range_rejected(self):
        _, order_repo, _, handler = _setup()
        with pytest.raises(ValidationError, match="after due date"):
            handler.handle(_request(start=date(2025, 6, 12), end=date(2025, 6, 10)))
        assert order_repo.list_all() == []

    def test_past_range_rejected_and_item_untouched(self):
        item_repo, order_repo, _, handler = _setup()
        with pytest.raises(ValidationError, match="in the past"):
            handler.handle(_request(start=date(2025, 5, 20), end=date(2025, 5, 22)))
        assert order_repo.list_all() == []
        assert item_repo.get_by_id("1").status == ItemStatus.AVAILABLE

    def test_range_starting_today_allowed(self):
        _, _, _, handler = _setup()
        dto = handler.handle(_request(start=date(2025, 6, 1), end=date(2025, 6, 1)))
        assert dto.delivery_date == date(2025, 6, 1)

    def test_unknown_item(self):
        _, _, _, handler = _setup()
        request = ReservationRequest(
            item_id="99", customer_id=1, staff_id="ana",
            delivery_date=date(2025, 6, 10), due_date=date(2025, 6, 12),
        )
        with pytest.raises(EntityNotFoundError, match="Item '99'"):
            handler.handle(request)

    def test_unknown_customer(self):
        _, _, _, handler = _setup()
        with pytest.raises(EntityNotFoundError, match="Customer #42"):
            handler.handle(_request(customer_id=42))

    @pytest.mark.parametrize(
        "status", [ItemStatus.MAINTENANCE, ItemStatus.DAMAGED, ItemStatus.UNLISTED]
    )
    def test_item_under_override_cannot_be_rented(self, status):
        item_repo, order_repo, _, handler = _setup(item_status=status)
        with pytest.raises(ItemNotRentableError):
            handler.handle(_request())
        assert order_repo.list_all() == []
        assert item_repo.get_by_id("1").status == status


class TestRollback:

    def test_failed_order_write_restores_item(self):
        item_repo, order_repo, _, handler = _setup(order_repo=BrokenOrderRepository())

        with pytest.raises(OSError, match="disk unavailable"):
            handler.handle(_request())

        item = item_repo.get_by_id("1")
        assert item.status == ItemStatus.AVAILABLE
        assert item.rental_count == 0
        assert order_repo.list_all() == []


class TestDiscount:

    def test_discount_needs_frequent_customer(self):
        _, _, _, handler = _setup()
        with pytest.raises(ValidationError, match="frequent customers"):
            handler.handle(_request(discount_percentage=10))

    def test_frequent_customer_gets_discount(self):
        _, _, customer_repo, handler = _setup()
        customer = customer_repo.get_by_id(1)
        customer.status = CustomerStatus.FREQUENT
        customer_repo.save(customer)

        dto = handler.handle(_request(discount_percentage=20))
        assert dto.total_due == "$1200.00"

    def test_blacklisted_customer_gets_no_discount(self):
        _, _, customer_repo, handler = _setup()
        customer = customer_repo.get_by_id(1)
        customer.status = CustomerStatus.BLACKLISTED
        customer_repo.save(customer)

        with pytest.raises(ValidationError, match="frequent customers"):
            handler.handle(_request(discount_percentage=10))
