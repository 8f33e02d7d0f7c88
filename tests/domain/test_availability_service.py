"""Unit tests for the reservation conflict resolver."""

from datetime import date

import pytest

from rms.domain.exceptions import EntityNotFoundError, ValidationError
from rms.domain.model.item import Item, ItemStatus
from rms.domain.model.order import Order, OrderStatus
from rms.domain.model.value_objects import Money
from rms.domain.service.availability_service import AvailabilityService
from tests.fakes import FakeItemRepository, FakeOrderRepository


def _order(item_id, start, end, status=OrderStatus.PENDING):
    return Order(
        id=None,
        item_id=item_id,
        customer_id=1,
        staff_id="ana",
        delivery_date=start,
        due_date=end,
        rental_fee=Money.of("1000"),
        status=status,
    )


def _setup():
    item_repo = FakeItemRepository([
        Item(id="1", name="Red Gown", price=Money.of("1500")),
        Item(id="2", name="Blue Gown", price=Money.of("900")),
        Item(id="3", name="Torn Gown", price=Money.of("900"), status=ItemStatus.DAMAGED),
    ])
    order_repo = FakeOrderRepository()
    return item_repo, order_repo, AvailabilityService(item_repo, order_repo)


class TestCheckAvailability:

    def test_free_item_is_available(self):
        _, _, service = _setup()
        result = service.check_availability("1", date(2025, 6, 10), date(2025, 6, 12))
        assert result.available is True
        assert result.conflicting_order_id is None

    def test_shared_boundary_day_conflicts(self):
        _, orders, service = _setup()
        orders.save(_order("1", date(2025, 6, 10), date(2025, 6, 12)))
        result = service.check_availability("1", date(2025, 6, 12), date(2025, 6, 14))
        assert result.available is False
        assert result.conflicting_order_id == 1

    def test_adjacent_range_is_free(self):
        _, orders, service = _setup()
        orders.save(_order("1", date(2025, 6, 10), date(2025, 6, 12)))
        assert service.check_availability("1", date(2025, 6, 13), date(2025, 6, 14)).available

    def test_reports_lowest_conflicting_id(self):
        _, orders, service = _setup()
        orders.save(_order("1", date(2025, 6, 1), date(2025, 6, 3)))     # 1, no overlap
        orders.save(_order("1", date(2025, 6, 14), date(2025, 6, 15)))   # 2
        orders.save(_order("1", date(2025, 6, 10), date(2025, 6, 11)))   # 3
        result = service.check_availability("1", date(2025, 6, 9), date(2025, 6, 20))
        assert result.conflicting_order_id == 2

    @pytest.mark.parametrize("status", [OrderStatus.FINISHED, OrderStatus.CANCELED])
    def test_terminal_orders_never_conflict(self, status):
        _, orders, service = _setup()
        orders.save(_order("1", date(2025, 6, 10), date(2025, 6, 12), status))
        assert service.check_availability("1", date(2025, 6, 10), date(2025, 6, 12)).available

    def test_other_items_do_not_conflict(self):
        _, orders, service = _setup()
        orders.save(_order("2", date(2025, 6, 10), date(2025, 6, 12)))
        assert service.check_availability("1", date(2025, 6, 10), date(2025, 6, 12)).available

    def test_excluded_order_ignored(self):
        _, orders, service = _setup()
        orders.save(_order("1", date(2025, 6, 10), date(2025, 6, 12)))
        result = service.check_availability(
            "1", date(2025, 6, 11), date(2025, 6, 13), exclude_order_id=1
        )
        assert result.available

    def test_unknown_item_is_not_found(self):
        _, _, service = _setup()
        with pytest.raises(EntityNotFoundError):
            service.check_availability("99", date(2025, 6, 10), date(2025, 6, 12))

    def test_inverted_range_is_validation_error(self):
        _, _, service = _setup()
        with pytest.raises(ValidationError):
            service.check_availability("1", date(2025, 6, 12), date(2025, 6, 10))


class TestFindAvailable:

    def test_excludes_booked_and_unrentable_items(self):
        _, orders, service = _setup()
        orders.save(_order("1", date(2025, 6, 10), date(2025, 6, 12)))
        found = service.find_available_items(date(2025, 6, 11), date(2025, 6, 11))
        assert [i.id for i in found] == ["2"]

    def test_event_window_covers_two_days_before(self):
        _, orders, service = _setup()
        orders.save(_order("2", date(2025, 6, 8), date(2025, 6, 8)))
        found = service.find_available_for_event(date(2025, 6, 10))
        assert [i.id for i in found] == ["1"]
