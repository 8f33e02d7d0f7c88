"""Unit tests for the Order aggregate and its lifecycle graph."""

import itertools
from datetime import date

import pytest

from rms.domain.exceptions import (
    InvalidTransitionError,
    MissingNotesError,
    ValidationError,
)
from rms.domain.model.order import TRANSITIONS, Order, OrderStatus
from rms.domain.model.value_objects import DateRange, Money


def _make_order(status: OrderStatus = OrderStatus.PENDING, **overrides) -> Order:
    """Helper to build a valid stored order."""
    fields = dict(
        id=1,
        item_id="1",
        customer_id=1,
        staff_id="staff-1",
        delivery_date=date(2025, 6, 10),
        due_date=date(2025, 6, 12),
        rental_fee=Money.of("1500.00"),
        status=status,
    )
    fields.update(overrides)
    return Order(**fields)


class TestOrderCreation:

    def test_happy_path(self):
        order = Order.create(
            item_id="1",
            customer_id=7,
            staff_id="ana",
            period=DateRange(date(2025, 6, 10), date(2025, 6, 12)),
            rental_fee=Money.of("1500"),
            advance_payment=Money.of("500"),
            notes="  wedding  ",
        )
        assert order.id is None  # assigned by repository
        assert order.status == OrderStatus.PENDING
        assert order.notes == "wedding"
        assert order.balance == Money.of("1000.00")

    def test_missing_staff_rejected(self):
        with pytest.raises(ValidationError, match="Staff id"):
            Order.create("1", 7, " ", DateRange(date(2025, 6, 10), date(2025, 6, 12)), Money.of("10"))

    def test_unknown_discount_rejected(self):
        with pytest.raises(ValidationError, match="Discount must be one of"):
            Order.create(
                "1", 7, "ana", DateRange(date(2025, 6, 10), date(2025, 6, 12)),
                Money.of("10"), discount_percentage=15,
            )

    def test_advance_above_amount_due_rejected(self):
        with pytest.raises(ValidationError, match="exceeds the amount due"):
            Order.create(
                "1", 7, "ana", DateRange(date(2025, 6, 10), date(2025, 6, 12)),
                Money.of("1000"), advance_payment=Money.of("900"), discount_percentage=20,
            )

    def test_discount_reduces_total(self):
        order = Order.create(
            "1", 7, "ana", DateRange(date(2025, 6, 10), date(2025, 6, 12)),
            Money.of("1500"), discount_percentage=30,
        )
        assert order.total_due == Money.of("1050.00")


class TestTransitionGraph:

    @pytest.mark.parametrize(
        "source, target",
        [
            (OrderStatus.PENDING, OrderStatus.ON_COURSE),
            (OrderStatus.PENDING, OrderStatus.FINISHED),
            (OrderStatus.PENDING, OrderStatus.CANCELED),
            (OrderStatus.ON_COURSE, OrderStatus.FINISHED),
            (OrderStatus.ON_COURSE, OrderStatus.CANCELED),
        ],
    )
    def test_allowed_edges(self, source, target):
        order = _make_order(source)
        assert order.transition_to(target, notes="done") is True
        assert order.status == target

    @pytest.mark.parametrize(
        "source, target",
        [
            (OrderStatus.ON_COURSE, OrderStatus.PENDING),
            (OrderStatus.FINISHED, OrderStatus.PENDING),
            (OrderStatus.FINISHED, OrderStatus.ON_COURSE),
            (OrderStatus.FINISHED, OrderStatus.CANCELED),
            (OrderStatus.CANCELED, OrderStatus.PENDING),
            (OrderStatus.CANCELED, OrderStatus.ON_COURSE),
            (OrderStatus.CANCELED, OrderStatus.FINISHED),
        ],
    )
    def test_rejected_edges(self, source, target):
        order = _make_order(source)
        with pytest.raises(InvalidTransitionError, match=f"from {source.value} to {target.value}"):
            order.transition_to(target, notes="try anyway")
        assert order.status == source

    def test_same_state_is_noop(self):
        order = _make_order(OrderStatus.ON_COURSE)
        assert order.transition_to(OrderStatus.ON_COURSE) is False
        assert order.status == OrderStatus.ON_COURSE

    def test_terminal_states_are_closed(self):
        """No sequence of requests leaves finished or canceled."""
        for terminal in (OrderStatus.FINISHED, OrderStatus.CANCELED):
            for path in itertools.product(list(OrderStatus), repeat=3):
                order = _make_order(terminal)
                for step in path:
                    try:
                        order.transition_to(step, notes="x")
                    except InvalidTransitionError:
                        pass
                assert order.status == terminal

    def test_graph_has_no_edges_out_of_terminal_states(self):
        assert TRANSITIONS[OrderStatus.FINISHED] == frozenset()
        assert TRANSITIONS[OrderStatus.CANCELED] == frozenset()


class TestTerminalNotes:

    @pytest.mark.parametrize("notes", [None, "", "   "])
    def test_finish_without_notes_rejected(self, notes):
        order = _make_order()
        with pytest.raises(MissingNotesError):
            order.transition_to(OrderStatus.FINISHED, notes=notes)
        assert order.status == OrderStatus.PENDING

    def test_cancel_without_notes_rejected(self):
        order = _make_order(OrderStatus.ON_COURSE)
        with pytest.raises(MissingNotesError):
            order.transition_to(OrderStatus.CANCELED)

    def test_on_course_needs_no_notes(self):
        order = _make_order()
        order.transition_to(OrderStatus.ON_COURSE)
        assert order.status == OrderStatus.ON_COURSE

    def test_finish_records_note_return_date_and_penalty(self):
        order = _make_order(OrderStatus.ON_COURSE)
        order.transition_to(
            OrderStatus.FINISHED,
            notes="returned, minor stain",
            penalty_fee=Money.of("200"),
        )
        assert order.return_date is not None
        assert order.penalty_fee == Money.of("200")
        assert order.status_notes[-1].text == "returned, minor stain"
        assert order.total_due == Money.of("1700.00")

    def test_penalty_on_cancel_rejected(self):
        order = _make_order(OrderStatus.ON_COURSE)
        with pytest.raises(ValidationError, match="only be charged when finishing"):
            order.transition_to(
                OrderStatus.CANCELED, notes="no show", penalty_fee=Money.of("200")
            )
        assert order.status == OrderStatus.ON_COURSE
        assert order.penalty_fee.is_zero
        assert order.status_notes == []


class TestClaim:

    def test_live_order_claims_until_due_date(self):
        order = _make_order()
        assert order.claims_item_on(date(2025, 6, 1))
        assert order.claims_item_on(date(2025, 6, 12))
        assert not order.claims_item_on(date(2025, 6, 13))

    def test_on_course_order_claims_while_overdue(self):
        order = _make_order(OrderStatus.ON_COURSE)
        assert order.claims_item_on(date(2025, 7, 1))

    def test_terminal_order_never_claims(self):
        assert not _make_order(OrderStatus.CANCELED).claims_item_on(date(2025, 6, 1))


class TestReschedule:

    def test_terminal_order_cannot_be_rescheduled(self):
        order = _make_order(OrderStatus.FINISHED)
        with pytest.raises(ValidationError, match="can no longer be edited"):
            order.reschedule(DateRange(date(2025, 7, 1), date(2025, 7, 2)))
