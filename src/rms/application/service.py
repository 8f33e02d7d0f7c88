"""Service boundary exposed to UI and reporting collaborators.

``RentalService`` is built once with its repositories, lock table and clock
and passed to whoever needs it. Every operation returns a ``Result``: either
the value, or an ``ErrorCode`` naming the rule that failed together with a
specific message. Business rejections and storage failures get distinct
codes; no exception crosses this boundary.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Generic, TypeVar

import structlog

from rms.application.calendar_queries import (
    ActivitiesForDayHandler,
    MonthOverviewHandler,
    OverdueReturnsHandler,
    UpcomingWithinDaysHandler,
)
from rms.application.check_availability import (
    CheckAvailabilityHandler,
    FindAvailableItemsHandler,
)
from rms.application.create_order import CreateOrderHandler
from rms.application.dto import ReservationRequest
from rms.application.locking import KeyedLock
from rms.application.manage_customers import (
    CustomerStatusHandler,
    ListCustomersHandler,
    SetCustomerStatusHandler,
)
from rms.application.reconcile_items import ReconcileItemsHandler
from rms.application.reports import (
    DashboardStatsHandler,
    HistorySummaryHandler,
    RentalsByPeriodHandler,
)
from rms.application.show_order import ListOrdersHandler
from rms.application.transition_order import TransitionOrderHandler
from rms.application.update_order import UpdateOrderHandler
from rms.domain.clock import Clock, SystemClock
from rms.domain.exceptions import (
    ConflictError,
    DomainException,
    EntityNotFoundError,
    InvalidTransitionError,
    MissingNotesError,
    OperationTimeoutError,
    SlotUnavailableError,
    StorageError,
    ValidationError,
)
from rms.domain.model.customer import CustomerStatus
from rms.domain.repository.customer_repository import CustomerRepository
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ErrorCode(Enum):
    SLOT_UNAVAILABLE = "slot_unavailable"
    INVALID_TRANSITION = "invalid_transition"
    MISSING_NOTES = "missing_notes"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    TIMEOUT = "timeout"
    STORAGE = "storage"


# Most specific first: ItemNotRentableError is a ValidationError.
_ERROR_CODES: list[tuple[type[Exception], ErrorCode]] = [
    (SlotUnavailableError, ErrorCode.SLOT_UNAVAILABLE),
    (InvalidTransitionError, ErrorCode.INVALID_TRANSITION),
    (MissingNotesError, ErrorCode.MISSING_NOTES),
    (ConflictError, ErrorCode.CONFLICT),
    (EntityNotFoundError, ErrorCode.NOT_FOUND),
    (ValidationError, ErrorCode.VALIDATION),
    (OperationTimeoutError, ErrorCode.TIMEOUT),
]


@dataclass(frozen=True)
class Result(Generic[T]):
    value: T | None = None
    error: ErrorCode | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def success(value: T) -> Result[T]:
        return Result(value=value)

    @staticmethod
    def failure(error: ErrorCode, message: str) -> Result[T]:
        return Result(error=error, message=message)


def error_code_for(exc: Exception) -> ErrorCode:
    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, (StorageError, OSError)):
        return ErrorCode.STORAGE
    return ErrorCode.VALIDATION


class RentalService:

    def __init__(
        self,
        item_repo: ItemRepository,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        locks: KeyedLock | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._item_repo = item_repo
        self._order_repo = order_repo
        self._customer_repo = customer_repo
        self._locks = locks or KeyedLock()
        self._clock = clock or SystemClock()

    # --- Core operations ------------------------------------------------------

    def check_availability(self, item_id: str, delivery_date: date, due_date: date):
        handler = CheckAvailabilityHandler(self._item_repo, self._order_repo)
        return self._run("check_availability", handler.handle, item_id, delivery_date, due_date)

    def create_order(self, request: ReservationRequest):
        handler = CreateOrderHandler(
            self._order_repo, self._item_repo, self._customer_repo, self._locks, self._clock
        )
        return self._run("create_order", handler.handle, request)

    def transition_status(
        self,
        order_id: int,
        new_status: str,
        notes: str | None = None,
        penalty_fee: str | None = None,
    ):
        handler = TransitionOrderHandler(self._order_repo, self._item_repo, self._locks, self._clock)
        return self._run("transition_status", handler.handle, order_id, new_status, notes, penalty_fee)

    def activities_for_day(self, day: date):
        return self._run("activities_for_day", ActivitiesForDayHandler(self._order_repo).handle, day)

    def upcoming_within_days(self, days: int, kind: str):
        handler = UpcomingWithinDaysHandler(self._order_repo, self._clock)
        return self._run("upcoming_within_days", handler.handle, days, kind)

    def customer_status(self, customer_id: int):
        handler = CustomerStatusHandler(self._customer_repo, self._order_repo)
        return self._run("customer_status", handler.handle, customer_id)

    # --- Supporting operations ------------------------------------------------

    def update_order(self, order_id: int, delivery_date=None, due_date=None, notes=None):
        handler = UpdateOrderHandler(self._order_repo, self._item_repo, self._locks, self._clock)
        return self._run("update_order", handler.handle, order_id, delivery_date, due_date, notes)

    def find_available_items(self, delivery_date=None, due_date=None, event_date=None):
        handler = FindAvailableItemsHandler(self._item_repo, self._order_repo)
        return self._run("find_available_items", handler.handle, delivery_date, due_date, event_date)

    def month_overview(self, year: int, month: int):
        return self._run("month_overview", MonthOverviewHandler(self._order_repo).handle, year, month)

    def overdue_returns(self):
        return self._run("overdue_returns", OverdueReturnsHandler(self._order_repo, self._clock).handle)

    def list_customers(self, status: str | None = None):
        handler = ListCustomersHandler(self._customer_repo, self._order_repo)
        return self._run("list_customers", handler.handle, status)

    def list_frequent_customers(self):
        return self.list_customers(CustomerStatus.FREQUENT.value)

    def set_customer_status(self, customer_id: int, status: str):
        handler = SetCustomerStatusHandler(self._customer_repo)
        return self._run("set_customer_status", handler.handle, customer_id, status)

    def list_orders(
        self,
        status: str | None = None,
        customer_id: int | None = None,
        item_id: str | None = None,
        created_from: date | None = None,
        created_to: date | None = None,
    ):
        handler = ListOrdersHandler(self._order_repo)
        return self._run(
            "list_orders", handler.handle, status, customer_id, item_id, created_from, created_to
        )

    def reconcile(self):
        handler = ReconcileItemsHandler(self._item_repo, self._order_repo, self._locks, self._clock)
        return self._run("reconcile", handler.handle)

    # --- Reports --------------------------------------------------------------

    def dashboard(self):
        handler = DashboardStatsHandler(
            self._order_repo, self._item_repo, self._customer_repo, self._clock
        )
        return self._run("dashboard", handler.handle)

    def rentals_by_period(self, granularity: str, start: date | None = None, end: date | None = None):
        handler = RentalsByPeriodHandler(self._order_repo, self._clock)
        return self._run("rentals_by_period", handler.handle, granularity, start, end)

    def history_summary(self, start: date | None = None, end: date | None = None):
        return self._run("history_summary", HistorySummaryHandler(self._order_repo).handle, start, end)

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _run(operation: str, func: Callable[..., T], *args) -> Result[T]:
        try:
            return Result.success(func(*args))
        except DomainException as exc:
            code = error_code_for(exc)
            logger.info("Operation rejected", operation=operation, error=code.value, reason=str(exc))
            return Result.failure(code, str(exc))
        except (StorageError, OSError) as exc:
            logger.error("Storage failure", operation=operation, error=str(exc))
            return Result.failure(ErrorCode.STORAGE, f"Storage unavailable: {exc}")
