"""Application service: item status reconciliation sweep.

Recomputes every rentable item's status from the live orders and applies
the difference through compare-and-set. Safe to run repeatedly and next to
live requests: each item is handled under its lock, a lost race is counted
and left for the next sweep, and manual overrides are never touched.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from rms.application.locking import KeyedLock
from rms.domain.clock import Clock, SystemClock
from rms.domain.exceptions import ConflictError, OperationTimeoutError
from rms.domain.model.item import ItemStatus
from rms.domain.repository.item_repository import ItemRepository
from rms.domain.repository.order_repository import OrderRepository
from rms.domain.service.item_registry import ItemRegistry

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReconciliationReport:
    checked: int
    changed: list[str]
    conflicts: list[str]


class ReconcileItemsHandler:

    def __init__(
        self,
        item_repo: ItemRepository,
        order_repo: OrderRepository,
        locks: KeyedLock | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._item_repo = item_repo
        self._order_repo = order_repo
        self._locks = locks or KeyedLock()
        self._clock = clock or SystemClock()

    def handle(self) -> ReconciliationReport:
        registry = ItemRegistry(self._item_repo)
        today = self._clock.today()
        checked = 0
        changed: list[str] = []
        conflicts: list[str] = []

        for item in registry.list_all():
            if not item.status.is_rentable:
                continue
            checked += 1
            try:
                with self._locks.hold(item.id):
                    current = registry.get(item.id)
                    if not current.status.is_rentable:
                        continue
                    claimed = any(
                        o.claims_item_on(today)
                        for o in self._order_repo.list_for_item(item.id, live_only=True)
                    )
                    desired = ItemStatus.RESERVED if claimed else ItemStatus.AVAILABLE
                    if desired != current.status:
                        registry.set_status(item.id, current.status, desired)
                        changed.append(item.id)
            except (ConflictError, OperationTimeoutError) as exc:
                logger.warning("Item skipped during reconciliation", item_id=item.id, reason=str(exc))
                conflicts.append(item.id)

        logger.info(
            "Reconciliation complete",
            checked=checked,
            changed=len(changed),
            conflicts=len(conflicts),
        )
        return ReconciliationReport(checked=checked, changed=changed, conflicts=conflicts)
