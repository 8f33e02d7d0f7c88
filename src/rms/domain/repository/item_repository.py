"""Abstract repository for the Item aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from rms.domain.model.item import Item, ItemStatus


class ItemRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique item ID."""

    @abstractmethod
    def get_by_id(self, item_id: str) -> Item | None:
        """Return an item by its ID, or None if not found."""

    @abstractmethod
    def get_by_name(self, name: str) -> Item | None:
        """Return an item by name (case-insensitive), or None."""

    @abstractmethod
    def list_all(self) -> list[Item]:
        """Return every item, unlisted ones included."""

    @abstractmethod
    def save(self, item: Item) -> None:
        """Persist a new or updated item unconditionally."""

    @abstractmethod
    def save_if_status(self, item: Item, expected: ItemStatus) -> bool:
        """Persist ``item`` only if the stored status equals ``expected``.

        The comparison and the write must be atomic. Returns False, without
        writing, when the stored status differs.
        """
