"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so callers (CLI, service boundary) can catch them uniformly and map each one
to a specific, user-facing message.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated (e.g. malformed date range)."""


class EntityNotFoundError(DomainException):
    """A requested item, order or customer does not exist."""


class SlotUnavailableError(DomainException):
    """The requested date range overlaps a live order on the same item."""

    def __init__(self, message: str, conflicting_order_id: int | None = None) -> None:
        super().__init__(message)
        self.conflicting_order_id = conflicting_order_id


class InvalidTransitionError(DomainException):
    """The order status change is not an edge of the lifecycle graph."""


class MissingNotesError(DomainException):
    """A terminal transition was requested without an explanation."""


class ConflictError(DomainException):
    """A compare-and-set lost the race: the stored status had changed."""


class ItemNotRentableError(ValidationError):
    """The item is flagged maintenance, damaged or unlisted."""


class OperationTimeoutError(DomainException):
    """The operation could not start in time; nothing was written."""


class StorageError(Exception):
    """The persistence store failed. Not a business rule violation."""
