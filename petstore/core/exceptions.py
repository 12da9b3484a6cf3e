"""
Error taxonomy for the pet store.

Domain entities and repositories raise these; use-case services let them
propagate; only the HTTP layer (core.api_utils) turns them into responses.
"""

from typing import Any, Dict, Optional


class PetStoreError(Exception):
    """Base class for every error the application raises on purpose."""

    kind = "error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def __str__(self) -> str:
        return self.message


class ValidationError(PetStoreError):
    """Malformed or out-of-range input. The request is rejected as is."""

    kind = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None, **context: Any):
        super().__init__(message, **context)
        self.field = field


class NotFoundError(PetStoreError):
    """A referenced entity does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found", entity=entity)
        self.entity = entity
        self.entity_id = entity_id


class InvalidStateError(PetStoreError):
    """The requested transition is not allowed from the current state."""

    kind = "invalid_state"


class ConflictError(PetStoreError):
    """A conditional write lost against a concurrent one. Caller may re-query and retry."""

    kind = "conflict"


class DuplicateError(PetStoreError):
    """A unique business key (e.g. pet name) is already taken."""

    kind = "duplicate"


class TransientError(PetStoreError):
    """The store timed out or the connection dropped. Retry with backoff."""

    kind = "transient"


class CompensationError(PetStoreError):
    """
    A multi-step operation failed and could not be rolled back.

    Raised when a pet was reserved (left pending) but neither the order could
    be created nor the reservation released. Requires manual intervention.
    """

    kind = "compensation_failed"

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        compensation_error: Optional[BaseException] = None,
        **context: Any,
    ):
        super().__init__(message, **context)
        self.original_error = original_error
        self.compensation_error = compensation_error
