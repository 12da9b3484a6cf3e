"""Translation of SQLAlchemy failures into the application's error kinds."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from petstore.core.exceptions import ConflictError, PetStoreError, TransientError

logger = logging.getLogger(__name__)


@contextmanager
def translate_db_errors(operation: str) -> Iterator[None]:
    """
    Re-raise store failures as TransientError (retryable: timeouts, lost
    connections, locked database) or ConflictError (constraint violations).
    Application errors raised inside the block pass through untouched.
    """
    try:
        yield
    except PetStoreError:
        raise
    except IntegrityError as e:
        logger.info(
            "Store constraint violated",
            extra={"context": {"operation": operation, "error": str(e.orig)}},
        )
        raise ConflictError(
            f"{operation} conflicts with existing data", operation=operation
        ) from e
    except (OperationalError, PoolTimeoutError, DisconnectionError) as e:
        logger.warning(
            "Transient store failure",
            extra={"context": {"operation": operation, "error": str(e)}},
        )
        raise TransientError(
            f"Store unavailable during {operation}", operation=operation
        ) from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.warning(
                "Store connection invalidated",
                extra={"context": {"operation": operation, "error": str(e)}},
            )
            raise TransientError(
                f"Store connection lost during {operation}", operation=operation
            ) from e
        raise
