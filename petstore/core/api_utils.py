"""
Common API utilities for consistent response formatting across all controllers.

The error handlers registered here are the only place where domain error
kinds are translated into HTTP status codes.
"""

import logging
from typing import Any, Dict, Optional, Type

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from petstore.core.exceptions import (
    CompensationError,
    ConflictError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    PetStoreError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES: Dict[Type[PetStoreError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidStateError: 409,
    DuplicateError: 422,
    TransientError: 503,
    CompensationError: 500,
}

TRANSIENT_RETRY_AFTER_SECONDS = 1


def api_response(
    success: bool,
    message: str,
    data: Optional[Any] = None,
    status_code: int = 200,
    error: Optional[str] = None,
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code
        error: Machine-readable error kind (failures only)

    Returns:
        Tuple of (json_response, status_code)
    """
    response: Dict[str, Any] = {"success": success, "message": message}

    if data is not None:
        response["data"] = data
    if error is not None:
        response["error"] = error

    return jsonify(response), status_code


def status_code_for(error: PetStoreError) -> int:
    """Most specific mapping wins (DuplicateError before its parents, etc.)."""
    for klass in type(error).__mro__:
        if klass in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[klass]
    return 500


def register_error_handlers(app: Flask) -> None:
    """Map the error taxonomy onto HTTP responses."""

    @app.errorhandler(PetStoreError)
    def handle_petstore_error(error: PetStoreError):
        status_code = status_code_for(error)
        log_context = {"kind": error.kind, "status_code": status_code, **error.context}

        if isinstance(error, CompensationError):
            logger.critical(error.message, extra={"context": log_context})
        elif status_code >= 500:
            logger.error(error.message, extra={"context": log_context})
        else:
            logger.info(error.message, extra={"context": log_context})

        data = None
        if isinstance(error, ValidationError) and error.field:
            data = {"field": error.field}

        body, code = api_response(False, error.message, data, status_code, error.kind)
        if isinstance(error, TransientError):
            body.headers["Retry-After"] = str(TRANSIENT_RETRY_AFTER_SECONDS)
        return body, code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        return api_response(
            False,
            error.description or error.name,
            None,
            error.code or 500,
            error.name.lower().replace(" ", "_"),
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.error(
            "Unhandled error",
            extra={"context": {"error": str(error), "type": type(error).__name__}},
            exc_info=True,
        )
        return api_response(False, "Internal server error", None, 500, "internal_error")
