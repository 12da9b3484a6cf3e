"""
Unit tests for the HTTP error mapping in core.api_utils.
"""

import pytest
from flask import Flask

from petstore.core.api_utils import register_error_handlers, status_code_for
from petstore.core.exceptions import (
    CompensationError,
    ConflictError,
    DuplicateError,
    InvalidStateError,
    NotFoundError,
    TransientError,
    ValidationError,
)


@pytest.fixture
def error_app():
    """Minimal app whose routes raise each error kind."""
    app = Flask(__name__)
    register_error_handlers(app)

    errors = {
        "validation": ValidationError("bad price", field="price"),
        "not_found": NotFoundError("Pet", 4),
        "conflict": ConflictError("lost the race"),
        "invalid_state": InvalidStateError("pet is sold"),
        "duplicate": DuplicateError("name taken"),
        "transient": TransientError("store timeout"),
        "compensation": CompensationError("pet stuck pending"),
        "unexpected": RuntimeError("boom with secret details"),
    }

    @app.route("/raise/<name>")
    def raise_error(name):
        raise errors[name]

    return app


@pytest.mark.unit
class TestStatusMapping:
    @pytest.mark.parametrize(
        "error,status_code",
        [
            (ValidationError("x"), 400),
            (NotFoundError("Pet", 1), 404),
            (ConflictError("x"), 409),
            (InvalidStateError("x"), 409),
            (DuplicateError("x"), 422),
            (TransientError("x"), 503),
            (CompensationError("x"), 500),
        ],
    )
    def test_status_code_for(self, error, status_code):
        assert status_code_for(error) == status_code


@pytest.mark.unit
class TestErrorHandlers:
    @pytest.mark.parametrize(
        "name,status_code,kind",
        [
            ("validation", 400, "validation_error"),
            ("not_found", 404, "not_found"),
            ("conflict", 409, "conflict"),
            ("invalid_state", 409, "invalid_state"),
            ("duplicate", 422, "duplicate"),
            ("transient", 503, "transient"),
            ("compensation", 500, "compensation_failed"),
        ],
    )
    def test_error_envelope(self, error_app, name, status_code, kind):
        response = error_app.test_client().get(f"/raise/{name}")

        assert response.status_code == status_code
        body = response.get_json()
        assert body["success"] is False
        assert body["error"] == kind

    def test_validation_reports_field(self, error_app):
        body = error_app.test_client().get("/raise/validation").get_json()
        assert body["data"] == {"field": "price"}

    def test_transient_sets_retry_after(self, error_app):
        response = error_app.test_client().get("/raise/transient")
        assert response.headers["Retry-After"] == "1"

    def test_unexpected_error_is_generic(self, error_app):
        response = error_app.test_client().get("/raise/unexpected")

        assert response.status_code == 500
        body = response.get_json()
        assert body["error"] == "internal_error"
        assert "secret" not in body["message"]

    def test_unknown_route_uses_envelope(self, error_app):
        response = error_app.test_client().get("/nowhere")

        assert response.status_code == 404
        assert response.get_json()["success"] is False
