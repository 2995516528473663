"""Tests for error handler middleware."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from tarantool.error import NetworkError

from kvstorage.api.middleware.error_handler import setup_error_handlers, status_for
from kvstorage.storage.errors import (
    AlreadyExistsError,
    ConnectionFailedError,
    DeleteOperationFailed,
    ErrorKind,
    InsertOperationFailed,
    MalformedRecordError,
    NotFoundError,
    SelectOperationFailed,
    StorageError,
    UpdateOperationFailed,
)
from kvstorage.usecase.crud import InvalidValueError


class TestStatusMapping:
    """Tests for the kind -> status table."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ErrorKind.NOT_FOUND, 404),
            (ErrorKind.ALREADY_EXISTS, 409),
            (ErrorKind.CONNECTION_FAILED, 503),
            (ErrorKind.INSERT_FAILED, 500),
            (ErrorKind.SELECT_FAILED, 500),
            (ErrorKind.UPDATE_FAILED, 500),
            (ErrorKind.DELETE_FAILED, 500),
            (ErrorKind.MALFORMED_RECORD, 500),
        ],
    )
    def test_status_for(self, kind: ErrorKind, expected: int) -> None:
        assert status_for(kind) == expected


class TestErrorHandlers:
    """Tests for the registered exception handlers."""

    @pytest.fixture
    def app(self) -> FastAPI:
        """Create test FastAPI app with error handlers."""
        test_app = FastAPI()
        setup_error_handlers(test_app)
        return test_app

    def _raise(self, app: FastAPI, error: Exception) -> TestClient:
        @app.get("/boom")
        async def endpoint() -> None:
            raise error

        return TestClient(app, raise_server_exceptions=False)

    def test_not_found(self, app: FastAPI) -> None:
        response = self._raise(app, NotFoundError()).get("/boom")

        assert response.status_code == 404
        assert response.json() == {"code": "not_found", "message": "key not found"}

    def test_already_exists(self, app: FastAPI) -> None:
        response = self._raise(app, AlreadyExistsError()).get("/boom")

        assert response.status_code == 409
        assert response.json()["code"] == "already_exists"

    @pytest.mark.parametrize(
        "error",
        [
            InsertOperationFailed("insert operation failed: Space 'kv_storage' does not exist"),
            SelectOperationFailed(),
            UpdateOperationFailed(),
            DeleteOperationFailed(),
            MalformedRecordError(),
        ],
    )
    def test_operation_failures_hide_details(self, app: FastAPI, error: StorageError) -> None:
        response = self._raise(app, error).get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == error.kind.value
        assert body["message"] == "An internal server error occurred"
        assert "kv_storage" not in response.text

    def test_connection_failed(self, app: FastAPI) -> None:
        response = self._raise(app, ConnectionFailedError()).get("/boom")

        assert response.status_code == 503
        assert response.json()["message"] == "Storage is unavailable"

    def test_invalid_value(self, app: FastAPI) -> None:
        response = self._raise(app, InvalidValueError("missing value")).get("/boom")

        assert response.status_code == 400
        assert response.json() == {"code": "invalid_value", "message": "missing value"}

    def test_engine_transport_error_is_internal(self, app: FastAPI) -> None:
        response = self._raise(app, NetworkError(Exception("connection lost"))).get("/boom")

        assert response.status_code == 500
        assert response.json() == {
            "code": "internal_error",
            "message": "An internal server error occurred",
        }

    def test_pydantic_validation_error_handler_formats_errors(self, app: FastAPI) -> None:
        @app.get("/test-validation-error")
        async def endpoint() -> None:
            from pydantic import BaseModel, Field

            class TestModel(BaseModel):
                name: str = Field(..., min_length=1)

            TestModel(name="")

        response = TestClient(app).get("/test-validation-error")

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "validation_error"
        assert data["errors"][0]["field"] == "name"
