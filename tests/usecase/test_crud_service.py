"""Tests for the key-value use cases."""

from unittest.mock import MagicMock

import pytest

from kvstorage.storage.errors import NotFoundError
from kvstorage.storage.memory import InMemoryKVRepository
from kvstorage.storage.models import Record
from kvstorage.usecase.crud import InvalidValueError, KVService, decode_value, encode_value


class TestEncodeValue:
    """Tests for encode_value and decode_value."""

    def test_compact_encoding(self) -> None:
        assert encode_value({"name": "a"}) == b'{"name":"a"}'

    def test_non_ascii_kept_as_utf8(self) -> None:
        assert encode_value({"name": "я"}) == '{"name":"я"}'.encode("utf-8")

    def test_scalars_and_null(self) -> None:
        assert encode_value(None) == b"null"
        assert encode_value([1, 2.5, True]) == b"[1,2.5,true]"

    def test_unserializable_value(self) -> None:
        with pytest.raises(InvalidValueError):
            encode_value({"when": object()})

    @pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_number(self, number: float) -> None:
        with pytest.raises(InvalidValueError):
            encode_value({"x": number})

    def test_decode_value(self) -> None:
        assert decode_value(Record("k", b'{"a":[1]}')) == {"a": [1]}


class TestKVService:
    """Tests for KVService."""

    @pytest.fixture
    def service(self) -> KVService:
        return KVService(InMemoryKVRepository())

    def test_create_and_read(self, service: KVService) -> None:
        created = service.create("user:1", b'{"name":"a"}')

        assert created.size == 12
        assert service.read("user:1") == Record("user:1", b'{"name":"a"}')

    def test_update_and_delete(self, service: KVService) -> None:
        service.create("user:1", b'{"name":"a"}')
        service.update("user:1", b'{"name":"b"}')

        assert service.delete("user:1").value == b'{"name":"b"}'
        with pytest.raises(NotFoundError):
            service.read("user:1")

    @pytest.mark.parametrize(
        "value", [b"", b"{not json", b"\xff\xfe", b"null", b"NaN", b"[1,-Infinity]"]
    )
    def test_invalid_value_never_reaches_repository(self, value: bytes) -> None:
        repository = MagicMock()
        service = KVService(repository)

        with pytest.raises(InvalidValueError):
            service.create("k", value)
        with pytest.raises(InvalidValueError):
            service.update("k", value)

        repository.insert.assert_not_called()
        repository.update.assert_not_called()

    @pytest.mark.parametrize("operation", ["read", "delete"])
    def test_empty_key_rejected(self, operation: str) -> None:
        repository = MagicMock()
        service = KVService(repository)

        with pytest.raises(InvalidValueError) as exc_info:
            getattr(service, operation)("")

        assert exc_info.value.message == "missing key"
        assert not repository.method_calls

    def test_storage_errors_propagate(self) -> None:
        repository = MagicMock()
        repository.select.side_effect = NotFoundError()

        with pytest.raises(NotFoundError):
            KVService(repository).read("absent")
