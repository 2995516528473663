"""Fake Tarantool session used in place of the real engine client."""

from typing import Any, Optional

from tarantool.error import DatabaseError

from kvstorage.storage.tarantool_repository import ER_TUPLE_FOUND


class FakeResponse:
    """Minimal stand-in for ``tarantool.response.Response``."""

    def __init__(self, data: list[Any], return_code: int = 0, return_message: str = "") -> None:
        self.data = data
        self.return_code = return_code
        self.return_message = return_message


class FakeTarantoolSession:
    """In-process imitation of a Tarantool connection holding one space per name.

    Tuples are stored as lists keyed by their first field, mirroring a space
    with a string primary key.
    """

    def __init__(self) -> None:
        self.spaces: dict[str, dict[str, list[Any]]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.closed = False

    def _space(self, name: str) -> dict[str, list[Any]]:
        return self.spaces.setdefault(name, {})

    def insert(self, space_name: str, values: list[Any]) -> FakeResponse:
        self.calls.append(("insert", (space_name, values)))
        rows = self._space(space_name)
        if values[0] in rows:
            raise DatabaseError(
                ER_TUPLE_FOUND,
                f"Duplicate key exists in unique index 'primary' in space '{space_name}'",
            )
        rows[values[0]] = list(values)
        return FakeResponse([list(values)])

    def select(self, space_name: str, key: Any, index: int = 0) -> FakeResponse:
        self.calls.append(("select", (space_name, key, index)))
        row = self._space(space_name).get(key)
        return FakeResponse([list(row)] if row is not None else [])

    def update(self, space_name: str, key: Any, op_list: list[tuple[Any, ...]]) -> FakeResponse:
        self.calls.append(("update", (space_name, key, op_list)))
        row = self._space(space_name).get(key)
        if row is None:
            return FakeResponse([])
        for operator, field_no, argument in op_list:
            assert operator == "="
            row[field_no] = argument
        return FakeResponse([list(row)])

    def delete(self, space_name: str, key: Any) -> FakeResponse:
        self.calls.append(("delete", (space_name, key)))
        row = self._space(space_name).pop(key, None)
        return FakeResponse([row] if row is not None else [])

    def ping(self, notime: bool = False) -> Optional[float]:
        self.calls.append(("ping", ()))
        return None if notime else 0.0

    def close(self) -> None:
        self.closed = True
