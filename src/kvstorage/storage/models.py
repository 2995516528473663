"""Record model shared by the storage, use-case and API layers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Record:
    """A key with its opaque value.

    Attributes:
        key: Primary key of the record (non-empty, unique within the space)
        value: Raw JSON bytes; never interpreted by the storage layer
    """

    key: str
    value: bytes

    @property
    def size(self) -> int:
        """Byte length of the stored value."""
        return len(self.value)
