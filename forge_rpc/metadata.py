from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union


MetadataValue = Union[str, bytes]


class Metadata:
    """Ordered gRPC metadata multimap. Keys are case-insensitive and stored lower-cased."""

    __slots__ = ("_entries",)

    def __init__(self, pairs: Optional[Iterable[Tuple[str, MetadataValue]]] = None) -> None:
        self._entries: Dict[str, List[MetadataValue]] = {}
        if pairs is not None:
            for key, value in pairs:
                self.append(key, value)

    @classmethod
    def from_grpc(cls, md: Optional[Iterable[Tuple[str, MetadataValue]]]) -> "Metadata":
        """Build from grpc invocation/initial/trailing metadata (None allowed)."""
        return cls(md or ())

    def to_grpc(self) -> Tuple[Tuple[str, MetadataValue], ...]:
        return tuple(self)

    def get(self, key: str, default: Any = None) -> Any:
        values = self._entries.get(key.lower())
        return values[0] if values else default

    def get_all(self, key: str) -> List[MetadataValue]:
        return list(self._entries.get(key.lower(), ()))

    def insert(self, key: str, value: MetadataValue) -> None:
        """Replace every value of `key` with `value`."""
        self._entries[key.lower()] = [value]

    def append(self, key: str, value: MetadataValue) -> None:
        self._entries.setdefault(key.lower(), []).append(value)

    def remove(self, key: str) -> List[MetadataValue]:
        return self._entries.pop(key.lower(), [])

    def merge(self, other: "Metadata") -> None:
        """Append every entry of `other`, keeping the values already present."""
        for key, value in other:
            self.append(key, value)

    def copy(self) -> "Metadata":
        return Metadata(self)

    def __iter__(self) -> Iterator[Tuple[str, MetadataValue]]:
        for key, values in self._entries.items():
            for value in values:
                yield key, value

    def __len__(self) -> int:
        return sum(len(values) for values in self._entries.values())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Metadata):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Metadata({list(self)!r})"


class Extensions(dict):
    """Per-call values that are never sent on the wire, keyed by type."""

    def insert(self, value: Any) -> None:
        self[type(value)] = value

    def get_of(self, cls: type) -> Any:
        return self.get(cls)
