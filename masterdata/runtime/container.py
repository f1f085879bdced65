from __future__ import annotations

import dataclasses
import functools
import typing
from collections.abc import Hashable, Iterable, Iterator, Mapping
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar

from .value_object import ValueObject

"""Ordered, strongly-typed list of one sheet's records (the DTO).

Generated containers only bind ``record_type``; everything else lives here.
"""

__all__ = [
    "MasterDataContainer",
    "record_to_dict",
]

V = TypeVar("V", bound=ValueObject)
K = TypeVar("K", bound=Hashable)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def record_to_dict(record: Any) -> dict[str, Any]:
    """Declared fields of a record in declaration order, enums as values."""
    if dataclasses.is_dataclass(record):
        return {f.name: _plain(getattr(record, f.name)) for f in dataclasses.fields(record)}
    return {k: _plain(v) for k, v in vars(record).items() if not k.startswith("_")}


@functools.cache
def _field_hints(record_type: type) -> dict[str, Any]:
    return typing.get_type_hints(record_type)


def _convert(hint: Any, value: Any) -> Any:
    if isinstance(hint, type):
        if issubclass(hint, Enum) and not isinstance(value, hint):
            return hint(value)
        if hint is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
    return value


class MasterDataContainer(Generic[V, K]):
    """Records of one sheet in source row order."""

    record_type: ClassVar[type[Any]]

    def __init__(self, records: Iterable[V] = ()) -> None:
        self.list: list[V] = list(records)

    def __iter__(self) -> Iterator[V]:
        return iter(self.list)

    def __len__(self) -> int:
        return len(self.list)

    def __getitem__(self, index: int) -> V:
        return self.list[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.list)} records)"

    @classmethod
    def build_record(cls, item: Mapping[str, Any]) -> V:
        """Instantiate record_type from one decoded asset entry.

        Enum typed fields are rebuilt from their stored values.

        Raises:
            ValueError: the entry is not a mapping or holds a key the record type
                does not declare.
        """
        if not isinstance(item, Mapping):
            raise ValueError(f"asset entry must be a mapping, got {type(item).__name__}")
        record_type = cls.record_type
        hints = _field_hints(record_type)
        declared = {f.name for f in dataclasses.fields(record_type)}
        kwargs: dict[str, Any] = {}
        for name, value in item.items():
            if name not in declared:
                raise ValueError(f"asset field {name!r} is not a field of {record_type.__name__}")
            kwargs[name] = _convert(hints.get(name), value)
        return record_type(**kwargs)

    @classmethod
    def from_asset(cls, payload: Mapping[str, Any]) -> MasterDataContainer[V, K]:
        """Build a container from a decoded asset mapping ({name, record_type, list})."""
        if not isinstance(payload, Mapping):
            raise ValueError(f"asset payload must be a mapping, got {type(payload).__name__}")
        items = payload.get("list") or []
        return cls(cls.build_record(item) for item in items)

    def to_asset(self, name: str) -> dict[str, Any]:
        return {
            "name": name,
            "record_type": self.record_type.__name__,
            "list": [record_to_dict(r) for r in self.list],
        }
