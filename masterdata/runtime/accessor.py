from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Hashable, Iterator, Mapping
from typing import Any, ClassVar, Generic, TypeVar

from .container import MasterDataContainer, record_to_dict
from .value_object import ValueObject

"""Generic key-indexed accessor over one loaded container (the DAO).

An accessor starts empty and is (re)filled by load(); each load replaces the
previous container and index as a whole. Queries run against the index
(get / contains) or the container in row order (exists / find / find_all /
iteration).

Duplicate primary keys are a data quality warning, not an error: the later
row wins in the index and a warning naming the key and record type is logged
once per collision. A lookup miss through get() is logged as a warning and
returns None; get_silently() returns None without logging.

Concurrent loads on one instance are not supported (last completed load
wins); read-only queries while no load is in flight are safe.
"""

__all__ = [
    "MasterDataAccessor",
]

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=MasterDataContainer)
V = TypeVar("V", bound=ValueObject)
K = TypeVar("K", bound=Hashable)


class MasterDataAccessor(ABC, Generic[C, V, K]):
    """Indexed access to the records of one sheet.

    Generated ``*DAO`` classes bind ``container_type`` and implement
    get_asset_path() / get_name().
    """

    container_type: ClassVar[type[MasterDataContainer]] = MasterDataContainer

    def __init__(self) -> None:
        self._container: C = self.container_type()  # type: ignore[assignment]
        self._index: dict[K, V] = {}
        self.duplicate_keys: list[K] = []

    @abstractmethod
    def get_asset_path(self) -> str:
        """Path of the persisted asset this accessor loads."""

    @abstractmethod
    def get_name(self) -> str:
        """Dataset name (the sheet name)."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.get_name()!r}, records={len(self._container)})"

    @property
    def container(self) -> C:
        return self._container

    def _record_type_name(self) -> str:
        record_type = getattr(self.container_type, "record_type", None)
        if record_type is not None:
            return record_type.__name__
        return type(self._container).__name__

    # ------------------------------------------------------------------ load
    def load(self, container: C) -> None:
        """Replace the backing container and rebuild the key index."""
        index: dict[K, V] = {}
        duplicates: list[K] = []
        for record in container:
            key = record.get_key()
            if key in index:
                duplicates.append(key)
                logger.warning(
                    "DUPLICATE_KEY: duplicated key [%s] in %s (%s); the later record is kept",
                    key,
                    self._record_type_name(),
                    self.get_name(),
                )
            index[key] = record
        self._container = container
        self._index = index
        self.duplicate_keys = duplicates

    def load_asset(self, payload: Mapping[str, Any]) -> None:
        """Build the container from a decoded asset mapping, then load() it."""
        self.load(self.container_type.from_asset(payload))  # type: ignore[arg-type]

    async def load_async(
        self, fetch: Awaitable[Mapping[str, Any]] | Callable[[], Awaitable[Mapping[str, Any]]]
    ) -> None:
        """Await the host's asset fetch, then load synchronously.

        The fetch is the only suspension point: cancelling the caller's task
        while it is pending leaves the previous index untouched.
        """
        if callable(fetch):
            fetch = fetch()
        payload = await fetch
        self.load_asset(payload)

    # --------------------------------------------------------------- lookups
    def get(self, key: K) -> V | None:
        """Record with the given key; logs a warning and returns None when absent."""
        record = self._index.get(key)
        if record is None:
            logger.warning(
                "LOOKUP_NOT_FOUND: attempted to get non-existed object in %s. key=%s", self._record_type_name(), key
            )
        return record

    def get_silently(self, key: K) -> V | None:
        """Record with the given key or None, without logging."""
        return self._index.get(key)

    def contains(self, key: K) -> bool:
        return key in self._index

    def contains_record(self, record: V) -> bool:
        """Whether an equal record is part of the backing container."""
        return record in self._container.list

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def exists(self, match: Callable[[V], bool]) -> bool:
        return any(match(record) for record in self._container)

    def find(self, match: Callable[[V], bool]) -> V | None:
        """First record in row order that matches, or None."""
        for record in self._container:
            if match(record):
                return record
        return None

    def find_all(self, match: Callable[[V], bool]) -> list[V]:
        """Every matching record, in row order."""
        return [record for record in self._container if match(record)]

    def for_each(self, action: Callable[[V], Any]) -> None:
        for record in self._container:
            action(record)

    def __iter__(self) -> Iterator[V]:
        # 行順 (コンテナ順) で列挙。キーインデックスではない
        return iter(self._container)

    def __len__(self) -> int:
        return len(self._container)

    # --------------------------------------------------------- serialization
    def to_json(self) -> str:
        """``{"<name>":[{...},...]}``, fields in declaration order, compact."""
        payload = {self.get_name(): [record_to_dict(r) for r in self._container]}
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
