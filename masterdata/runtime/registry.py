from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Iterator
from typing import TypeVar

from .accessor import MasterDataAccessor
from .loader import AssetLoader

"""Explicit collection of accessors, one per generated DAO type.

The generated Registry module builds one with create_registry(); hosts own
the instance and hand it to whatever needs master data.
"""

__all__ = [
    "MasterDataRegistry",
]

logger = logging.getLogger(__name__)

A = TypeVar("A", bound=MasterDataAccessor)


class MasterDataRegistry:
    """Holds accessors in discovery order, keyed by their concrete type."""

    def __init__(self, accessors: Iterable[MasterDataAccessor] = ()) -> None:
        self._accessors: dict[type, MasterDataAccessor] = {}
        for accessor in accessors:
            self.register(accessor)

    def register(self, accessor: MasterDataAccessor) -> None:
        accessor_type = type(accessor)
        if accessor_type in self._accessors:
            raise ValueError(f"accessor {accessor_type.__name__} is already registered")
        self._accessors[accessor_type] = accessor

    def __iter__(self) -> Iterator[MasterDataAccessor]:
        return iter(self._accessors.values())

    def __len__(self) -> int:
        return len(self._accessors)

    def get(self, accessor_type: type[A]) -> A:
        """The registered instance of accessor_type.

        Raises:
            KeyError: accessor_type was never registered.
        """
        try:
            return self._accessors[accessor_type]  # type: ignore[return-value]
        except KeyError:
            raise KeyError(f"accessor {accessor_type.__name__} is not registered") from None

    def get_by_name(self, name: str) -> MasterDataAccessor | None:
        """First accessor whose dataset name (sheet name) equals name."""
        for accessor in self._accessors.values():
            if accessor.get_name() == name:
                return accessor
        return None

    def load_all(self, loader: AssetLoader) -> list[str]:
        """Load every accessor from its asset.

        A failing asset (unreadable, broken YAML, entries that do not fit the
        record type) is logged and skipped so the others still load.

        Returns:
            Names of the accessors that failed to load.
        """
        failed: list[str] = []
        for accessor in self._accessors.values():
            try:
                accessor.load_asset(loader.load(accessor.get_asset_path()))
            except Exception as e:
                # 1 アセットの失敗 (YAML 破損・型不一致など) で残りを止めない
                logger.error("failed to load %s from %s: %s", accessor.get_name(), accessor.get_asset_path(), e)
                failed.append(accessor.get_name())
        return failed

    async def load_all_async(self, loader: AssetLoader) -> list[str]:
        """Concurrent variant of load_all(); each accessor awaits its own fetch."""
        accessors = list(self._accessors.values())
        results = await asyncio.gather(
            *(a.load_async(loader.load_async(a.get_asset_path())) for a in accessors),
            return_exceptions=True,
        )
        failed: list[str] = []
        for accessor, result in zip(accessors, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                logger.error("failed to load %s from %s: %s", accessor.get_name(), accessor.get_asset_path(), result)
                failed.append(accessor.get_name())
        return failed

    def clear(self) -> None:
        """Reset every accessor to the empty state."""
        for accessor in self._accessors.values():
            accessor.load(accessor.container_type())
