from __future__ import annotations

from collections.abc import Hashable
from typing import Protocol, TypeVar, runtime_checkable

"""The capability every record (value object) offers: its primary key."""

__all__ = [
    "ValueObject",
]

K_co = TypeVar("K_co", bound=Hashable, covariant=True)


@runtime_checkable
class ValueObject(Protocol[K_co]):
    """A record with a primary key. Generated *VO dataclasses implement it."""

    def get_key(self) -> K_co:
        """Return the primary key value (first column of the sheet)."""
        ...
