"""Case-insensitive natural-key lookups for carriers and ports.

Built once per validation/commit call so matching stays linear in the
number of rows instead of rescanning the reference tables per row.
"""

from typing import Generic, Iterable, TypeVar

from sqlalchemy import Row, select
from sqlalchemy.ext.asyncio import AsyncSession

from carrier_lookup.models.carrier import Carrier
from carrier_lookup.models.port import Port

T = TypeVar("T")


def normalize_name(value: str | None) -> str:
    return (value or "").strip().lower()


class NameLookup(Generic[T]):
    """Map normalised name -> item.  The first item seen for a name wins."""

    def __init__(self, items: Iterable[tuple[str, T]] = ()):
        self._items: dict[str, T] = {}
        for name, item in items:
            self._items.setdefault(normalize_name(name), item)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "NameLookup[str]":
        return cls((name, name) for name in names)

    def get(self, name: str | None) -> T | None:
        key = normalize_name(name)
        if not key:
            return None
        return self._items.get(key)

    def values(self) -> list[T]:
        return list(self._items.values())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self._items)


async def load_carrier_lookup(db: AsyncSession) -> NameLookup[Row]:
    """Carrier (id, name) rows keyed by normalised name."""
    result = await db.execute(
        select(Carrier.id, Carrier.name).order_by(Carrier.created_at)
    )
    return NameLookup((row.name, row) for row in result.all())


async def load_port_lookup(db: AsyncSession) -> NameLookup[Row]:
    """Port (id, name, unloc) rows keyed by normalised name."""
    result = await db.execute(
        select(Port.id, Port.name, Port.unloc).order_by(Port.name, Port.created_at)
    )
    return NameLookup((row.name, row) for row in result.all())
