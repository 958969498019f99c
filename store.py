"""
Teapot API — In-memory Store
Holds every teapot, tea, brew and steep for the lifetime of the process.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generic, Iterator, TypeVar

from models import Brew, BrewStatus, CaffeineLevel, Steep, Tea, Teapot, TeapotMaterial, TeapotStyle, TeaType

T = TypeVar("T")


def paginate(items: list, page: int, limit: int) -> list:
    """Slice one page out of `items`. Pages past the end are empty."""
    offset = (page - 1) * limit
    return items[offset:offset + limit]


class Collection(Generic[T]):
    """
    Entities keyed by id, iterated in insertion order.
    Filters are exact matches on entity attributes; a None filter is ignored.
    """

    def __init__(self, lock: threading.RLock):
        self._items: dict[str, T] = {}
        self._lock = lock

    def __len__(self) -> int:
        return len(self._items)

    def filter(self, **filters) -> list[T]:
        """Every matching entity, in insertion order."""
        active = {k: v for k, v in filters.items() if v is not None}
        with self._lock:
            return [
                item for item in self._items.values()
                if all(getattr(item, k) == v for k, v in active.items())
            ]

    def create(self, entity: T) -> None:
        with self._lock:
            self._items[entity.id] = entity

    def get(self, entity_id: str) -> T | None:
        with self._lock:
            return self._items.get(entity_id)

    def update(self, entity: T) -> None:
        with self._lock:
            self._items[entity.id] = entity

    def delete(self, entity_id: str) -> bool:
        with self._lock:
            return self._items.pop(entity_id, None) is not None

    def list(self, page: int = 1, limit: int = 20, **filters) -> list[T]:
        return paginate(self.filter(**filters), page, limit)

    def count(self, **filters) -> int:
        return len(self.filter(**filters))

    def remove_where(self, **filters) -> int:
        with self._lock:
            doomed = [item.id for item in self.filter(**filters)]
            for entity_id in doomed:
                del self._items[entity_id]
            return len(doomed)


class Store:
    """
    The four entity collections behind one re-entrant lock.

    Single calls are atomic on their own. Sequences that read, derive and
    then write (PATCH merges, steep numbering) must run inside
    `transaction()` so no other request interleaves.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.teapots: Collection[Teapot] = Collection(self._lock)
        self.teas: Collection[Tea] = Collection(self._lock)
        self.brews: Collection[Brew] = Collection(self._lock)
        self.steeps: Collection[Steep] = Collection(self._lock)

    @contextmanager
    def transaction(self) -> Iterator[Store]:
        with self._lock:
            yield self

    def responsive(self, timeout: float = 1.0) -> bool:
        """Whether the lock can be taken within `timeout` seconds."""
        if not self._lock.acquire(timeout=timeout):
            return False
        self._lock.release()
        return True

    # ── Teapots ───────────────────────────────────────────────────────────────

    def list_teapots(
        self,
        page: int = 1,
        limit: int = 20,
        material: TeapotMaterial | None = None,
        style: TeapotStyle | None = None,
    ) -> list[Teapot]:
        return self.teapots.list(page, limit, material=material, style=style)

    def count_teapots(
        self,
        material: TeapotMaterial | None = None,
        style: TeapotStyle | None = None,
    ) -> int:
        return self.teapots.count(material=material, style=style)

    # ── Teas ──────────────────────────────────────────────────────────────────

    def list_teas(
        self,
        page: int = 1,
        limit: int = 20,
        type: TeaType | None = None,
        caffeine_level: CaffeineLevel | None = None,
    ) -> list[Tea]:
        return self.teas.list(page, limit, type=type, caffeine_level=caffeine_level)

    def count_teas(
        self,
        type: TeaType | None = None,
        caffeine_level: CaffeineLevel | None = None,
    ) -> int:
        return self.teas.count(type=type, caffeine_level=caffeine_level)

    # ── Brews ─────────────────────────────────────────────────────────────────

    def list_brews(
        self,
        page: int = 1,
        limit: int = 20,
        status: BrewStatus | None = None,
        teapot_id: str | None = None,
        tea_id: str | None = None,
    ) -> list[Brew]:
        return self.brews.list(page, limit, status=status, teapot_id=teapot_id, tea_id=tea_id)

    def count_brews(
        self,
        status: BrewStatus | None = None,
        teapot_id: str | None = None,
        tea_id: str | None = None,
    ) -> int:
        return self.brews.count(status=status, teapot_id=teapot_id, tea_id=tea_id)

    def list_brews_by_teapot(self, teapot_id: str, page: int = 1, limit: int = 20) -> list[Brew]:
        return self.list_brews(page, limit, teapot_id=teapot_id)

    def count_brews_by_teapot(self, teapot_id: str) -> int:
        return self.count_brews(teapot_id=teapot_id)

    def delete_brew(self, brew_id: str) -> bool:
        """Delete a brew together with all of its steeps."""
        with self._lock:
            if not self.brews.delete(brew_id):
                return False
            self.steeps.remove_where(brew_id=brew_id)
            return True

    # ── Steeps ────────────────────────────────────────────────────────────────

    def list_steeps_by_brew(self, brew_id: str, page: int = 1, limit: int = 20) -> list[Steep]:
        steeps = sorted(self.steeps.filter(brew_id=brew_id), key=lambda s: s.steep_number)
        return paginate(steeps, page, limit)

    def count_steeps_by_brew(self, brew_id: str) -> int:
        return self.steeps.count(brew_id=brew_id)

    def next_steep_number(self, brew_id: str) -> int:
        return self.count_steeps_by_brew(brew_id) + 1
