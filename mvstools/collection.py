"""A keyed, positional collection whose repeated keys gather into nested collections."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Any, Iterator

_POSITION = re.compile(r"[0-9]+")


class CollectionError(LookupError):
    """A collection operation was given bad parameters or a missing item."""

    def __init__(self, method: str, message: str) -> None:
        super().__init__(f"Collection.{method}: {message}")
        self.method = method
        self.message = message


@dataclass
class _Entry:
    item: Any
    key: str | None
    position: int


def _is_position(key: str) -> bool:
    return bool(_POSITION.fullmatch(key))


class Collection:
    """Items reachable by string key or by 1-based position.

    An all-digit key always means a position; any other key, the empty one
    included, is a name. Adding a second item under an existing name turns
    that entry into a nested collection holding every value given for it.
    When ``raise_errors`` is false, failed operations return None instead of
    raising :class:`CollectionError`.
    """

    def __init__(self, raise_errors: bool = False) -> None:
        self.raise_errors = raise_errors
        self._entries: list[_Entry] = []  # most recently added first
        self._lock = threading.RLock()

    def _fail(self, method: str, message: str) -> None:
        if self.raise_errors:
            raise CollectionError(method, message)
        return None

    def _by_key(self, key: str) -> _Entry | None:
        return next((e for e in self._entries if e.key == key), None)

    def _by_position(self, position: int) -> _Entry | None:
        return next((e for e in self._entries if e.position == position), None)

    def _find(self, key: Any) -> _Entry | None:
        key = str(key)
        if _is_position(key):
            return self._by_position(int(key))
        return self._by_key(key)

    def _default_key(self, key: Any) -> str:
        return str(len(self._entries) + 1) if key is None else str(key)

    def _insert(self, item: Any, key: str | None, position: int) -> _Entry:
        with self._lock:
            for entry in self._entries:
                if entry.position >= position:
                    entry.position += 1
            entry = _Entry(item, key, position)
            self._entries.insert(0, entry)
            return entry

    def _append(self, item: Any, key: str) -> _Entry:
        with self._lock:
            entry = _Entry(item, key, len(self._entries) + 1)
            self._entries.insert(0, entry)
            return entry

    def _as_collection(self, entry: _Entry) -> "Collection":
        if isinstance(entry.item, Collection):
            return entry.item
        with self._lock:
            nested = Collection(self.raise_errors)
            nested._add(entry.item, None, None, None)
            entry.item = nested
            return nested

    def _add(self, item: Any, key: Any, before: Any, after: Any) -> _Entry | None:
        if before is not None and after is not None:
            return self._fail("Add", "Invalid parameters of both before and after.")
        key = self._default_key(key)
        anchor = after if after is not None else before
        if anchor is not None:
            anchor = str(anchor)
            target = self._find(anchor)
            if target is None:
                side = "after" if after is not None else "before"
                return self._fail("Add", f'Item not found looking for {side}="{anchor}".')
            position = target.position + (1 if after is not None else 0)
            if not key:
                return self._insert(item, None, position)
            if self._by_key(key) is not None:
                return self._fail("Add", f'Item="{key}" already exists.')
            return self._insert(item, key, position)
        if _is_position(key):
            return self._insert(item, None, int(key))
        existing = self._by_key(key)
        if existing is not None:
            return self._as_collection(existing)._add(item, None, None, None)
        return self._append(item, key)

    def add(self, item: Any, key: Any = None, before: Any = None,
            after: Any = None) -> int | None:
        """Add an item; return its position (within a nested collection if merged), or None."""
        entry = self._add(item, key, before, after)
        return entry.position if entry else None

    def add_update(self, item: Any, key: Any = None) -> int | None:
        """Replace the item at ``key`` if present, otherwise add it; return its position."""
        key = self._default_key(key)
        with self._lock:
            if _is_position(key):
                position = int(key)
                entry = self._by_position(position)
                if entry is None:
                    return self._insert(item, None, position).position
            else:
                entry = self._by_key(key)
                if entry is None:
                    return self._append(item, key).position
            entry.item = item
            return entry.position

    def add_keyed(self, item: Any, key: Any = None, key2: Any = None) -> int | None:
        """Add an item under ``key2`` inside the nested collection found at ``key``."""
        key = self._default_key(key)
        entry = self._find(key)
        if entry is None:
            entry = self._add(Collection(self.raise_errors), key, None, None)
            if entry is None:
                return None
        added = self._as_collection(entry)._add(item, key2, None, None)
        return added.position if added else None

    def remove(self, key: Any) -> Any:
        """Remove the entry at ``key`` and return its item; later positions move down."""
        entry = self._find(key)
        if entry is None:
            return self._fail("Remove", f'Item="{key}" doesn\'t exist.')
        with self._lock:
            self._entries.remove(entry)
            for other in self._entries:
                if other.position > entry.position:
                    other.position -= 1
        return entry.item

    def item(self, key: Any) -> Any:
        """Return the item at ``key``, or None when it does not exist."""
        entry = self._find(key)
        if entry is None:
            return self._fail("Item", f'Item="{key}" doesn\'t exist.')
        return entry.item

    def has_keys(self, key: Any) -> bool:
        """True when the entry at ``key`` holds a nested collection."""
        entry = self._find(key)
        if entry is None:
            self._fail("HasKeys", f'Item="{key}" doesn\'t exist.')
            return False
        return isinstance(entry.item, Collection)

    def item_indexed(self, key: Any, index: int) -> Any:
        """Return the ``index``-th value stored under ``key``."""
        entry = self._find(key)
        if entry is None:
            return self._fail("ItemIndexed", f'Item="{key}" doesn\'t exist.')
        if isinstance(entry.item, Collection):
            return entry.item.item(str(index))
        return entry.item if index == 1 else None

    def item_keyed(self, key: Any, key2: Any) -> Any:
        """Return the value named ``key2`` inside the nested collection at ``key``."""
        entry = self._find(key)
        if entry is None:
            return self._fail("ItemKeyed", f'Item="{key}" doesn\'t exist.')
        if isinstance(entry.item, Collection):
            return entry.item.item(key2)
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        """Iterate over the items, most recently added first."""
        with self._lock:
            items = [entry.item for entry in self._entries]
        return iter(items)

    def __getitem__(self, key: Any) -> Any:
        entry = self._find(key)
        if entry is None:
            raise KeyError(key)
        return entry.item