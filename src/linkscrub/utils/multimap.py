"""Ordered multimap backed by per-key sets.

Keys keep their first insertion order and values keep insertion order
within a key, so iteration over pairs is deterministic.
"""

from typing import Callable, Generic, Hashable, Iterator, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V", bound=Hashable)


class FragmentMultimap(Generic[K, V]):
    """Map each key to a set of distinct values.

    ``len()`` counts (key, value) pairs, not distinct keys. Adding a pair
    that is already present is a no-op.

    Example:
        >>> m = FragmentMultimap()
        >>> m.put("a", "1")
        True
        >>> m.put("a", "1")
        False
        >>> len(m)
        1
    """

    def __init__(self) -> None:
        # dict values double as ordered sets
        self._map: dict[K, dict[V, None]] = {}
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def get(self, key: K) -> set[V]:
        """Return a copy of the values stored under ``key`` (empty if absent)."""
        return set(self._map.get(key, ()))

    def get_ordered(self, key: K) -> list[V]:
        """Return the values under ``key`` in insertion order."""
        return list(self._map.get(key, ()))

    def put(self, key: K, value: V) -> bool:
        """Add a pair.

        Returns:
            True if the pair was new, False if it was already present
        """
        values = self._map.setdefault(key, {})
        if value in values:
            return False
        values[value] = None
        self._size += 1
        return True

    def has(self, key: K) -> bool:
        return key in self._map

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def has_entry(self, key: K, value: V) -> bool:
        return value in self._map.get(key, ())

    def delete(self, key: K) -> bool:
        """Remove every value under ``key``."""
        values = self._map.pop(key, None)
        if values is None:
            return False
        self._size -= len(values)
        return True

    def delete_entry(self, key: K, value: V) -> bool:
        """Remove a single pair, dropping the key once it has no values left."""
        values = self._map.get(key)
        if values is None or value not in values:
            return False
        del values[value]
        if not values:
            del self._map[key]
        self._size -= 1
        return True

    def clear(self) -> None:
        self._map.clear()
        self._size = 0

    def entries(self) -> Iterator[tuple[K, V]]:
        for key, values in self._map.items():
            for value in values:
                yield key, value

    def keys(self) -> list[K]:
        """Return a snapshot of the keys, safe to iterate while deleting."""
        return list(self._map)

    def values(self) -> Iterator[V]:
        for _, value in self.entries():
            yield value

    def for_each(self, callback: Callable[[K, V], None]) -> None:
        for key, value in self.entries():
            callback(key, value)

    def __iter__(self) -> Iterator[tuple[K, V]]:
        return self.entries()

    def __repr__(self) -> str:
        pairs = ", ".join(f"{k!r}: {v!r}" for k, v in self.entries())
        return f"FragmentMultimap({{{pairs}}})"
