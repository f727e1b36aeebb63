"""Key/value view over a URL fragment."""

from typing import Optional

from linkscrub.utils.multimap import FragmentMultimap


class HashParams:
    """Parse a fragment such as ``a=1&b&c=3`` into an ordered multimap.

    Entries without ``=`` (or with an empty value) map to ``None``.
    Entries with more than one ``=`` also map to ``None``, and an empty key
    is skipped entirely.
    """

    def __init__(self, fragment: str = "") -> None:
        self._params: FragmentMultimap[str, Optional[str]] = FragmentMultimap()

        if fragment.startswith("#"):
            fragment = fragment[1:]

        for part in fragment.split("&"):
            pieces = part.split("=")
            key = pieces[0]
            if not key:
                continue
            value = pieces[1] if len(pieces) == 2 and pieces[1] else None
            self._params.put(key, value)

    def append(self, name: str, value: Optional[str] = None) -> None:
        self._params.put(name, value)

    def delete(self, name: str) -> None:
        self._params.delete(name)

    def get(self, name: str) -> Optional[str]:
        """Return the first value stored under ``name``, or None."""
        values = self._params.get_ordered(name)
        return values[0] if values and values[0] else None

    def get_all(self, name: str) -> set[Optional[str]]:
        return self._params.get(name)

    def keys(self) -> list[str]:
        return self._params.keys()

    def __len__(self) -> int:
        return len(self._params)

    def __bool__(self) -> bool:
        return len(self._params) > 0

    def __str__(self) -> str:
        parts = []
        for key, value in self._params.entries():
            parts.append(f"{key}={value}" if value else key)
        return "&".join(parts)

    def __repr__(self) -> str:
        return f"HashParams({str(self)!r})"
