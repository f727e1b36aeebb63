"""Ordered, read-only collection of providers."""

from collections.abc import Iterable, Iterator
from typing import Optional

from linkscrub.rules.provider import Provider


class ProviderRegistry:
    """Providers in catalog order.

    Order decides precedence: the first provider that matches and yields a
    redirect or cancel stops the scan. The registry itself cannot be
    modified once built, so one instance may be shared between threads.
    """

    def __init__(self, providers: Iterable[Provider] = ()) -> None:
        self._providers: tuple[Provider, ...] = tuple(providers)

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def __getitem__(self, index: int) -> Provider:
        return self._providers[index]

    def names(self) -> list[str]:
        return [provider.get_name() for provider in self._providers]

    def get(self, name: str) -> Optional[Provider]:
        """Return the first provider called ``name``, or None."""
        for provider in self._providers:
            if provider.get_name() == name:
                return provider
        return None

    def __repr__(self) -> str:
        return f"ProviderRegistry({self.names()!r})"
