"""
Known-set tracking for the emission loop.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class KnownTypes:
    """Container names whose definitions are complete at the current point of emission.

    Seeded with the externally supplied names. The emission loop adds a name
    right after rendering its container; renderers only test membership.
    """

    def __init__(self, external_names: Iterable[str] = ()):
        self._names: set[str] = set(external_names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def add(self, name: str) -> None:
        """Record that a container has been fully emitted."""
        self._names.add(name)
