"""Lazily populated name -> GitHub reference mapping persisted after every change."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Generic, TypeVar

logger: logging.Logger = logging.getLogger(__name__)

V = TypeVar("V")


class ReferenceCache(Generic[V]):
    """Cache of GitHub references (milestone numbers, label names) for one project.

    The cache is either uncached (nothing known yet, a full listing is needed) or
    cached (filled from a listing, extended as entries are created). The mapping
    is owned by the project configuration; ``persist`` is called after each change.
    """

    _mapping: dict[str, V]
    _persist: Callable[[], None]
    _listed: bool
    name: str

    def __init__(self, mapping: dict[str, V], persist: Callable[[], None], *, name: str = "references") -> None:
        self._mapping = mapping
        self._persist = persist
        self._listed = False
        self.name = name

    @property
    def populated(self) -> bool:
        return self._listed or bool(self._mapping)

    def __contains__(self, key: object) -> bool:
        return key in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def get(self, key: str) -> V | None:
        return self._mapping.get(key)

    def keys(self) -> list[str]:
        return list(self._mapping)

    def replace(self, entries: Mapping[str, V]) -> None:
        """Replace the whole cache with a fresh listing."""
        self._mapping.clear()
        self._mapping.update(entries)
        self._listed = True
        logger.debug(f"Refreshed {self.name} cache with {len(entries)} entries")
        self._persist()

    def add(self, key: str, value: V) -> None:
        self._mapping[key] = value
        self._persist()
