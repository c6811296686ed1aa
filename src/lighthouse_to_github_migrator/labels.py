"""
Make sure GitHub labels exist before issues reference them.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import RemoteError, RemoteErrorKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .protocols import IssueTracker
    from .reference_cache import ReferenceCache

logger: logging.Logger = logging.getLogger(__name__)


class LabelEnsurer:
    """Creates missing GitHub labels for ticket tags.

    GitHub identifies labels by name, so the cache maps a name to itself and a
    label reported as already existing needs no further lookup.
    """

    _tracker: IssueTracker
    _cache: ReferenceCache[str]
    created: int

    def __init__(self, tracker: IssueTracker, cache: ReferenceCache[str]) -> None:
        self._tracker = tracker
        self._cache = cache
        self.created = 0

    def ensure(self, labels: Iterable[str]) -> list[str]:
        """Create every label GitHub does not have yet.

        Args:
            labels: Label names required by an issue; empty names are ignored

        Returns:
            The non-empty label names, all of which now exist on GitHub

        Raises:
            RemoteError: If a label cannot be created for a reason other than a duplicate name
        """
        wanted = [label for label in labels if label]
        if not wanted:
            return []

        if not self._cache.populated:
            self._cache.replace({label["name"]: label["name"] for label in self._tracker.list_labels()})

        for label in wanted:
            if label in self._cache:
                continue
            try:
                self._tracker.create_label(label)
            except RemoteError as e:
                if e.kind is not RemoteErrorKind.ALREADY_EXISTS:
                    raise
                logger.debug(f"Label already existed: {label}")
            else:
                self.created += 1
                logger.debug(f"Created label: {label}")
            self._cache.add(label, label)

        return wanted
