"""
Resolve Lighthouse milestone names to GitHub milestone numbers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import MilestoneConsistencyError, RemoteError, RemoteErrorKind

if TYPE_CHECKING:
    from .protocols import IssueTracker
    from .reference_cache import ReferenceCache

logger: logging.Logger = logging.getLogger(__name__)


class MilestoneResolver:
    """Finds or creates the GitHub milestone for a milestone title."""

    _tracker: IssueTracker
    _cache: ReferenceCache[int]
    created: int

    def __init__(self, tracker: IssueTracker, cache: ReferenceCache[int]) -> None:
        self._tracker = tracker
        self._cache = cache
        self.created = 0

    def _refresh(self) -> None:
        self._cache.replace({m["title"]: int(m["number"]) for m in self._tracker.list_milestones()})

    def resolve(self, title: str) -> int:
        """Return the GitHub milestone number for title, creating the milestone if needed.

        Raises:
            MilestoneConsistencyError: If GitHub reports the title as taken but does not list it
            RemoteError: If creating the milestone fails for any other reason
        """
        if not self._cache.populated:
            self._refresh()

        number = self._cache.get(title)
        if number is not None:
            return number

        try:
            milestone = self._tracker.create_milestone(title)
        except RemoteError as e:
            if e.kind is not RemoteErrorKind.ALREADY_EXISTS:
                raise
            # Created by someone else since the cache was filled
            logger.debug(f"Milestone '{title}' already exists, refreshing milestone cache")
            self._refresh()
            number = self._cache.get(title)
            if number is None:
                msg = (
                    f"GitHub reported milestone '{title}' as existing but did not list it "
                    f"(known milestones: {sorted(self._cache.keys())})"
                )
                raise MilestoneConsistencyError(msg) from e
            return number

        number = int(milestone["number"])
        self._cache.add(title, number)
        self.created += 1
        logger.info(f"Created milestone #{number}: {title}")
        return number
