"""
Create the GitHub comments of a Lighthouse ticket in their original order.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING

from .exceptions import MigrationError
from .issue_builder import build_comment_body

if TYPE_CHECKING:
    from .models import CommentRecord, TicketRecord
    from .protocols import IssueTracker, RecordStore

logger: logging.Logger = logging.getLogger(__name__)


class CommentSynchronizer:
    """Creates missing GitHub comments for a ticket's comment thread.

    GitHub orders comments by a creation timestamp with one second resolution, so
    two comments are never created within the same second.
    """

    _tracker: IssueTracker
    _users: Mapping[str, str]
    _clock: Callable[[], float]
    _sleep: Callable[[float], None]
    _last_second: int | None

    def __init__(
        self,
        tracker: IssueTracker,
        users: Mapping[str, str],
        *,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._tracker = tracker
        self._users = users
        self._clock = clock
        self._sleep = sleep
        self._last_second = None

    @staticmethod
    def should_skip(comment: CommentRecord, ticket: TicketRecord) -> bool:
        """Whether a comment must not be sent to GitHub.

        The first version of a Lighthouse ticket repeats the ticket body, which is
        already the issue description.
        """
        return comment.synced or not comment.body or comment.body == ticket.body

    def _wait_for_next_second(self) -> None:
        now = self._clock()
        second = int(now)
        if second == self._last_second:
            delay = second + 1 - now
            logger.debug(f"Waiting {delay:.3f}s to keep comment order")
            self._sleep(delay)
            second += 1
        self._last_second = second

    def synchronize(self, ticket_id: str, ticket: TicketRecord, store: RecordStore) -> int:
        """Create all comments of a ticket that are not on GitHub yet.

        Args:
            ticket_id: Id of the ticket in the record store
            ticket: Ticket record with a GitHub reference
            store: Record store the ticket is written back to when comments were created

        Returns:
            Number of comments created

        Raises:
            MigrationError: If the ticket has no GitHub issue
            RemoteError: If a comment cannot be created; earlier comments stay recorded
        """
        if not ticket.synced:
            msg = f"Ticket {ticket.id} has no GitHub issue to comment on"
            raise MigrationError(msg)

        number = ticket.issue_number
        self._last_second = None
        created = 0

        try:
            for comment in ticket.comments:
                if self.should_skip(comment, ticket):
                    logger.debug(f"Skipping comment by {comment.user_name} on issue #{number}")
                    continue

                self._wait_for_next_second()
                comment.github = self._tracker.create_comment(number, build_comment_body(comment, self._users))
                created += 1
                logger.debug(f"Migrated comment by {comment.user_name} to issue #{number}")
        except BaseException:
            if created:
                try:
                    store.write(ticket_id, ticket)
                except Exception:
                    logger.exception(f"Unable to record {created} comment(s) created on issue #{number}")
            raise

        if created:
            store.write(ticket_id, ticket)
        return created
