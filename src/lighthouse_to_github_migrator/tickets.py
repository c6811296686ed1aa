"""
Create the GitHub issue of a Lighthouse ticket, unless it already has one.
"""

from __future__ import annotations

import logging
from collections.abc import Collection
from typing import TYPE_CHECKING, Any

from .exceptions import RemoteError, RemoteErrorKind
from .issue_builder import build_issue_body, escape_mentions
from .tags import derive_tags

if TYPE_CHECKING:
    from .config import ProjectConfig
    from .labels import LabelEnsurer
    from .milestones import MilestoneResolver
    from .models import TicketRecord
    from .protocols import IssueTracker, RecordStore

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CLOSED_STATES: frozenset[str] = frozenset({"closed"})


class TicketUpserter:
    """Creates GitHub issues for tickets and syncs their state and assignee.

    The GitHub reference stored on a ticket is the only record of its issue: a
    ticket that has one is never created again.
    """

    _tracker: IssueTracker
    _project: ProjectConfig
    _milestones: MilestoneResolver
    _labels: LabelEnsurer
    _closed_states: Collection[str]

    def __init__(
        self,
        tracker: IssueTracker,
        project: ProjectConfig,
        milestones: MilestoneResolver,
        labels: LabelEnsurer,
        *,
        closed_states: Collection[str] = DEFAULT_CLOSED_STATES,
    ) -> None:
        self._tracker = tracker
        self._project = project
        self._milestones = milestones
        self._labels = labels
        self._closed_states = closed_states

    def build_payload(self, ticket: TicketRecord) -> dict[str, Any]:
        """Assemble the issue creation arguments, creating milestone and labels as needed."""
        payload: dict[str, Any] = {
            "title": escape_mentions(ticket.title),
            "body": build_issue_body(ticket, self._project.users),
        }

        if ticket.milestone:
            payload["milestone"] = self._milestones.resolve(ticket.milestone)

        labels = self._labels.ensure(derive_tags(ticket.tag))
        if labels:
            payload["labels"] = labels

        return payload

    def upsert(self, ticket_id: str, ticket: TicketRecord, store: RecordStore) -> bool:
        """Create the GitHub issue for a ticket unless it already has one.

        Args:
            ticket_id: Id of the ticket in the record store
            ticket: The ticket record; its GitHub reference is set on creation
            store: Record store the ticket is written back to

        Returns:
            True if an issue was created, False if the ticket was already synchronized

        Raises:
            RemoteError: If creating or updating the issue fails
        """
        if ticket.synced:
            logger.debug(f"Ticket {ticket.id} already synchronized as issue #{ticket.issue_number}")
            return False

        payload = self.build_payload(ticket)
        issue = self._tracker.create_issue(
            payload["title"],
            payload["body"],
            milestone=payload.get("milestone"),
            labels=payload.get("labels"),
        )
        number = int(issue["number"])
        logger.info(f"GitHub issue {self._project.repo_path} #{number} created for ticket {ticket.title}")

        ticket.github = issue
        store.write(ticket_id, ticket)

        if ticket.status in self._closed_states:
            self._tracker.update_issue(number, state="closed")
            logger.debug(f"Closed issue #{number}")

        self._assign(number, ticket)
        return True

    def _assign(self, number: int, ticket: TicketRecord) -> None:
        if not ticket.assigned_to:
            return
        login = self._project.users.get(ticket.assigned_to)
        if not login:
            logger.debug(f"No GitHub user known for assignee {ticket.assigned_to} of issue #{number}")
            return

        try:
            self._tracker.update_issue(number, assignee=login)
        except RemoteError as e:
            if e.kind is not RemoteErrorKind.INVALID_ASSIGNEE:
                raise
            logger.warning(f"Unable to assign issue #{number} to user {login}, user must be a repo collaborator")
