"""Protocols defining the contracts between the sync engine and its collaborators.

The engine is split from the systems it talks to:

1. IssueTracker: Creates and lists data in the target tracker (GitHub)
2. RecordStore: Reads and writes the local ticket records of one project

This separation allows testing the reconciliation logic with in-memory fakes
and keeps GitHub specifics (PyGithub objects, error payloads) at the boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .models import TicketRecord


class IssueTracker(Protocol):
    """Protocol for the remote issue tracker, bound to one repository.

    Every method returns the raw JSON of the response. Failures are raised as
    RemoteError with a RemoteErrorKind, so callers branch on the kind instead
    of on error messages.
    """

    def create_issue(
        self,
        title: str,
        body: str,
        *,
        milestone: int | None = None,
        labels: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create an issue; the result holds at least its ``number``."""
        ...

    def update_issue(
        self,
        number: int,
        *,
        state: str | None = None,
        assignee: str | None = None,
    ) -> dict[str, Any]:
        """Change the state and/or assignee of an issue."""
        ...

    def list_milestones(self) -> list[dict[str, Any]]:
        """Return all milestones (any state) with their ``title`` and ``number``."""
        ...

    def create_milestone(self, title: str) -> dict[str, Any]:
        """Create a milestone.

        Raises:
            RemoteError: With kind ALREADY_EXISTS if the title is taken
        """
        ...

    def list_labels(self) -> list[dict[str, Any]]:
        """Return all labels with their ``name``."""
        ...

    def create_label(self, name: str) -> dict[str, Any]:
        """Create a label.

        Raises:
            RemoteError: With kind ALREADY_EXISTS if the name is taken
        """
        ...

    def create_comment(self, number: int, body: str) -> dict[str, Any]:
        """Add a comment to an issue."""
        ...


class RecordStore(Protocol):
    """Protocol for the local ticket records of one project."""

    def ticket_ids(self) -> list[str]:
        """Return all ticket ids in processing order."""
        ...

    def read(self, ticket_id: str) -> TicketRecord | None:
        """Load a ticket record, or None if it does not exist.

        Raises:
            InvalidTicketError: If the record cannot be parsed
        """
        ...

    def write(self, ticket_id: str, record: TicketRecord) -> None:
        """Overwrite the stored record."""
        ...
