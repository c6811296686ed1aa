"""
Custom exception classes for the Lighthouse to GitHub migration tool.
"""

from __future__ import annotations

from enum import Enum


class RemoteErrorKind(Enum):
    """Closed set of GitHub failure conditions the sync engine reacts to."""

    ALREADY_EXISTS = "already_exists"
    INVALID_ASSIGNEE = "invalid_assignee"
    OTHER = "other"


class MigrationError(Exception):
    """Base exception for migration errors."""


class RemoteError(MigrationError):
    """Raised when a GitHub API call fails."""

    kind: RemoteErrorKind
    status: int | None

    def __init__(self, message: str, *, kind: RemoteErrorKind = RemoteErrorKind.OTHER, status: int | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status


class MilestoneConsistencyError(MigrationError):
    """Raised when GitHub reports a milestone as existing but does not list it."""


class InvalidTicketError(MigrationError):
    """Raised when a ticket record cannot be loaded or is structurally invalid."""
