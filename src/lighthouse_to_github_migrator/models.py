"""Ticket and comment records as stored in a Lighthouse export.

A record is read either in the raw Lighthouse export shape, where the comment
thread is the ticket's ``versions`` list, or in the normalized shape written
back by the migrator once GitHub references have been attached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidTicketError


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _github_reference(value: Any, owner: str) -> dict[str, Any] | None:
    if not value:
        return None
    if not isinstance(value, dict):
        msg = f"{owner} has a malformed GitHub reference"
        raise InvalidTicketError(msg)
    return value


@dataclass
class CommentRecord:
    """A comment on a ticket."""

    body: str
    user_name: str = ""
    created_at: str = ""
    github: dict[str, Any] | None = None
    """Comment returned by GitHub on creation; None until synchronized."""

    @property
    def synced(self) -> bool:
        return bool(self.github)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CommentRecord:
        return cls(
            body=_text(data.get("body")),
            user_name=_text(data.get("user_name")),
            created_at=_text(data.get("created_at")),
            github=_github_reference(data.get("github"), "Comment"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "body": self.body,
            "user_name": self.user_name,
            "created_at": self.created_at,
            "github": self.github,
        }


@dataclass
class TicketRecord:
    """A Lighthouse ticket with its comment thread."""

    id: int | str
    title: str
    body: str = ""
    tag: str = ""
    milestone: str = ""
    status: str = ""
    assigned_to: str = ""
    user_name: str = ""
    created_at: str = ""
    link: str = ""
    comments: list[CommentRecord] = field(default_factory=list)
    github: dict[str, Any] | None = None
    """Issue returned by GitHub on creation; None until synchronized."""

    @property
    def synced(self) -> bool:
        return bool(self.github)

    @property
    def issue_number(self) -> int:
        if not self.github:
            msg = f"Ticket {self.id} has no GitHub issue yet"
            raise InvalidTicketError(msg)
        return int(self.github["number"])

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TicketRecord:
        """Build a record from either the raw export or the normalized shape.

        Raises:
            InvalidTicketError: If the data has no ticket, the ticket has no title,
                or a GitHub reference is malformed
        """
        if not isinstance(data, dict) or not isinstance(data.get("ticket"), dict):
            msg = "Record has no 'ticket' object"
            raise InvalidTicketError(msg)

        ticket: dict[str, Any] = data["ticket"]
        ticket_id = ticket.get("id", ticket.get("number"))
        if ticket_id is None or not ticket.get("title"):
            msg = "Ticket is missing its id or title"
            raise InvalidTicketError(msg)

        if "comments" in data:
            raw_comments = data["comments"] or []
        else:
            raw_comments = ticket.get("versions") or []
        if not isinstance(raw_comments, list) or not all(isinstance(c, dict) for c in raw_comments):
            msg = f"Ticket {ticket_id} has a malformed comment list"
            raise InvalidTicketError(msg)

        github = _github_reference(data.get("github"), f"Ticket {ticket_id}")
        if github is not None:
            try:
                int(github["number"])
            except (KeyError, TypeError, ValueError) as e:
                msg = f"Ticket {ticket_id} has a GitHub reference without an issue number"
                raise InvalidTicketError(msg) from e

        return cls(
            id=ticket_id,
            title=_text(ticket["title"]),
            body=_text(ticket.get("body")),
            tag=_text(ticket.get("tag")),
            milestone=_text(ticket.get("milestone", ticket.get("milestone_title"))),
            status=_text(ticket.get("status", ticket.get("state"))),
            assigned_to=_text(ticket.get("assigned_to", ticket.get("assigned_user_name"))),
            user_name=_text(ticket.get("user_name", ticket.get("creator_name"))),
            created_at=_text(ticket.get("created_at")),
            link=_text(ticket.get("link", ticket.get("url"))),
            comments=[CommentRecord.from_dict(c) for c in raw_comments],
            github=github,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticket": {
                "id": self.id,
                "title": self.title,
                "body": self.body,
                "tag": self.tag,
                "milestone": self.milestone,
                "status": self.status,
                "assigned_to": self.assigned_to,
                "user_name": self.user_name,
                "created_at": self.created_at,
                "link": self.link,
            },
            "comments": [comment.to_dict() for comment in self.comments],
            "github": self.github,
        }
