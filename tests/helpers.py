"""In-memory doubles and record builders shared by the tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from lighthouse_to_github_migrator.exceptions import RemoteError, RemoteErrorKind
from lighthouse_to_github_migrator.models import CommentRecord, TicketRecord

if TYPE_CHECKING:
    from pathlib import Path


class FakeGithub:
    """In-memory IssueTracker keeping state across runs like a real repository."""

    def __init__(self, *, collaborators: set[str] | None = None) -> None:
        self.issues: dict[int, dict[str, Any]] = {}
        self.comments: list[dict[str, Any]] = []
        self.milestones: dict[str, int] = {}
        self.labels: list[str] = []
        self.collaborators: set[str] | None = collaborators
        self.calls: list[str] = []

    def count(self, call: str) -> int:
        return self.calls.count(call)

    def create_issue(
        self,
        title: str,
        body: str,
        *,
        milestone: int | None = None,
        labels: list[str] | None = None,
    ) -> dict[str, Any]:
        self.calls.append("create_issue")
        number = len(self.issues) + 1
        self.issues[number] = {
            "number": number,
            "title": title,
            "body": body,
            "milestone": milestone,
            "labels": list(labels or []),
            "state": "open",
            "assignee": None,
        }
        return dict(self.issues[number])

    def update_issue(
        self,
        number: int,
        *,
        state: str | None = None,
        assignee: str | None = None,
    ) -> dict[str, Any]:
        self.calls.append("update_issue")
        issue = self.issues[number]
        if assignee is not None:
            if self.collaborators is not None and assignee not in self.collaborators:
                msg = "Validation Failed: Field 'assignee' is invalid"
                raise RemoteError(msg, kind=RemoteErrorKind.INVALID_ASSIGNEE, status=422)
            issue["assignee"] = assignee
        if state is not None:
            issue["state"] = state
        return dict(issue)

    def list_milestones(self) -> list[dict[str, Any]]:
        self.calls.append("list_milestones")
        return [{"title": title, "number": number} for title, number in self.milestones.items()]

    def create_milestone(self, title: str) -> dict[str, Any]:
        self.calls.append("create_milestone")
        if title in self.milestones:
            raise RemoteError("Validation Failed", kind=RemoteErrorKind.ALREADY_EXISTS, status=422)
        self.milestones[title] = len(self.milestones) + 1
        return {"title": title, "number": self.milestones[title]}

    def list_labels(self) -> list[dict[str, Any]]:
        self.calls.append("list_labels")
        return [{"name": name} for name in self.labels]

    def create_label(self, name: str) -> dict[str, Any]:
        self.calls.append("create_label")
        if name in self.labels:
            raise RemoteError("Validation Failed", kind=RemoteErrorKind.ALREADY_EXISTS, status=422)
        self.labels.append(name)
        return {"name": name}

    def create_comment(self, number: int, body: str) -> dict[str, Any]:
        self.calls.append("create_comment")
        comment = {"id": len(self.comments) + 1, "issue": number, "body": body}
        self.comments.append(comment)
        return dict(comment)


class MemoryStore:
    """RecordStore keeping ticket records in a dict."""

    def __init__(self, records: dict[str, TicketRecord] | None = None) -> None:
        self.records: dict[str, TicketRecord] = records or {}
        self.writes: list[str] = []

    def ticket_ids(self) -> list[str]:
        return list(self.records)

    def read(self, ticket_id: str) -> TicketRecord | None:
        return self.records.get(ticket_id)

    def write(self, ticket_id: str, record: TicketRecord) -> None:
        self.writes.append(ticket_id)
        self.records[ticket_id] = record


def make_ticket(**overrides: Any) -> TicketRecord:
    """Build a ticket record with sensible defaults."""
    fields: dict[str, Any] = {
        "id": 12,
        "title": "Broken login",
        "body": "Login fails for @bob",
        "tag": "",
        "milestone": "",
        "status": "open",
        "assigned_to": "",
        "user_name": "Alice",
        "created_at": "2010-01-05T10:11:12Z",
        "link": "http://example.lighthouseapp.com/projects/1/tickets/12",
        "comments": [],
    }
    fields.update(overrides)
    return TicketRecord(**fields)


def make_comment(body: str, **overrides: Any) -> CommentRecord:
    fields: dict[str, Any] = {"body": body, "user_name": "Bob", "created_at": "2010-01-06T08:00:00Z"}
    fields.update(overrides)
    return CommentRecord(**fields)


def write_lighthouse_ticket(tickets_dir: Path, ticket_id: str, ticket: dict[str, Any]) -> Path:
    """Write a ticket in the raw Lighthouse export shape."""
    path = tickets_dir / ticket_id / "ticket.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"ticket": ticket}), encoding="utf-8")
    return path
