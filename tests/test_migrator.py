"""
End-to-end tests of the migrator against an in-memory GitHub.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest
from tests.helpers import FakeGithub, write_lighthouse_ticket

from lighthouse_to_github_migrator import LighthouseToGithubMigrator, RemoteError
from lighthouse_to_github_migrator.config import ConfigFile
from lighthouse_to_github_migrator.ticket_store import LighthouseExport

CONFIG_TEXT = """\
users:
  Alice: alice-gh
  Bob: bob-gh
projects:
  acme:
    101-website:
      account: octo
      project: website
"""

TICKETS: dict[str, dict[str, Any]] = {
    "1-login-broken": {
        "number": 1,
        "title": "Login broken",
        "body": "Cannot log in, ask @bob",
        "tag": 'bug "needs review"',
        "milestone_title": "1.0",
        "state": "resolved",
        "assigned_user_name": "Bob",
        "creator_name": "Alice",
        "created_at": "2010-01-05T10:11:12Z",
        "url": "http://acme.lighthouseapp.com/projects/101/tickets/1",
        "versions": [
            {"body": "Cannot log in, ask @bob", "user_name": "Alice", "created_at": "2010-01-05T10:11:12Z"},
            {"body": "Looking into it", "user_name": "Bob", "created_at": "2010-01-06T09:00:00Z"},
            {"body": "", "user_name": "Bob", "created_at": "2010-01-06T09:05:00Z"},
            {"body": "Fixed", "user_name": "Bob", "created_at": "2010-01-07T09:00:00Z"},
        ],
    },
    "2-typo": {
        "number": 2,
        "title": "Typo on homepage",
        "body": "Teh",
        "tag": "Bug ui",
        "milestone_title": "1.0",
        "state": "open",
        "creator_name": "Carol",
        "created_at": "2010-02-01T10:00:00Z",
        "url": "http://acme.lighthouseapp.com/projects/101/tickets/2",
        "versions": [{"body": "Teh", "user_name": "Carol", "created_at": "2010-02-01T10:00:00Z"}],
    },
    "10-feature": {
        "number": 10,
        "title": "Dark mode",
        "body": "Please",
        "tag": "",
        "state": "new",
        "creator_name": "Bob",
        "created_at": "2010-03-01T10:00:00Z",
        "url": "http://acme.lighthouseapp.com/projects/101/tickets/10",
        "versions": [
            {"body": "Please", "user_name": "Bob", "created_at": "2010-03-01T10:00:00Z"},
            {"body": "+1", "user_name": "Alice", "created_at": "2010-03-02T10:00:00Z"},
        ],
    },
}


class TickingClock:
    """Clock advancing a full second per reading, so comments never need to wait."""

    def __init__(self) -> None:
        self.now: float = 1000.0
        self.sleep: Mock = Mock()

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


def _project_dir(root: Path) -> Path:
    return root / "export" / "acme" / "projects" / "101-website"


def _make_migrator(root: Path, github: FakeGithub) -> LighthouseToGithubMigrator:
    clock = TickingClock()
    return LighthouseToGithubMigrator(
        LighthouseExport(root / "export"),
        ConfigFile.load(root / "github.yaml"),
        tracker_factory=lambda project: github,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def export_root(tmp_path: Path) -> Path:
    project_dir = _project_dir(tmp_path)
    for ticket_id, ticket in TICKETS.items():
        write_lighthouse_ticket(project_dir / "tickets", ticket_id, ticket)
    (project_dir / "project.json").write_text(
        json.dumps({"project": {"closed_states_list": "resolved,invalid"}}), encoding="utf-8"
    )
    (tmp_path / "github.yaml").write_text(CONFIG_TEXT, encoding="utf-8")
    return tmp_path


@pytest.mark.integration
class TestMigrationRuns:
    def test_full_migration(self, export_root: Path) -> None:
        github = FakeGithub()

        [stats] = _make_migrator(export_root, github).migrate()

        assert stats.project == "acme/101-website"
        assert stats.github_repo == "octo/website"
        assert stats.tickets_total == 3
        assert stats.issues_created == 3
        assert stats.comments_created == 3
        assert stats.milestones_created == 1
        assert stats.labels_created == 3

        # Tickets in numeric order
        assert [issue["title"] for issue in github.issues.values()] == ["Login broken", "Typo on homepage", "Dark mode"]
        first = github.issues[1]
        assert first["state"] == "closed"
        assert first["assignee"] == "bob-gh"
        assert first["labels"] == ["bug", "needs review"]
        assert first["milestone"] == github.milestones["1.0"]
        assert github.issues[2]["milestone"] == first["milestone"]
        assert github.issues[2]["state"] == "open"
        assert [(c["issue"], c["body"].rsplit("\n", 1)[-1]) for c in github.comments] == [
            (1, "Looking into it"),
            (1, "Fixed"),
            (3, "+1"),
        ]

    def test_references_and_caches_are_persisted(self, export_root: Path) -> None:
        github = FakeGithub()
        _make_migrator(export_root, github).migrate(["acme/101-website"])

        stored = json.loads(
            (_project_dir(export_root) / "tickets" / "1-login-broken" / "ticket.json").read_text(encoding="utf-8")
        )
        assert stored["github"]["number"] == 1
        assert [c["github"] is not None for c in stored["comments"]] == [False, True, False, True]

        project = ConfigFile.load(export_root / "github.yaml").project_config("acme", "101-website")
        assert project is not None
        assert project.milestones == {"1.0": 1}
        assert project.labels == {"bug": "bug", "needs review": "needs review", "ui": "ui"}

    def test_second_run_creates_nothing(self, export_root: Path) -> None:
        github = FakeGithub()
        _make_migrator(export_root, github).migrate()
        github.calls.clear()

        [stats] = _make_migrator(export_root, github).migrate()

        assert github.calls == []
        assert stats.issues_created == 0
        assert stats.issues_existing == 3
        assert stats.comments_created == 0
        assert len(github.issues) == 3
        assert len(github.comments) == 3
        assert len(github.milestones) == 1
        assert len(github.labels) == 3

    def test_resumes_after_failed_comment(self, export_root: Path) -> None:
        github = FakeGithub()
        original_create_comment = github.create_comment
        github.create_comment = Mock(  # type: ignore[method-assign]
            side_effect=[{"id": 1, "issue": 1, "body": "x"}, RemoteError("Server Error", status=502)]
        )

        with pytest.raises(RemoteError):
            _make_migrator(export_root, github).migrate()

        github.create_comment = original_create_comment  # type: ignore[method-assign]
        github.calls.clear()
        [stats] = _make_migrator(export_root, github).migrate()

        # Ticket 1 and its first comment were recorded before the failure
        assert github.count("create_issue") == 2
        assert stats.issues_existing == 1
        assert stats.comments_created == 2


@pytest.mark.unit
class TestMigrationSkips:
    def test_invalid_ticket_is_skipped(self, export_root: Path, caplog: pytest.LogCaptureFixture) -> None:
        broken = _project_dir(export_root) / "tickets" / "5-broken" / "ticket.json"
        broken.parent.mkdir()
        broken.write_text("{not json", encoding="utf-8")
        (_project_dir(export_root) / "tickets" / "6-empty").mkdir()
        github = FakeGithub()

        [stats] = _make_migrator(export_root, github).migrate()

        assert stats.tickets_total == 5
        assert stats.tickets_invalid == 2
        assert stats.issues_created == 3
        assert "Skipping invalid ticket with id 5-broken" in caplog.text
        assert "Skipping invalid ticket with id 6-empty" in caplog.text

    def test_ticket_with_malformed_github_reference_is_skipped(
        self, export_root: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        record = {"ticket": {"id": 4, "title": "t"}, "comments": [{"body": "x"}], "github": {"url": "u"}}
        path = _project_dir(export_root) / "tickets" / "4-stale-reference" / "ticket.json"
        path.parent.mkdir()
        path.write_text(json.dumps(record), encoding="utf-8")
        github = FakeGithub()

        [stats] = _make_migrator(export_root, github).migrate()

        assert stats.tickets_total == 4
        assert stats.tickets_invalid == 1
        assert stats.issues_created == 3
        assert "Skipping invalid ticket with id 4-stale-reference" in caplog.text

    def test_unconfigured_project_is_skipped(self, export_root: Path, caplog: pytest.LogCaptureFixture) -> None:
        (export_root / "export" / "acme" / "projects" / "202-api" / "tickets").mkdir(parents=True)
        github = FakeGithub()

        [stats] = _make_migrator(export_root, github).migrate(["202-api"])

        assert stats.skipped
        assert stats.project == "acme/202-api"
        assert github.calls == []
        assert "no GitHub repository configured" in caplog.text
