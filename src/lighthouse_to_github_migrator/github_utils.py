from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Final

from github import Auth, Github, GithubException

from . import utils
from .exceptions import RemoteError, RemoteErrorKind

if TYPE_CHECKING:
    from github.Issue import Issue
    from github.Repository import Repository

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105

# GitHub's own default label color
DEFAULT_LABEL_COLOR: Final[str] = "ededed"


def get_token(pass_path: str | None = None, config_token: str | None = None) -> str | None:
    """Get GitHub token from pass path, env var GITHUB_TOKEN, config file, or default pass location."""
    if pass_path:
        return utils.get_pass_value(pass_path)

    token: str | None = os.environ.get(_TOKEN_ENV_VAR)
    if token:
        return token

    if config_token:
        return config_token

    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except utils.PassError:
        logger.warning("No GitHub token specified nor found")
        return None


def get_client(token: str | None = None) -> Github:
    """Get a GitHub client using the token. Falls back to anonymous access without one."""
    if token:
        return Github(auth=Auth.Token(token))
    return Github()


def _validation_errors(exc: GithubException) -> list[dict[str, Any]]:
    if exc.status != 422 or not isinstance(exc.data, dict):
        return []
    errors: object = exc.data.get("errors")  # pyright: ignore[reportUnknownVariableType]
    if not isinstance(errors, list):
        return []
    return [e for e in errors if isinstance(e, dict)]  # pyright: ignore[reportUnknownVariableType]


def classify_github_exception(exc: GithubException) -> RemoteErrorKind:
    """Map a GitHub error response to the condition it represents.

    A 422 "already_exists" validation error is GitHub's duplicate detection for
    milestone titles and label names. A 422 "invalid" error on the assignee field
    means the user is not a collaborator of the repository.
    """
    errors = _validation_errors(exc)
    if any(e.get("code") == "already_exists" for e in errors):
        return RemoteErrorKind.ALREADY_EXISTS
    if any(e.get("field") == "assignee" and e.get("code") == "invalid" for e in errors):
        return RemoteErrorKind.INVALID_ASSIGNEE
    return RemoteErrorKind.OTHER


@contextmanager
def _remote_errors(action: str) -> Iterator[None]:
    try:
        yield
    except GithubException as e:
        msg = f"Failed to {action}: {e}"
        raise RemoteError(msg, kind=classify_github_exception(e), status=e.status) from e


class GithubTracker:
    """IssueTracker implementation for one GitHub repository, using PyGithub."""

    _client: Github
    _repo_path: str
    _repo: Repository | None
    _issues: dict[int, Issue]

    def __init__(self, client: Github, repo_path: str) -> None:
        self._client = client
        self._repo_path = repo_path
        self._repo = None
        # Issues fetched for updates and comments, by number
        self._issues = {}

    @property
    def repo_path(self) -> str:
        return self._repo_path

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            with _remote_errors(f"load repository {self._repo_path}"):
                self._repo = self._client.get_repo(self._repo_path)
        return self._repo

    def _issue(self, number: int) -> Issue:
        if number not in self._issues:
            self._issues[number] = self.repo.get_issue(number)
        return self._issues[number]

    def create_issue(
        self,
        title: str,
        body: str,
        *,
        milestone: int | None = None,
        labels: list[str] | None = None,
    ) -> dict[str, Any]:
        with _remote_errors(f"create issue '{title}'"):
            kwargs: dict[str, Any] = {"title": title, "body": body}
            if milestone is not None:
                kwargs["milestone"] = self.repo.get_milestone(milestone)
            if labels:
                kwargs["labels"] = labels
            issue = self.repo.create_issue(**kwargs)
            self._issues[issue.number] = issue
            return issue.raw_data

    def update_issue(
        self,
        number: int,
        *,
        state: str | None = None,
        assignee: str | None = None,
    ) -> dict[str, Any]:
        with _remote_errors(f"update issue #{number}"):
            kwargs: dict[str, Any] = {}
            if state is not None:
                kwargs["state"] = state
            if assignee is not None:
                kwargs["assignee"] = assignee
            issue = self._issue(number)
            issue.edit(**kwargs)
            return issue.raw_data

    def list_milestones(self) -> list[dict[str, Any]]:
        with _remote_errors("list milestones"):
            return [{"title": m.title, "number": m.number} for m in self.repo.get_milestones(state="all")]

    def create_milestone(self, title: str) -> dict[str, Any]:
        with _remote_errors(f"create milestone '{title}'"):
            return self.repo.create_milestone(title=title).raw_data

    def list_labels(self) -> list[dict[str, Any]]:
        with _remote_errors("list labels"):
            return [{"name": label.name} for label in self.repo.get_labels()]

    def create_label(self, name: str) -> dict[str, Any]:
        with _remote_errors(f"create label '{name}'"):
            return self.repo.create_label(name=name, color=DEFAULT_LABEL_COLOR).raw_data

    def create_comment(self, number: int, body: str) -> dict[str, Any]:
        with _remote_errors(f"create comment on issue #{number}"):
            return self._issue(number).create_comment(body).raw_data
