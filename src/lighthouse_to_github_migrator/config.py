"""Project configuration: GitHub targets, user aliases and the reference caches.

The configuration file maps every Lighthouse project to a GitHub repository and
doubles as the durable store of the milestone and label caches, so it is
rewritten after every cache change.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .exceptions import MigrationError
from .utils import atomic_write_text

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("github.yaml")


def _create_yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.default_flow_style = False
    return yaml


@dataclass
class ProjectConfig:
    """Run context of one project.

    The cache dicts are shared with the loaded configuration document, so
    ConfigFile.save() writes back whatever the resolvers have put in them.
    """

    account: str
    """GitHub owner (user or organization)."""
    project: str
    """GitHub repository name."""
    milestones: dict[str, int] = field(default_factory=dict)
    """Milestone title -> GitHub milestone number."""
    labels: dict[str, str] = field(default_factory=dict)
    """Label name -> canonical GitHub label name."""
    users: dict[str, str] = field(default_factory=dict)
    """Lighthouse user name -> GitHub login."""

    @property
    def repo_path(self) -> str:
        return f"{self.account}/{self.project}"


class ConfigFile:
    """YAML configuration file holding the settings of all projects."""

    path: Path
    data: dict[str, Any]

    def __init__(self, path: Path, data: dict[str, Any] | None = None) -> None:
        self.path = path
        self.data = data if data is not None else {}

    @classmethod
    def load(cls, path: Path = DEFAULT_CONFIG_PATH) -> ConfigFile:
        """Load the configuration file.

        Raises:
            MigrationError: If the file is missing or is not a YAML mapping
        """
        if not path.is_file():
            msg = f"Configuration file not found: {path}"
            raise MigrationError(msg)

        try:
            with path.open(encoding="utf-8") as f:
                data = _create_yaml().load(f)
        except YAMLError as e:
            msg = f"Invalid configuration file {path}: {e}"
            raise MigrationError(msg) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = f"Configuration file {path} must contain a mapping"
            raise MigrationError(msg)

        logger.debug(f"Loaded configuration from {path}")
        return cls(path, data)

    @property
    def token(self) -> str | None:
        return self.data.get("token") or None

    @property
    def users(self) -> dict[str, str]:
        users = self.data.get("users")
        if not isinstance(users, dict):
            users = self.data["users"] = {}
        return users

    def project_config(self, lighthouse_account: str, lighthouse_project: str) -> ProjectConfig | None:
        """Return the run context of a Lighthouse project, or None if it is not configured."""
        projects = self.data.get("projects")
        account = projects.get(lighthouse_account) if isinstance(projects, dict) else None
        entry = account.get(lighthouse_project) if isinstance(account, dict) else None
        if not isinstance(entry, dict) or not entry.get("account") or not entry.get("project"):
            return None

        if not isinstance(entry.get("milestones"), dict):
            entry["milestones"] = {}
        if not isinstance(entry.get("labels"), dict):
            entry["labels"] = {}

        return ProjectConfig(
            account=str(entry["account"]),
            project=str(entry["project"]),
            milestones=entry["milestones"],
            labels=entry["labels"],
            users=self.users,
        )

    def save(self) -> None:
        """Write the whole document back to disk."""
        stream = io.StringIO()
        _create_yaml().dump(self.data, stream)
        atomic_write_text(self.path, stream.getvalue())
        logger.debug(f"Saved configuration to {self.path}")
