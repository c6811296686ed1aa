"""Access to an unpacked Lighthouse export.

The export is a directory tree of the form::

    <root>/<account>/projects/<project>/project.json
    <root>/<account>/projects/<project>/tickets/<number>-<slug>/ticket.json
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

from .exceptions import InvalidTicketError, MigrationError
from .models import TicketRecord
from .utils import atomic_write_text, dump_json

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_EXPORT_PATH = Path("export")
TICKET_FILE = "ticket.json"
PROJECT_FILE = "project.json"

_PROJECT_PATH = re.compile(r"([^/]*)/projects/([^/]*)")
_LEADING_NUMBER = re.compile(r"^(\d+)")


def _ticket_sort_key(ticket_id: str) -> tuple[int, str]:
    # Export directories are "<number>-<slug>", process them in ticket number order
    match = _LEADING_NUMBER.match(ticket_id)
    return (int(match.group(1)) if match else -1, ticket_id)


def _subdirectories(path: Path) -> list[str]:
    if not path.is_dir():
        return []
    return sorted(p.name for p in path.iterdir() if p.is_dir() and not p.name.startswith("."))


class TicketStore:
    """RecordStore over the ticket directories of one exported project."""

    project_dir: Path

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir

    @property
    def tickets_dir(self) -> Path:
        return self.project_dir / "tickets"

    def _ticket_file(self, ticket_id: str) -> Path:
        return self.tickets_dir / ticket_id / TICKET_FILE

    def ticket_ids(self) -> list[str]:
        return sorted(_subdirectories(self.tickets_dir), key=_ticket_sort_key)

    def read(self, ticket_id: str) -> TicketRecord | None:
        path = self._ticket_file(ticket_id)
        if not path.is_file():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            msg = f"Unable to read {path}: {e}"
            raise InvalidTicketError(msg) from e
        return TicketRecord.from_dict(data)

    def write(self, ticket_id: str, record: TicketRecord) -> None:
        atomic_write_text(self._ticket_file(ticket_id), dump_json(record.to_dict()))

    def closed_states(self) -> frozenset[str] | None:
        """Ticket states the project treats as closed, if the export lists them."""
        path = self.project_dir / PROJECT_FILE
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning(f"Unable to read {path}, using default closed states")
            return None

        project = data.get("project", data) if isinstance(data, dict) else {}
        states = project.get("closed_states_list") if isinstance(project, dict) else None
        if not states or not isinstance(states, str):
            return None
        return frozenset(state.strip() for state in states.split(",") if state.strip())


class LighthouseExport:
    """An unpacked Lighthouse export holding one or more accounts."""

    root: Path

    def __init__(self, root: Path = DEFAULT_EXPORT_PATH) -> None:
        self.root = root

    def accounts(self) -> list[str]:
        return _subdirectories(self.root)

    def projects(self, account: str | None = None) -> list[str]:
        """List projects as "account/project" names, for one account or all of them."""
        accounts = [account] if account else self.accounts()
        return [
            f"{name}/{project}" for name in accounts for project in _subdirectories(self.root / name / "projects")
        ]

    def resolve_project(self, name: str) -> tuple[str, str]:
        """Find the (account, project) directory pair a user given project name refers to.

        Accepts any of ``path/to/<account>/projects/<project>``, ``<account>/<project>``,
        or a bare project directory name, id prefix or slug suffix (e.g. "12345" or
        "project-name" for "12345-project-name"), searched in every account.

        Raises:
            MigrationError: If no exported project matches
        """
        match = _PROJECT_PATH.search(name)
        if match:
            return match.group(1), match.group(2)

        if "/" in name:
            account, project = name.split("/", 1)
            return account, project

        for account in self.accounts():
            for project in _subdirectories(self.root / account / "projects"):
                if project == name or project.startswith(name) or project.endswith(name):
                    return account, project

        msg = f"No exported project matches '{name}'"
        raise MigrationError(msg)

    def store(self, account: str, project: str) -> TicketStore:
        project_dir = self.root / account / "projects" / project
        if not project_dir.is_dir():
            msg = f"Exported project not found: {project_dir}"
            raise MigrationError(msg)
        return TicketStore(project_dir)
