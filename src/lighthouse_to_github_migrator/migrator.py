"""
Main migration class for Lighthouse to GitHub migration.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from . import github_utils as ghu
from .comments import CommentSynchronizer
from .exceptions import InvalidTicketError
from .labels import LabelEnsurer
from .milestones import MilestoneResolver
from .reference_cache import ReferenceCache
from .tickets import DEFAULT_CLOSED_STATES, TicketUpserter

if TYPE_CHECKING:
    from github import Github

    from .config import ConfigFile, ProjectConfig
    from .protocols import IssueTracker, RecordStore
    from .ticket_store import LighthouseExport

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class MigrationStats:
    """Statistics collected while migrating one project."""

    project: str
    github_repo: str = ""
    skipped: bool = False
    tickets_total: int = 0
    tickets_invalid: int = 0
    issues_created: int = 0
    issues_existing: int = 0
    comments_created: int = 0
    milestones_created: int = 0
    labels_created: int = 0


class LighthouseToGithubMigrator:
    """Imports the tickets of exported Lighthouse projects into GitHub issues.

    Every run is safe to repeat: tickets and comments that already carry a GitHub
    reference are left alone, so an aborted run is resumed by running again.
    """

    def __init__(
        self,
        export: LighthouseExport,
        config: ConfigFile,
        *,
        github_client: Github | None = None,
        tracker_factory: Callable[[ProjectConfig], IssueTracker] | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.export: LighthouseExport = export
        self.config: ConfigFile = config
        self._github_client: Github | None = github_client
        self._tracker_factory: Callable[[ProjectConfig], IssueTracker] = tracker_factory or self._github_tracker
        self._clock: Callable[[], float] = clock
        self._sleep: Callable[[float], None] = sleep

    def _github_tracker(self, project: ProjectConfig) -> IssueTracker:
        if self._github_client is None:
            self._github_client = ghu.get_client(self.config.token)
        return ghu.GithubTracker(self._github_client, project.repo_path)

    def migrate(self, projects: Sequence[str] | None = None) -> list[MigrationStats]:
        """Migrate the given projects, or every project in the export."""
        names = list(projects) if projects else self.export.projects()
        if not names:
            logger.warning(f"No projects found in {self.export.root}")
        return [self.migrate_project(name) for name in names]

    def migrate_project(self, name: str) -> MigrationStats:
        """Migrate all tickets of one project.

        Raises:
            MigrationError: On any GitHub failure that is not an expected condition
        """
        account, project_name = self.export.resolve_project(name)
        stats = MigrationStats(project=f"{account}/{project_name}")

        project = self.config.project_config(account, project_name)
        if project is None:
            logger.warning(f"Skipping {stats.project}: no GitHub repository configured")
            stats.skipped = True
            return stats

        stats.github_repo = project.repo_path
        store = self.export.store(account, project_name)
        logger.info(f"Migrating {stats.project} to {project.repo_path}")

        tracker = self._tracker_factory(project)
        milestones = MilestoneResolver(
            tracker, ReferenceCache(project.milestones, self.config.save, name="milestone")
        )
        labels = LabelEnsurer(tracker, ReferenceCache(project.labels, self.config.save, name="label"))
        upserter = TicketUpserter(
            tracker,
            project,
            milestones,
            labels,
            closed_states=store.closed_states() or DEFAULT_CLOSED_STATES,
        )
        synchronizer = CommentSynchronizer(tracker, project.users, clock=self._clock, sleep=self._sleep)

        for ticket_id in store.ticket_ids():
            stats.tickets_total += 1
            self._migrate_ticket(ticket_id, store, upserter, synchronizer, stats)

        stats.milestones_created = milestones.created
        stats.labels_created = labels.created
        logger.info(
            f"Migrated {stats.project}: {stats.issues_created} issues and "
            f"{stats.comments_created} comments created, {stats.issues_existing} issues already present"
        )
        return stats

    def _migrate_ticket(
        self,
        ticket_id: str,
        store: RecordStore,
        upserter: TicketUpserter,
        synchronizer: CommentSynchronizer,
        stats: MigrationStats,
    ) -> None:
        try:
            ticket = store.read(ticket_id)
        except InvalidTicketError as e:
            logger.warning(f"Skipping invalid ticket with id {ticket_id}: {e}")
            stats.tickets_invalid += 1
            return
        if ticket is None:
            logger.warning(f"Skipping invalid ticket with id {ticket_id}: no ticket data")
            stats.tickets_invalid += 1
            return

        if upserter.upsert(ticket_id, ticket, store):
            stats.issues_created += 1
        else:
            stats.issues_existing += 1

        stats.comments_created += synchronizer.synchronize(ticket_id, ticket, store)
