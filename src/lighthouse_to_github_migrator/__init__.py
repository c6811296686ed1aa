"""
Lighthouse to GitHub Migration Tool

Imports the tickets and comment threads of exported Lighthouse projects into
GitHub issues, recording the created issues on the tickets so runs can be repeated.
"""

from __future__ import annotations

from .cli import main
from .exceptions import (
    InvalidTicketError,
    MigrationError,
    MilestoneConsistencyError,
    RemoteError,
    RemoteErrorKind,
)
from .migrator import LighthouseToGithubMigrator, MigrationStats
from .tags import derive_tags
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "InvalidTicketError",
    "LighthouseToGithubMigrator",
    "MigrationError",
    "MigrationStats",
    "MilestoneConsistencyError",
    "RemoteError",
    "RemoteErrorKind",
    "derive_tags",
    "main",
    "setup_logging",
]
