"""
Command-line interface for the Lighthouse to GitHub migration tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from . import github_utils as ghu
from .config import DEFAULT_CONFIG_PATH, ConfigFile
from .migrator import LighthouseToGithubMigrator
from .ticket_store import DEFAULT_EXPORT_PATH, LighthouseExport
from .utils import setup_logging

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .migrator import MigrationStats


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Import Lighthouse tickets to GitHub issues",
        epilog=(
            "Milestones and labels are created as required. This requires a token with "
            "commit rights to the target repository."
        ),
    )

    _ = parser.add_argument(
        "projects",
        nargs="*",
        help="Lighthouse projects (account/project, project name or id). Default: all exported projects",
    )

    _ = parser.add_argument(
        "--export-dir",
        type=Path,
        default=DEFAULT_EXPORT_PATH,
        help=f"Directory of the unpacked Lighthouse export (default: {DEFAULT_EXPORT_PATH})",
    )

    _ = parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Configuration file with project mappings and caches (default: {DEFAULT_CONFIG_PATH})",
    )

    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: github/cli/token)"
    )

    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def _print_report(results: Sequence[MigrationStats]) -> None:
    """Print a summary of the migrated projects."""
    print("\n" + "=" * 60)
    print("MIGRATION SUMMARY")
    print("=" * 60)
    for stats in results:
        if stats.skipped:
            print(f"{stats.project}: SKIPPED (not configured)")
            continue
        print(f"{stats.project} -> {stats.github_repo}")
        print(f"  Tickets:    Total={stats.tickets_total}, Invalid={stats.tickets_invalid}")
        print(f"  Issues:     Created={stats.issues_created}, Already present={stats.issues_existing}")
        print(f"  Comments:   Created={stats.comments_created}")
        print(f"  Milestones: Created={stats.milestones_created}")
        print(f"  Labels:     Created={stats.labels_created}")
    print("=" * 60)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose)

    try:
        config = ConfigFile.load(args.config)
        token = ghu.get_token(args.github_pass_token, config_token=config.token)

        migrator = LighthouseToGithubMigrator(
            LighthouseExport(args.export_dir),
            config,
            github_client=ghu.get_client(token),
        )
        results = migrator.migrate(args.projects)
    except Exception:
        logger = logging.getLogger(__name__)
        logger.exception("Migration failed")
        sys.exit(1)

    _print_report(results)
    sys.exit(0)
