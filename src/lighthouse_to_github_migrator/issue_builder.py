"""Build GitHub issue and comment bodies from Lighthouse ticket data."""

from __future__ import annotations

import datetime as dt
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .models import CommentRecord, TicketRecord

GITHUB_PROFILE_URL = "https://github.com/{login}"

# Separates the attribution header from the migrated text
HEADER_SEPARATOR = "- - - -\n\n"

_MENTION = re.compile(r"@(\w+)")
_LIGHTHOUSE_FENCE = re.compile(r"^@@@", re.MULTILINE)


def escape_mentions(text: str) -> str:
    """Wrap @mentions in inline code so GitHub does not notify unrelated users.

    Not idempotent: escaping an already escaped text wraps the mentions again.
    """
    return _MENTION.sub(r"`@\1`", text)


def convert_codeblocks(text: str) -> str:
    """Turn Lighthouse ``@@@`` code fences into GitHub ``` fences."""
    return _LIGHTHOUSE_FENCE.sub("```", text)


def prepare_body(text: str) -> str:
    # Fences first, the mention pattern would otherwise eat "@@@lang"
    return escape_mentions(convert_codeblocks(text))


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(iso_timestamp: str) -> str:
    """Format an ISO 8601 timestamp as a short date.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string (e.g., "2010-01-05T10:11:12Z")

    Returns:
        Date in the form "5th Jan 2010". Returns original value if parsing fails.
    """
    if not iso_timestamp:
        return iso_timestamp

    try:
        timestamp_dt = dt.datetime.fromisoformat(iso_timestamp)
    except (ValueError, AttributeError):
        return iso_timestamp
    return f"{_ordinal(timestamp_dt.day)} {timestamp_dt:%b %Y}"


def author_link(user_name: str, users: Mapping[str, str]) -> str:
    """Link a Lighthouse user to their GitHub profile when the user is known."""
    login = users.get(user_name)
    if not login:
        return user_name
    return f"[{user_name}]({GITHUB_PROFILE_URL.format(login=login)})"


def build_issue_body(ticket: TicketRecord, users: Mapping[str, str]) -> str:
    """Build complete GitHub issue body with attribution header.

    Args:
        ticket: Lighthouse ticket record
        users: Lighthouse user name to GitHub login mapping

    Returns:
        Complete issue body for GitHub
    """
    body = f"Created by **{author_link(ticket.user_name, users)}**, {format_date(ticket.created_at)}. "
    body += f"*(originally [Lighthouse ticket #{ticket.id}]({ticket.link}))*:\n"
    body += HEADER_SEPARATOR
    body += prepare_body(ticket.body)
    return body


def build_comment_body(comment: CommentRecord, users: Mapping[str, str]) -> str:
    """Build complete GitHub comment body with attribution header."""
    body = f"{format_date(comment.created_at)}, **{author_link(comment.user_name, users)}** said:\n"
    body += HEADER_SEPARATOR
    body += prepare_body(comment.body)
    return body
