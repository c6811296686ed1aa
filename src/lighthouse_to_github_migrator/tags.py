"""Derive GitHub label names from a Lighthouse tag string."""

from __future__ import annotations

import re

_QUOTED_TAG = re.compile(r'"(.+?)"')


def derive_tags(raw_tags: str | None) -> list[str]:
    """Split a Lighthouse tag string into sorted, unique, lower-case tags.

    Lighthouse returns tags as a single string such as ``foo "multi word tag" bar BAR``:
    quoted substrings are one tag, everything else is whitespace separated, and tags
    that differ only by case are the same tag.

    Args:
        raw_tags: The raw tag string of a ticket (may be empty or None)

    Returns:
        Sorted list of unique lower-case tags, e.g. ["bar", "foo", "multi word tag"]
    """
    if not raw_tags:
        return []

    quoted = _QUOTED_TAG.findall(raw_tags)
    residual = _QUOTED_TAG.sub("", raw_tags)

    tags = [tag.lower() for tag in [*quoted, *residual.split()] if tag]
    return sorted(set(tags))
