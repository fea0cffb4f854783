"""Heading and slug helpers shared by the parser, search and chunker."""

from __future__ import annotations

import re

HEADING_RE = re.compile(r"^#{1,6}\s+(.+)$")
WHITESPACE_RE = re.compile(r"\s+")
# \w also matches "_", which the slug rule drops.
NON_SLUG_RE = re.compile(r"[^\w-]|_")
HYPHEN_RUN_RE = re.compile(r"-+")


def slugify(title: str) -> str:
    """Return the tag id derived from a heading's display text."""
    slug = WHITESPACE_RE.sub("-", title.lower())
    slug = NON_SLUG_RE.sub("", slug)
    slug = HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def heading_text(line: str) -> str | None:
    match = HEADING_RE.match(line)
    if match is None:
        return None
    return match.group(1)


def extract_section(content: str, tag_id: str) -> str | None:
    """Return the block from the heading whose slug is `tag_id` to the next heading.

    The next heading at any level ends the block. First match wins when two
    headings share a slug.
    """

    collected: list[str] = []
    in_section = False
    for line in content.split("\n"):
        title = heading_text(line)
        if title is not None:
            if in_section:
                break
            if slugify(title) == tag_id:
                in_section = True
        if in_section:
            collected.append(line)

    if not collected:
        return None
    return "\n".join(collected).strip()
