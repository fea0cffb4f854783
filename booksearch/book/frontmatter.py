"""Two-phase parser for the chapter front-matter block.

The block looks like YAML but is not valid YAML: it mixes quoted scalars with
a JavaScript-style array of objects whose keys are unquoted, e.g.::

    ---
    id: 'hexagonal-architecture'
    order: 3
    name: 'Hexagonal Architecture'
    titleList: [
      { name: 'Ports', tagId: 'ports' },
      { name: "Adapters", tagId: 'adapters' },
    ]
    ---

Phase one scans for the delimiters. Phase two reads the scalars with tolerant
patterns and finds the section array by bracket depth, then rewrites the array
into strict JSON and decodes it. Brackets inside quoted values are not
understood by the depth scan.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

import orjson

from booksearch.errors import ParseError

from .markdown import slugify
from .models import Section

LOGGER = logging.getLogger("booksearch.frontmatter")

DELIMITER = "---"
SECTION_LIST_KEY = "titleList:"

ID_RE = re.compile(r"""^[ \t]*id[ \t]*:[ \t]*(['"])(.+?)\1""", re.MULTILINE)
NAME_RE = re.compile(r"""^[ \t]*name[ \t]*:[ \t]*(['"])(.+?)\1""", re.MULTILINE)
ORDER_RE = re.compile(r"""^[ \t]*order[ \t]*:[ \t]*['"]?(\d+)""", re.MULTILINE)

STRING_LITERAL_RE = re.compile(r"\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'")
BARE_KEY_RE = re.compile(r"([{,]\s*)([A-Za-z_$][\w$-]*)(\s*:)")
TRAILING_COMMA_RE = re.compile(r",(\s*[\]}])")
LEADING_BLANK_LINES_RE = re.compile(r"\A(?:[ \t]*\r?\n)+")


@dataclass(slots=True)
class FrontMatter:
    id: str = ""
    order: int = 0
    name: str = ""
    sections: tuple[Section, ...] = ()


def split_front_matter(raw: str) -> tuple[str, str]:
    """Return (block, body) or raise `ParseError` if the delimiters are wrong."""
    if not raw.startswith(DELIMITER):
        raise ParseError("missing front-matter delimiter")

    end = raw.find(DELIMITER, len(DELIMITER))
    if end == -1:
        raise ParseError("unterminated front-matter block")

    block = raw[len(DELIMITER):end]
    body = raw[end + len(DELIMITER):]
    body = LEADING_BLANK_LINES_RE.sub("", body).rstrip()
    return block, body


def parse_front_matter(raw: str) -> tuple[FrontMatter, str]:
    block, body = split_front_matter(raw)

    array_span = find_section_array(block)
    if array_span is None:
        scalar_text = block
        sections: tuple[Section, ...] = ()
    else:
        start, end = array_span
        # Blank out the array so keys inside it never shadow top-level scalars.
        scalar_text = block[:start] + " " * (end - start) + block[end:]
        sections = decode_sections(block[start:end])

    front_matter = FrontMatter(sections=sections)
    id_match = ID_RE.search(scalar_text)
    if id_match:
        front_matter.id = id_match.group(2)
    name_match = NAME_RE.search(scalar_text)
    if name_match:
        front_matter.name = name_match.group(2)
    order_match = ORDER_RE.search(scalar_text)
    if order_match:
        front_matter.order = int(order_match.group(1))

    return front_matter, body


def find_section_array(block: str) -> tuple[int, int] | None:
    """Return the [start, end) span of the section list literal, if declared."""
    key_index = block.find(SECTION_LIST_KEY)
    if key_index == -1:
        return None

    start = block.find("[", key_index + len(SECTION_LIST_KEY))
    if start == -1:
        raise ParseError("malformed section-list literal")

    depth = 0
    for position in range(start, len(block)):
        char = block[position]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return start, position + 1
    raise ParseError("malformed section-list literal")


def normalize_array_literal(literal: str) -> str:
    """Rewrite a JS-style array literal into strict JSON text."""
    parts: list[str] = []
    cursor = 0
    for match in STRING_LITERAL_RE.finditer(literal):
        parts.append(_normalize_code(literal[cursor:match.start()]))
        parts.append(_normalize_string(match.group(0)))
        cursor = match.end()
    parts.append(_normalize_code(literal[cursor:]))
    return "".join(parts)


def _normalize_code(segment: str) -> str:
    segment = BARE_KEY_RE.sub(r'\1"\2"\3', segment)
    return TRAILING_COMMA_RE.sub(r"\1", segment)


def _normalize_string(token: str) -> str:
    if token.startswith('"'):
        return token
    inner = token[1:-1].replace("\\'", "'")
    return orjson.dumps(inner).decode("utf-8")


def decode_sections(literal: str) -> tuple[Section, ...]:
    """Decode the section list; undecodable input yields an empty tuple."""
    normalized = normalize_array_literal(literal)
    try:
        payload: Any = orjson.loads(normalized)
    except orjson.JSONDecodeError as exc:
        LOGGER.warning("Ignoring undecodable section list (%s).", exc)
        return ()

    if not isinstance(payload, list):
        LOGGER.warning("Ignoring section list that is not an array.")
        return ()

    sections: list[Section] = []
    for item in payload:
        if not isinstance(item, dict) or not item.get("name"):
            LOGGER.warning("Ignoring section list with an entry lacking a name: %r", item)
            return ()
        name = str(item["name"])
        tag_id = str(item.get("tagId") or "") or slugify(name)
        sections.append(Section(name=name, tag_id=tag_id))
    return tuple(sections)
