from __future__ import annotations

import logging

import pytest

from booksearch.book.frontmatter import (
    decode_sections,
    find_section_array,
    normalize_array_literal,
    parse_front_matter,
    split_front_matter,
)
from booksearch.book.models import Section
from booksearch.errors import ParseError


def test_parse_front_matter_reads_scalars_and_sections() -> None:
    raw = (
        "---\n"
        "id: 'hexagonal-architecture'\n"
        "order: 3\n"
        "name: 'Hexagonal Architecture'\n"
        "titleList: [\n"
        "  { name: 'Ports', tagId: 'ports' },\n"
        '  { name: "Adapters", tagId: \'adapters\' },\n'
        "]\n"
        "---\n"
        "\n"
        "\n"
        "Body text.\n"
        "\n"
    )

    front_matter, body = parse_front_matter(raw)

    assert front_matter.id == "hexagonal-architecture"
    assert front_matter.order == 3
    assert front_matter.name == "Hexagonal Architecture"
    assert front_matter.sections == (
        Section(name="Ports", tag_id="ports"),
        Section(name="Adapters", tag_id="adapters"),
    )
    assert body == "Body text."


def test_section_names_do_not_shadow_chapter_name() -> None:
    raw = (
        "---\n"
        "titleList: [\n"
        "  { name: 'Inner', tagId: 'inner' },\n"
        "]\n"
        "id: 'outer'\n"
        "name: 'Outer Chapter'\n"
        "---\n"
        "Body"
    )

    front_matter, _ = parse_front_matter(raw)

    assert front_matter.name == "Outer Chapter"
    assert front_matter.order == 0


def test_missing_scalars_default_to_zero_values() -> None:
    front_matter, body = parse_front_matter("---\n---\nOnly body")

    assert front_matter.id == ""
    assert front_matter.name == ""
    assert front_matter.order == 0
    assert front_matter.sections == ()
    assert body == "Only body"


def test_missing_opening_delimiter_is_rejected() -> None:
    with pytest.raises(ParseError, match="missing front-matter delimiter"):
        split_front_matter("id: 'x'\n---\nbody")


def test_unterminated_block_is_rejected() -> None:
    with pytest.raises(ParseError, match="unterminated"):
        split_front_matter("---\nid: 'x'\nbody without closing")


def test_unbalanced_section_list_is_rejected() -> None:
    with pytest.raises(ParseError, match="malformed section-list literal"):
        find_section_array("titleList: [\n  { name: 'A' },\n")


def test_section_list_key_without_bracket_is_rejected() -> None:
    with pytest.raises(ParseError, match="malformed section-list literal"):
        find_section_array("titleList: none\n")


def test_normalize_array_literal_quotes_keys_and_drops_trailing_commas() -> None:
    literal = "[{ name: 'It\\'s', tagId: 'a, b:c' },]"

    assert normalize_array_literal(literal) == '[{ "name": "It\'s", "tagId": "a, b:c" }]'


def test_missing_tag_id_is_derived_from_name() -> None:
    sections = decode_sections("[{ name: 'Ports and Adapters' }]")

    assert sections == (Section(name="Ports and Adapters", tag_id="ports-and-adapters"),)


def test_undecodable_section_list_yields_no_sections(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="booksearch.frontmatter")

    sections = decode_sections("[{ name: 'A' tagId: 'a' }]")

    assert sections == ()
    assert "undecodable" in caplog.text
