from __future__ import annotations

import pytest

from syncrdme.domain.readme import Badge, Region, Title, interpolate_ranges, replace_all
from syncrdme.domain.readme.interpolate import splice
from syncrdme.domain.readme.span import Span


def test_gaps_are_filled() -> None:
    items = [("a", Span(2, 4)), ("b", Span(6, 7))]
    assert list(interpolate_ranges(Span(0, 10), items)) == [
        (None, Span(0, 2)),
        ("a", Span(2, 4)),
        (None, Span(4, 6)),
        ("b", Span(6, 7)),
        (None, Span(7, 10)),
    ]


def test_adjacent_items_produce_no_empty_gap() -> None:
    items = [("a", Span(0, 3)), ("b", Span(3, 5))]
    assert list(interpolate_ranges(Span(0, 5), items)) == items


def test_empty_items_cover_bounds() -> None:
    assert list(interpolate_ranges(Span(0, 4), [])) == [(None, Span(0, 4))]
    assert list(interpolate_ranges(Span(0, 0), [])) == []


def test_overlapping_items_are_rejected() -> None:
    with pytest.raises(ValueError):
        list(interpolate_ranges(Span(0, 10), [("a", Span(0, 5)), ("b", Span(4, 6))]))


def test_replace_marker_expands_into_region() -> None:
    text = "A\n<!-- sync-rdme title -->\nB\n"
    region = Region(Title(), Span(2, 2 + len("<!-- sync-rdme title -->\n")))
    assert replace_all(text, [region], ["# Pkg\n"]) == (
        "A\n<!-- sync-rdme title [[ -->\n# Pkg\n<!-- sync-rdme ]] -->\nB\n"
    )


def test_empty_contents_collapse_region() -> None:
    text = "A\n<!-- sync-rdme badge [[ -->\nold\n<!-- sync-rdme ]] -->\nB\n"
    region = Region(Badge(), Span(2, len(text) - 2))
    assert replace_all(text, [region], [""]) == "A\n<!-- sync-rdme badge -->\nB\n"


def test_contents_must_pair_with_regions() -> None:
    with pytest.raises(ValueError):
        replace_all("text", [], ["extra\n"])


def test_splice_applies_sorted_edits() -> None:
    assert splice("hello world", [("HELLO", Span(0, 5)), ("!", Span(11, 11))]) == "HELLO world!"
