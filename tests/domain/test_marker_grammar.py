from __future__ import annotations

import pytest

from syncrdme.domain.readme import Badge, DocSummary, EndMarker, MarkerParseError, ReplaceMarker, StartMarker, Title, parse_marker
from syncrdme.domain.readme.span import Span, SpanStr


def parse(text: str, groups=("ci",)):
    return parse_marker(SpanStr(text), groups)


def test_non_markers_are_ignored() -> None:
    assert parse("") is None
    assert parse("<!-- just a comment -->") is None
    assert parse("<!-- sync-rdmexxx -->") is None
    assert parse("<p>sync-rdme title</p>") is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("<!-- sync-rdme title -->", ReplaceMarker(Title())),
        ("<!-- sync-rdme doc-summary -->", ReplaceMarker(DocSummary())),
        ("<!-- sync-rdme badge -->", ReplaceMarker(Badge())),
        ("<!-- sync-rdme badge:ci -->", ReplaceMarker(Badge("ci"))),
        ("<!-- sync-rdme badge [[ -->", StartMarker(Badge())),
        ("<!-- sync-rdme badge[[-->", StartMarker(Badge())),
        ("  <!--   sync-rdme   title   [[   -->\n", StartMarker(Title())),
        ("<!-- sync-rdme ]] -->", EndMarker()),
    ],
)
def test_markers_parse(text: str, expected) -> None:
    assert parse(text) == expected


def test_canonical_rendering_parses_back() -> None:
    for marker in (ReplaceMarker(Title()), StartMarker(Badge("ci")), EndMarker(), ReplaceMarker(DocSummary())):
        assert parse(str(marker)) == marker
    assert str(StartMarker(Badge("ci"))) == "<!-- sync-rdme badge:ci [[ -->"
    assert str(EndMarker()) == "<!-- sync-rdme ]] -->"


@pytest.mark.parametrize("text", ["<!-- sync-rdme  -->", "<!-- sync-rdme -->"])
def test_keyword_without_specifier_is_an_error(text: str) -> None:
    with pytest.raises(MarkerParseError) as excinfo:
        parse(text)
    assert excinfo.value.code == "MARKER_NO_REPLACE"
    assert excinfo.value.message == "no replace specifier found"


@pytest.mark.parametrize(
    ("text", "specifier"),
    [
        ("<!-- sync-rdme title [ -->", "title ["),
        ("<!-- sync-rdme ] -->", "]"),
        ("<!-- sync-rdme summary -->", "summary"),
    ],
)
def test_unknown_specifier_reports_offending_text(text: str, specifier: str) -> None:
    with pytest.raises(MarkerParseError) as excinfo:
        parse(text)
    error = excinfo.value
    assert error.code == "MARKER_UNKNOWN_REPLACE"
    assert error.message == f"unknown replace specifier: {specifier!r}"
    assert error.span.slice(text) == specifier


def test_undeclared_badge_group() -> None:
    text = "<!-- sync-rdme badge:release -->"
    with pytest.raises(MarkerParseError) as excinfo:
        parse(text, groups=("ci",))
    assert excinfo.value.code == "MARKER_UNDECLARED_BADGE_GROUP"
    assert excinfo.value.span.slice(text) == "release"


def test_spans_are_offsets_into_the_document() -> None:
    document = "intro\n<!-- sync-rdme nope -->\n"
    start = document.index("<!--")
    line = SpanStr.of(document, Span(start, len(document)))
    with pytest.raises(MarkerParseError) as excinfo:
        parse_marker(line, ())
    assert excinfo.value.span == Span(document.index("nope"), document.index("nope") + 4)
