from __future__ import annotations

import pytest

from syncrdme.domain.readme.span import Span, SpanStr, line_col, line_span, line_starts, render_snippet


def test_span_validation_and_union() -> None:
    with pytest.raises(ValueError):
        Span(3, 2)
    assert Span(1, 3).union(Span(5, 8)) == Span(1, 8)
    assert len(Span(2, 6)) == 4


def test_trimming_keeps_offsets() -> None:
    text = SpanStr("  body  ", 10)
    trimmed = text.trim()
    assert trimmed.text == "body"
    assert trimmed.span == Span(12, 16)


def test_prefix_and_suffix_stripping() -> None:
    text = SpanStr("<!-- x -->", 5)
    inner = text.strip_prefix("<!--")
    assert inner is not None and inner.offset == 9
    assert inner.strip_suffix("-->").text == " x "
    assert text.strip_prefix("nope") is None


def test_split_once_whitespace() -> None:
    head, tail = SpanStr("sync-rdme  title", 3).split_once_whitespace()
    assert (head.text, head.offset) == ("sync-rdme", 3)
    assert (tail.text, tail.offset) == (" title", 13)
    assert SpanStr("single").split_once_whitespace() is None


def test_line_helpers_follow_markdown_line_breaks() -> None:
    text = "a\r\nb\rc\nd"
    starts = line_starts(text)
    assert starts == [0, 3, 5, 7, 8]
    assert line_span(starts, 1, 3).slice(text) == "b\rc\n"
    assert line_span(starts, 3, 10).slice(text) == "d"
    assert line_col(text, text.index("c")) == (3, 1)


def test_render_snippet_underlines_span() -> None:
    text = "first\n<!-- bad -->\n"
    start = text.index("bad")
    rows = render_snippet(text, [(Span(start, start + 3), "here")])
    assert rows == ["   2 | <!-- bad -->", "     |      ^^^ here"]
