"""Markdown tokenization into offset-tagged events."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from markdown_it import MarkdownIt

from .span import Span, SpanStr, line_span, line_starts

HTML = "html"

_CONTAINER_PREFIX = re.compile(r"(?:[ \t]*(?:>|(?:[-+*]|\d{1,9}[.)])(?=[ \t]|$)))*[ \t]*")


def markdown_parser() -> MarkdownIt:
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


@dataclass(frozen=True)
class MarkdownEvent:
    kind: str
    span: Span

    @property
    def is_html(self) -> bool:
        return self.kind == HTML


def html_line_span(text: str, span: Span) -> Span:
    """Narrow an HTML line to the tag, past indentation and container markers.

    Lines whose content after the prefix is not a tag are returned whole.
    """

    line = span.slice(text)
    prefix = _CONTAINER_PREFIX.match(line)
    if prefix is None or not line[prefix.end() :].startswith("<"):
        return span
    return Span(span.start + prefix.end(), span.end)


def iter_events(text: str, parser: MarkdownIt | None = None) -> Iterator[tuple[MarkdownEvent, SpanStr]]:
    """Yield block-level events paired with the source text they cover.

    HTML blocks are split into one event per line so that a marker directly
    followed by other raw HTML is still seen on its own. Each HTML line
    starts at its tag, so list indentation and ``>`` quote markers in front
    of a marker stay in the document.
    """

    md = parser or markdown_parser()
    starts = line_starts(text)
    for token in md.parse(text):
        if token.map is None or token.nesting == -1:
            continue
        first, last = token.map
        if token.type != "html_block":
            span = line_span(starts, first, last)
            yield MarkdownEvent(token.type, span), SpanStr.of(text, span)
            continue
        for line in range(first, last):
            span = html_line_span(text, line_span(starts, line, line + 1))
            yield MarkdownEvent(HTML, span), SpanStr.of(text, span)
