"""Substrings that remember where they came from.

Offsets are indices into the decoded document text, so slicing the document
with a span yields exactly the characters it covers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

_LINE_BREAK = re.compile(r"\r\n?|\n")


@dataclass(frozen=True, order=True)
class Span:
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span {self.start}..{self.end}")

    def __len__(self) -> int:
        return self.end - self.start

    def union(self, other: "Span") -> "Span":
        return Span(min(self.start, other.start), max(self.end, other.end))

    def slice(self, text: str) -> str:
        return text[self.start : self.end]


@dataclass(frozen=True)
class SpanStr:
    """A string paired with the offset of its first character."""

    text: str
    offset: int = 0

    @classmethod
    def of(cls, text: str, span: Span) -> "SpanStr":
        return cls(span.slice(text), span.start)

    @property
    def span(self) -> Span:
        return Span(self.offset, self.offset + len(self.text))

    def _same_start(self, text: str) -> "SpanStr":
        return SpanStr(text, self.offset)

    def _same_end(self, text: str) -> "SpanStr":
        return SpanStr(text, self.offset + len(self.text) - len(text))

    def trim_start(self) -> "SpanStr":
        return self._same_end(self.text.lstrip())

    def trim_end(self) -> "SpanStr":
        return self._same_start(self.text.rstrip())

    def trim(self) -> "SpanStr":
        return self.trim_start().trim_end()

    def strip_prefix(self, prefix: str) -> Optional["SpanStr"]:
        if not self.text.startswith(prefix):
            return None
        return self._same_end(self.text[len(prefix) :])

    def strip_suffix(self, suffix: str) -> Optional["SpanStr"]:
        if not self.text.endswith(suffix):
            return None
        return self._same_start(self.text[: len(self.text) - len(suffix)])

    def split_once_whitespace(self) -> Optional[Tuple["SpanStr", "SpanStr"]]:
        """Split around the first whitespace character, dropping it."""

        for index, char in enumerate(self.text):
            if char.isspace():
                head = self._same_start(self.text[:index])
                tail = self._same_end(self.text[index + 1 :])
                return head, tail
        return None

    def __str__(self) -> str:
        return self.text


def line_starts(text: str) -> List[int]:
    """Offsets where each line begins, using markdown's line break rules.

    The list has one extra trailing entry equal to ``len(text)`` so that
    ``starts[n]..starts[n + 1]`` covers line ``n`` including its break.
    """

    starts = [0]
    for match in _LINE_BREAK.finditer(text):
        starts.append(match.end())
    if starts[-1] != len(text):
        starts.append(len(text))
    return starts


def line_span(starts: List[int], first: int, last: int) -> Span:
    """Span of lines ``first..last`` (exclusive), clamped to the text."""

    end_index = min(last, len(starts) - 1)
    start_index = min(first, end_index)
    return Span(starts[start_index], starts[end_index])


def line_col(text: str, offset: int) -> Tuple[int, int]:
    """1-based line and column of ``offset``."""

    line = 1
    last_break = 0
    for match in _LINE_BREAK.finditer(text, 0, offset):
        line += 1
        last_break = match.end()
    return line, offset - last_break + 1


def render_snippet(text: str, labelled: Iterable[Tuple[Span, Optional[str]]]) -> List[str]:
    """Source lines with caret underlines for each labelled span."""

    starts = line_starts(text)
    rendered: List[str] = []
    for span, label in labelled:
        line_no, column = line_col(text, span.start)
        line_text = line_span(starts, line_no - 1, line_no).slice(text).rstrip("\r\n")
        width = max(1, min(len(span), len(line_text) - column + 1))
        rendered.append(f"{line_no:>4} | {line_text}")
        caret = " " * (column - 1) + "^" * width
        suffix = f" {label}" if label else ""
        rendered.append(f"     | {caret}{suffix}")
    return rendered
