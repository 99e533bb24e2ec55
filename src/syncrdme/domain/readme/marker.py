"""Marker comment grammar.

A marker is an HTML comment whose body starts with the ``sync-rdme`` keyword::

    <!-- sync-rdme title -->              replace in place
    <!-- sync-rdme badge:ci [[ -->        open a region
    <!-- sync-rdme ]] -->                 close the open region
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Container, Optional, Union

from syncrdme.domain.constants import MAGIC
from syncrdme.domain.errors import SyncRdmeError

from .span import Span, SpanStr

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"
REGION_OPEN = "[["
REGION_CLOSE = "]]"

BADGE_SPECIFIER = "badge"


@dataclass(frozen=True)
class Title:
    def __str__(self) -> str:
        return "title"


@dataclass(frozen=True)
class Badge:
    group: str = ""

    def __str__(self) -> str:
        return BADGE_SPECIFIER if not self.group else f"{BADGE_SPECIFIER}:{self.group}"


@dataclass(frozen=True)
class DocSummary:
    def __str__(self) -> str:
        return "doc-summary"


ReplaceKind = Union[Title, Badge, DocSummary]

_FIXED_SPECIFIERS = {
    "title": Title(),
    "doc-summary": DocSummary(),
    BADGE_SPECIFIER: Badge(),
}


@dataclass(frozen=True)
class ReplaceMarker:
    kind: ReplaceKind

    def __str__(self) -> str:
        return f"{COMMENT_OPEN} {MAGIC} {self.kind} {COMMENT_CLOSE}"


@dataclass(frozen=True)
class StartMarker:
    kind: ReplaceKind

    def __str__(self) -> str:
        return f"{COMMENT_OPEN} {MAGIC} {self.kind} {REGION_OPEN} {COMMENT_CLOSE}"


@dataclass(frozen=True)
class EndMarker:
    def __str__(self) -> str:
        return f"{COMMENT_OPEN} {MAGIC} {REGION_CLOSE} {COMMENT_CLOSE}"


Marker = Union[ReplaceMarker, StartMarker, EndMarker]


class MarkerParseError(SyncRdmeError):
    """A comment addressed to sync-rdme that cannot be understood."""

    default_code = "MARKER_UNKNOWN_REPLACE"

    def __init__(self, message: str, span: Span, *, code: Optional[str] = None, label: Optional[str] = None) -> None:
        super().__init__(message, code=code)
        self.span = span
        self.label = label

    def labelled_spans(self) -> list[tuple[Span, Optional[str]]]:
        return [(self.span, self.label)]


def parse_replace(text: SpanStr, badge_groups: Container[str]) -> ReplaceKind:
    """Parse a replace specifier such as ``title`` or ``badge:ci``."""

    kind = _FIXED_SPECIFIERS.get(text.text)
    if kind is not None:
        return kind

    group = text.strip_prefix(f"{BADGE_SPECIFIER}:")
    if group is not None:
        if group.text not in badge_groups:
            raise MarkerParseError(
                f"badge group `{group.text}` is not declared in the configuration",
                group.span,
                code="MARKER_UNDECLARED_BADGE_GROUP",
                label="undeclared badge group",
            )
        return Badge(group.text)

    raise MarkerParseError(
        f"unknown replace specifier: {text.text!r}",
        text.span,
        code="MARKER_UNKNOWN_REPLACE",
    )


def _comment_body(text: SpanStr) -> Optional[SpanStr]:
    body = text.trim().strip_prefix(COMMENT_OPEN)
    if body is None:
        return None
    body = body.trim_start().strip_suffix(COMMENT_CLOSE)
    if body is None:
        return None
    return body.trim_end()


def _marker_body(text: SpanStr) -> Optional[SpanStr]:
    body = _comment_body(text)
    if body is None:
        return None
    if body.text == MAGIC:
        raise MarkerParseError("no replace specifier found", body.span, code="MARKER_NO_REPLACE")
    parts = body.split_once_whitespace()
    if parts is None:
        return None
    head, rest = parts
    if head.text != MAGIC:
        return None
    return rest


def parse_marker(text: SpanStr, badge_groups: Container[str] = ()) -> Optional[Marker]:
    """Return the marker in ``text``, ``None`` if it is not one of ours.

    Raises :class:`MarkerParseError` when the comment is addressed to
    sync-rdme but malformed.
    """

    body = _marker_body(text)
    if body is None:
        return None
    body = body.trim()

    opened = body.strip_suffix(REGION_OPEN)
    if opened is not None:
        return StartMarker(parse_replace(opened.trim(), badge_groups))

    if body.text == REGION_CLOSE:
        return EndMarker()

    return ReplaceMarker(parse_replace(body, badge_groups))
