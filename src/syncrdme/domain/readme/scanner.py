"""Locate marker regions in a README.

Regions cannot nest, so the scanner only ever tracks one open start marker:
it is either idle or inside a region.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Container, Iterable, Iterator, List, Optional, Tuple

from syncrdme.domain.errors import AggregateError, SyncRdmeError

from .events import MarkdownEvent
from .marker import EndMarker, Marker, MarkerParseError, ReplaceKind, ReplaceMarker, StartMarker, parse_marker
from .span import Span, SpanStr


@dataclass(frozen=True)
class ReadmeFile:
    path: str
    text: str


@dataclass(frozen=True)
class Region:
    kind: ReplaceKind
    span: Span


class MarkerStructureError(SyncRdmeError):
    """Markers that parse individually but do not pair up."""

    def __init__(self, message: str, spans: List[Tuple[Span, str]], *, code: str) -> None:
        super().__init__(message, code=code)
        self.spans = spans

    def labelled_spans(self) -> List[Tuple[Span, Optional[str]]]:
        return list(self.spans)


def unexpected_end(span: Span) -> MarkerStructureError:
    return MarkerStructureError(
        "unexpected end marker",
        [(span, "the end marker defined here")],
        code="MARKER_UNEXPECTED_END",
    )


def end_not_found(start: Span) -> MarkerStructureError:
    return MarkerStructureError(
        "corresponding end marker not found",
        [(start, "the start marker defined here")],
        code="MARKER_END_NOT_FOUND",
    )


def nested_marker(nested: Span, previous: Span) -> MarkerStructureError:
    return MarkerStructureError(
        "nested markers are not allowed",
        [(nested, "the nested marker defined here"), (previous, "the previous marker starts here")],
        code="MARKER_NESTED",
    )


class FindAllError(AggregateError):
    """Every marker problem found in one README."""

    def __init__(self, readme: ReadmeFile, errors: List[SyncRdmeError]) -> None:
        super().__init__(f"failed to parse README: {readme.path}", errors, code="README_PARSE_FAILED")
        self.readme = readme


class MarkerScanner:
    """Two-state scanner over markdown events."""

    def __init__(
        self,
        events: Iterable[Tuple[MarkdownEvent, SpanStr]],
        badge_groups: Container[str] = (),
    ) -> None:
        self._events = iter(events)
        self._badge_groups = badge_groups
        self._open: Optional[Tuple[ReplaceKind, Span]] = None

    def __iter__(self) -> Iterator[Region | SyncRdmeError]:
        while True:
            found = self._next_marker()
            if found is None:
                if self._open is not None:
                    _, start = self._open
                    self._open = None
                    yield end_not_found(start)
                return
            if isinstance(found, SyncRdmeError):
                self._open = None
                yield found
                continue
            marker, span = found
            result = self._step(marker, span)
            if result is not None:
                yield result

    def _step(self, marker: Marker, span: Span) -> Region | SyncRdmeError | None:
        if self._open is None:
            if isinstance(marker, ReplaceMarker):
                return Region(marker.kind, span)
            if isinstance(marker, StartMarker):
                self._open = (marker.kind, span)
                return None
            return unexpected_end(span)

        kind, start = self._open
        self._open = None
        if isinstance(marker, EndMarker):
            return Region(kind, start.union(span))
        return nested_marker(span, start)

    def _next_marker(self) -> Tuple[Marker, Span] | SyncRdmeError | None:
        for event, text in self._events:
            if not event.is_html:
                continue
            try:
                marker = parse_marker(text, self._badge_groups)
            except MarkerParseError as exc:
                return exc
            if marker is not None:
                return marker, event.span
        return None


def find_all(
    readme: ReadmeFile,
    events: Iterable[Tuple[MarkdownEvent, SpanStr]],
    badge_groups: Container[str] = (),
) -> List[Region]:
    """Return the regions of ``readme`` in document order.

    Raises :class:`FindAllError` listing every problem when any marker is
    malformed or unpaired.
    """

    regions: List[Region] = []
    errors: List[SyncRdmeError] = []
    for item in MarkerScanner(events, badge_groups):
        if isinstance(item, Region):
            regions.append(item)
        else:
            errors.append(item)
    if errors:
        raise FindAllError(readme, errors)
    return regions
