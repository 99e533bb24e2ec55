"""Merge generated contents back into the untouched parts of a document."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

from .marker import EndMarker, ReplaceMarker, StartMarker
from .scanner import Region
from .span import Span

T = TypeVar("T")


def interpolate_ranges(bounds: Span, items: Iterable[Tuple[T, Span]]) -> Iterator[Tuple[Optional[T], Span]]:
    """Yield ``items`` with the gaps between them filled by ``(None, gap)``.

    ``items`` must be sorted and non-overlapping; together the yielded spans
    cover ``bounds`` exactly.
    """

    offset = bounds.start
    for item, span in items:
        if span.start < offset:
            raise ValueError(f"overlapping span {span.start}..{span.end} before offset {offset}")
        if offset < span.start:
            yield None, Span(offset, span.start)
        yield item, span
        offset = span.end
    if offset < bounds.end:
        yield None, Span(offset, bounds.end)


def render_region(region: Region, contents: str) -> str:
    if not contents:
        return f"{ReplaceMarker(region.kind)}\n"
    return f"{StartMarker(region.kind)}\n{contents}{EndMarker()}\n"


def replace_all(text: str, regions: Sequence[Region], contents: Sequence[str]) -> str:
    """Rebuild ``text`` with each region replaced by its rendered contents."""

    if len(regions) != len(contents):
        raise ValueError("every region needs exactly one contents value")
    pairs = ((pair, pair[0].span) for pair in zip(regions, contents))
    pieces: List[str] = []
    for pair, span in interpolate_ranges(Span(0, len(text)), pairs):
        if pair is None:
            pieces.append(span.slice(text))
        else:
            region, body = pair
            pieces.append(render_region(region, body))
    return "".join(pieces)


def splice(text: str, edits: Iterable[Tuple[str, Span]]) -> str:
    """Apply sorted, non-overlapping ``(replacement, span)`` edits to ``text``."""

    pieces: List[str] = []
    for replacement, span in interpolate_ranges(Span(0, len(text)), edits):
        pieces.append(span.slice(text) if replacement is None else replacement)
    return "".join(pieces)
