"""Marker protocol: grammar, scanning and text substitution."""

from __future__ import annotations

from .interpolate import interpolate_ranges, replace_all
from .marker import Badge, DocSummary, EndMarker, MarkerParseError, ReplaceMarker, StartMarker, Title, parse_marker
from .scanner import FindAllError, MarkerStructureError, ReadmeFile, Region, find_all

__all__ = [
    "Badge",
    "DocSummary",
    "EndMarker",
    "FindAllError",
    "MarkerParseError",
    "MarkerStructureError",
    "ReadmeFile",
    "Region",
    "ReplaceMarker",
    "StartMarker",
    "Title",
    "find_all",
    "interpolate_ranges",
    "parse_marker",
    "replace_all",
]
