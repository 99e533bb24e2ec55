"""Content generators for marker regions and their dispatcher."""

from __future__ import annotations

from typing import List, Sequence

from syncrdme.domain.errors import AggregateError, Collector, ContentsError, SyncRdmeError
from syncrdme.domain.readme import Badge, DocSummary, Region, Title
from syncrdme.domain.readme.marker import ReplaceKind

from ..context import PackageContext
from . import badge, doc_summary, title


class InvalidContentsError(ContentsError):
    pass


class RegionContentsError(ContentsError):
    """A generator failure tagged with the region kind it was generating."""

    def __init__(self, kind: ReplaceKind, error: SyncRdmeError) -> None:
        super().__init__(f"{kind}: {error.message}", code=error.code, remediation=error.remediation)
        self.kind = kind
        self.error = error

    def related(self) -> List[SyncRdmeError]:
        return self.error.related()


class CreateAllContentsError(AggregateError):
    def __init__(self, path: str, errors: List[SyncRdmeError]) -> None:
        super().__init__(f"failed to create contents of README: {path}", errors, code="CONTENTS_FAILED")
        self.path = path


def check_contents(text: str) -> str:
    """Contents are empty or end with a newline."""

    if text and not text.endswith("\n"):
        raise InvalidContentsError(f"generated contents must end with a newline: {text[-20:]!r}")
    return text


def create(context: PackageContext, kind: ReplaceKind) -> str:
    if isinstance(kind, Title):
        return check_contents(title.create(context))
    if isinstance(kind, Badge):
        return check_contents(badge.create(context, kind.group))
    if isinstance(kind, DocSummary):
        return check_contents(doc_summary.create(context))
    raise InvalidContentsError(f"no generator for region kind {kind!r}")


def create_all(context: PackageContext, path: str, regions: Sequence[Region]) -> List[str]:
    """Contents for every region, in order, or every failure at once."""

    collector: Collector[str] = Collector()
    for region in regions:
        try:
            collector.values.append(create(context, region.kind))
        except SyncRdmeError as exc:
            collector.push_error(RegionContentsError(region.kind, exc))
    return collector.finish(lambda errors: CreateAllContentsError(path, errors))


__all__ = ["CreateAllContentsError", "RegionContentsError", "check_contents", "create", "create_all"]
