"""Error hierarchy and the collect-then-report accumulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, TypeVar

from .constants import remediation_for

T = TypeVar("T")


class SyncRdmeError(RuntimeError):
    """Base class for every error sync-rdme reports to the user."""

    default_code = "SYNC_RDME_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None, remediation: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.remediation = remediation if remediation is not None else remediation_for(self.code)

    def related(self) -> List["SyncRdmeError"]:
        """Nested errors for aggregate reports; empty for leaf errors."""

        return []

    def as_dict(self) -> dict:
        payload = {"code": self.code, "message": self.message, "remediation": self.remediation}
        nested = self.related()
        if nested:
            payload["errors"] = [error.as_dict() for error in nested]
        return payload


class AggregateError(SyncRdmeError):
    """An error standing for several independent failures."""

    def __init__(self, message: str, errors: List[SyncRdmeError], *, code: Optional[str] = None) -> None:
        super().__init__(message, code=code)
        self.errors = list(errors)

    def related(self) -> List[SyncRdmeError]:
        return list(self.errors)

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"  - {error}" for error in self.errors)
        return "\n".join(lines)


@dataclass
class Collector(Generic[T]):
    """Runs independent sub-tasks, keeping successes and failures apart.

    Only :class:`SyncRdmeError` is collected; anything else is a bug and
    propagates immediately.
    """

    values: List[T] = field(default_factory=list)
    errors: List[SyncRdmeError] = field(default_factory=list)

    def run(self, task: Callable[[], T]) -> Optional[T]:
        try:
            value = task()
        except SyncRdmeError as exc:
            self.errors.append(exc)
            return None
        self.values.append(value)
        return value

    def push_error(self, error: SyncRdmeError) -> None:
        self.errors.append(error)

    def finish(self, make_error: Callable[[List[SyncRdmeError]], SyncRdmeError]) -> List[T]:
        """Return collected values, or raise the aggregate built by ``make_error``."""

        if self.errors:
            raise make_error(list(self.errors))
        return list(self.values)


class ContentsError(SyncRdmeError):
    """A region's contents could not be generated."""

    default_code = "CONTENTS_FAILED"
