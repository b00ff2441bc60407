"""Classified source-adapter failures."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meeplesync.domain.model import Source


class FailureKind(StrEnum):
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    MALFORMED = "malformed"


class AdapterError(Exception):
    """Base class for every failure a source adapter may report."""

    kind: FailureKind

    def __init__(self, source: Source, message: str) -> None:
        super().__init__(message)
        self.source = source
        self.message = message

    def __str__(self) -> str:
        return f"{self.source}: {self.message}"


class NotFoundError(AdapterError):
    """The source has no record for the given identity hints."""

    kind = FailureKind.NOT_FOUND


class RateLimitedError(AdapterError):
    kind = FailureKind.RATE_LIMITED

    def __init__(self, source: Source, message: str, *, retry_after: float | None = None) -> None:
        super().__init__(source, message)
        self.retry_after = retry_after


class TransientError(AdapterError):
    """Network failure, timeout or server-side error; worth retrying later."""

    kind = FailureKind.TRANSIENT


class MalformedError(AdapterError):
    """The source answered with data that failed structural validation."""

    kind = FailureKind.MALFORMED


class TimedOutError(TransientError):
    """The call did not finish within its timeout or the enrichment deadline."""
