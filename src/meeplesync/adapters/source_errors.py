"""Translation of HTTP and payload failures into the adapter failure taxonomy."""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final, cast

import httpx
from lxml import etree
from pydantic import ValidationError

from meeplesync.domain.enrichment.errors import (
    AdapterError,
    MalformedError,
    NotFoundError,
    RateLimitedError,
    TimedOutError,
    TransientError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from meeplesync.domain.model import Source

log = getLogger(__name__)

# Google APIs report exhausted quota as 403 with one of these reasons.
QUOTA_REASONS: Final = frozenset({"quotaExceeded", "rateLimitExceeded", "dailyLimitExceeded"})


class SourcePayloadError(RuntimeError):
    """Raised by API clients when a response has an unexpected shape."""


def parse_retry_after(value: str | None, *, now: datetime | None = None) -> float | None:
    """Parse a Retry-After header given either as seconds or as an HTTP date."""

    if value is None or not value.strip():
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0.0, (when - (now or datetime.now(UTC))).total_seconds())


def classify_status(source: Source, response: httpx.Response) -> AdapterError:
    status = response.status_code
    detail = f"HTTP {status} from {response.request.url.host}"
    if status == httpx.codes.NOT_FOUND:
        return NotFoundError(source, detail)
    if status == httpx.codes.TOO_MANY_REQUESTS or (
        status == httpx.codes.FORBIDDEN and _quota_exhausted(response)
    ):
        retry_after = parse_retry_after(response.headers.get("Retry-After"))
        return RateLimitedError(source, detail, retry_after=retry_after)
    return TransientError(source, detail)


@contextmanager
def classify_failures(source: Source) -> Iterator[None]:
    """Re-raise anything that escapes the block as a classified ``AdapterError``."""

    try:
        yield
    except AdapterError:
        raise
    except httpx.HTTPStatusError as exc:
        raise classify_status(source, exc.response) from exc
    except (TimeoutError, httpx.TimeoutException) as exc:
        raise TimedOutError(source, f"timed out ({type(exc).__name__})") from exc
    except httpx.HTTPError as exc:
        raise TransientError(source, f"{type(exc).__name__}: {exc}") from exc
    except (ValidationError, etree.XMLSyntaxError, json.JSONDecodeError) as exc:
        log.debug("Undecodable %s payload", source, exc_info=True)
        raise MalformedError(source, f"invalid payload: {type(exc).__name__}") from exc
    except SourcePayloadError as exc:
        raise MalformedError(source, str(exc)) from exc


def _quota_exhausted(response: httpx.Response) -> bool:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return False
    if not isinstance(payload, dict):
        return False
    error = cast("dict[str, Any]", payload).get("error")
    if not isinstance(error, dict):
        return False
    reasons = {
        item.get("reason")
        for item in cast("dict[str, Any]", error).get("errors", [])
        if isinstance(item, dict)
    }
    return bool(reasons & QUOTA_REASONS)
