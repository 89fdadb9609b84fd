"""Custom exceptions for centralized error handling."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    """Resource not found."""

    def __init__(self, message: str = "Not found", details: Any | None = None) -> None:
        super().__init__(code="not_found", message=message, status_code=404, details=details)


class InvalidGameError(NotFoundError):
    """Game code is not one of the supported lotteries."""

    def __init__(self, game: str, supported: list[str]) -> None:
        super().__init__(
            message=f"'{game}' is not a supported lottery. Supported lotteries: [{', '.join(supported)}]",
            details={"supported": supported},
        )
        self.code = "invalid_game"


class StorageUnavailableError(AppError):
    """The configured store (SQL or Mongo) could not be reached."""

    def __init__(self, backend: str, details: Any | None = None) -> None:
        super().__init__(
            code="storage_unavailable",
            message=f"{backend} store is unavailable",
            status_code=503,
            details=details,
        )


# Upstream taxonomy. None of these crash the process; they are returned to the
# reconciliation layer as typed failures.


class UpstreamError(AppError):
    """Failure talking to the upstream results API."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "upstream_error",
        status_code: int = 502,
        details: Any | None = None,
    ) -> None:
        super().__init__(code=code, message=message, status_code=status_code, details=details)


class TransportError(UpstreamError):
    """Network-level failure (connection reset, timeout, DNS)."""

    def __init__(self, message: str, details: Any | None = None) -> None:
        super().__init__(message, code="transport_error", details=details)


class DecodeError(UpstreamError):
    """Payload could not be mapped into a DrawResult."""

    def __init__(self, message: str, excerpt: str = "", details: Any | None = None) -> None:
        super().__init__(
            message,
            code="decode_error",
            details={"excerpt": excerpt, "errors": details} if details else {"excerpt": excerpt},
        )
        self.excerpt = excerpt


class RateLimitedError(UpstreamError):
    def __init__(self, wait_seconds: float) -> None:
        super().__init__(
            f"Rate limited (429), waited {wait_seconds:g}s before retry",
            code="rate_limited",
            status_code=429,
            details={"wait_seconds": wait_seconds},
        )


class ForbiddenError(UpstreamError):
    def __init__(self, consecutive: int) -> None:
        super().__init__(
            f"Forbidden (403), {consecutive} consecutive",
            code="forbidden",
            status_code=403,
            details={"consecutive": consecutive},
        )


class BlockedError(UpstreamError):
    """Upstream requests are suppressed until the block deadline passes."""

    def __init__(self, remaining: timedelta, blocked_until: Any | None = None) -> None:
        seconds = max(0, int(remaining.total_seconds()))
        super().__init__(
            f"Upstream API blocked, retry in {seconds}s",
            code="blocked",
            status_code=503,
            details={
                "remaining_seconds": seconds,
                "blocked_until": blocked_until.isoformat() if blocked_until is not None else None,
            },
        )
        self.remaining = remaining
        self.blocked_until = blocked_until


class UnexpectedStatusError(UpstreamError):
    def __init__(self, status: int, url: str) -> None:
        super().__init__(
            f"Unexpected status code {status} for {url}",
            code="unexpected_status",
            details={"status": status, "url": url},
        )
        self.status = status


class RetriesExhaustedError(UpstreamError):
    def __init__(self, attempts: int, last_error: Exception | None) -> None:
        super().__init__(
            f"Max retries exceeded ({attempts}): {last_error}",
            code="retries_exhausted",
            details={"attempts": attempts, "last_error": str(last_error) if last_error else None},
        )
        self.last_error = last_error


class FallbackError(UpstreamError):
    """Browser rendering path could not recover the payload."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="fallback_failed")
