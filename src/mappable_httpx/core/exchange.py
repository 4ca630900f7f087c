"""Completed HTTP exchange values and their validation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx

from .errors import (
    NO_DATA_REASON,
    ErrorCode,
    MappableError,
    MappableTransportError,
    new_error,
)


@dataclass(slots=True, frozen=True)
class Exchange:
    """One finished attempt of an HTTP request."""

    error: BaseException | None = None
    data: bytes | None = None
    status_code: int | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    method: str | None = None
    url: str | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "Exchange":
        request = _request_of(response)
        return cls(
            error=None,
            data=response.content,
            status_code=response.status_code,
            headers=dict(response.headers),
            method=request.method if request is not None else None,
            url=str(request.url) if request is not None else None,
        )

    @classmethod
    def from_error(
        cls,
        error: BaseException,
        *,
        request: httpx.Request | None = None,
        response: httpx.Response | None = None,
    ) -> "Exchange":
        return cls(
            error=error,
            data=response.content if response is not None else None,
            status_code=response.status_code if response is not None else None,
            headers=dict(response.headers) if response is not None else {},
            method=request.method if request is not None else None,
            url=str(request.url) if request is not None else None,
        )


def _request_of(response: httpx.Response) -> httpx.Request | None:
    # Responses built by hand in tests have no request attached.
    try:
        return response.request
    except RuntimeError:
        return None


def check_exchange(exchange: Exchange) -> MappableError | None:
    """Return the error that makes the exchange unmappable, if any."""

    if exchange.error is not None:
        if isinstance(exchange.error, MappableTransportError):
            return exchange.error
        return MappableTransportError(
            str(exchange.error) or exchange.error.__class__.__name__,
            http_status=exchange.status_code,
            cause=exchange.error,
        )
    if not exchange.data:
        return new_error(ErrorCode.NO_DATA, NO_DATA_REASON, http_status=exchange.status_code)
    return None


__all__ = [
    "Exchange",
    "check_exchange",
]
