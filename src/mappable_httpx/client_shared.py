"""Shared helpers for sync/async client bootstrap and delivery."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from .adapter import MappingContext, map_object, map_object_array
from .config import ClientConfig
from .core.errors import ConfigurationError, MappableTransportError
from .core.exchange import Exchange
from .core.outcome import Outcome
from .mapping.mapper import ObjectMapper

Completion = Callable[[Outcome[Any]], object]
logger = logging.getLogger("mappable_httpx")


def validate_client_config(config: ClientConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def build_default_headers(config: ClientConfig) -> Mapping[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": config.user_agent,
    }


def build_default_timeout(config: ClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


def build_client_kwargs(config: ClientConfig) -> dict[str, Any]:
    return {
        "base_url": config.base_url,
        "headers": build_default_headers(config),
        "timeout": build_default_timeout(config),
        "follow_redirects": config.follow_redirects,
    }


def exchange_from_response(response: httpx.Response, *, validate_status: bool) -> Exchange:
    """Build the exchange for a received response, applying status validation."""

    if validate_status and not response.is_success:
        return Exchange.from_error(
            MappableTransportError(
                f"response status code was unacceptable: {response.status_code}",
                http_status=response.status_code,
            ),
            request=_request_or_none(response),
            response=response,
        )
    return Exchange.from_response(response)


def exchange_from_transport_error(exc: httpx.HTTPError) -> Exchange:
    request = None
    if isinstance(exc, httpx.RequestError):
        try:
            request = exc.request
        except RuntimeError:
            request = None
    return Exchange.from_error(exc, request=request)


def serialize_exchange(
    exchange: Exchange,
    *,
    many: bool,
    target_type: type[Any] | None,
    key_path: str | None,
    context: MappingContext | None,
    mapper: ObjectMapper | None,
) -> Outcome[Any]:
    if many:
        return map_object_array(
            exchange,
            target_type,  # type: ignore[arg-type]
            key_path=key_path,
            context=context,
            mapper=mapper,
        )
    return map_object(
        exchange,
        target_type,
        key_path=key_path,
        context=context,
        mapper=mapper,
    )


def deliver(outcome: Outcome[Any], completion: Completion | None) -> Outcome[Any]:
    """Hand the outcome to the completion handler once and return it."""

    if completion is not None:
        completion(outcome)
    return outcome


def _request_or_none(response: httpx.Response) -> httpx.Request | None:
    try:
        return response.request
    except RuntimeError:
        return None


__all__ = [
    "Completion",
    "validate_client_config",
    "build_default_headers",
    "build_default_timeout",
    "build_client_kwargs",
    "exchange_from_response",
    "exchange_from_transport_error",
    "serialize_exchange",
    "deliver",
]
