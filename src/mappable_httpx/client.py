"""Public client entrypoint."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TypeVar

import httpx

from .adapter import MappingContext
from .client_shared import (
    Completion,
    build_client_kwargs,
    deliver,
    exchange_from_response,
    exchange_from_transport_error,
    serialize_exchange,
    validate_client_config,
)
from .config import ClientConfig
from .core.errors import ClientClosedError
from .core.outcome import Outcome
from .mapping.mapper import ObjectMapper

T = TypeVar("T")
logger = logging.getLogger("mappable_httpx")


def response_object(
    response: httpx.Response,
    target_type: type[T] | None = None,
    *,
    key_path: str | None = None,
    context: MappingContext | None = None,
    mapper: ObjectMapper | None = None,
    validate_status: bool = False,
    completion: Completion | None = None,
) -> Outcome[T]:
    """Map an already completed response onto a single object."""

    exchange = exchange_from_response(response, validate_status=validate_status)
    outcome = serialize_exchange(
        exchange,
        many=False,
        target_type=target_type,
        key_path=key_path,
        context=context,
        mapper=mapper,
    )
    return deliver(outcome, completion)


def response_object_array(
    response: httpx.Response,
    target_type: type[T],
    *,
    key_path: str | None = None,
    context: MappingContext | None = None,
    mapper: ObjectMapper | None = None,
    validate_status: bool = False,
    completion: Completion | None = None,
) -> Outcome[list[T]]:
    """Map an already completed response onto a list of objects."""

    exchange = exchange_from_response(response, validate_status=validate_status)
    outcome = serialize_exchange(
        exchange,
        many=True,
        target_type=target_type,
        key_path=key_path,
        context=context,
        mapper=mapper,
    )
    return deliver(outcome, completion)


class MappableClient:
    """httpx client whose requests complete with mapped objects."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.Client | None = None,
        mapper: ObjectMapper | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        validate_client_config(self._config)

        self._owns_client = client is None
        self._client = client or httpx.Client(**build_client_kwargs(self._config))
        self._mapper = mapper
        self._closed = False

    def request_object(
        self,
        method: str,
        url: str,
        target_type: type[T] | None = None,
        *,
        key_path: str | None = None,
        context: MappingContext | None = None,
        completion: Completion | None = None,
        **request_kwargs: Any,
    ) -> Outcome[T]:
        return self._request(
            method,
            url,
            many=False,
            target_type=target_type,
            key_path=key_path,
            context=context,
            completion=completion,
            request_kwargs=request_kwargs,
        )

    def request_object_array(
        self,
        method: str,
        url: str,
        target_type: type[T],
        *,
        key_path: str | None = None,
        context: MappingContext | None = None,
        completion: Completion | None = None,
        **request_kwargs: Any,
    ) -> Outcome[list[T]]:
        return self._request(
            method,
            url,
            many=True,
            target_type=target_type,
            key_path=key_path,
            context=context,
            completion=completion,
            request_kwargs=request_kwargs,
        )

    def get_object(self, url: str, target_type: type[T] | None = None, **kwargs: Any) -> Outcome[T]:
        return self.request_object("GET", url, target_type, **kwargs)

    def get_object_array(self, url: str, target_type: type[T], **kwargs: Any) -> Outcome[list[T]]:
        return self.request_object_array("GET", url, target_type, **kwargs)

    def _request(
        self,
        method: str,
        url: str,
        *,
        many: bool,
        target_type: type[Any] | None,
        key_path: str | None,
        context: MappingContext | None,
        completion: Completion | None,
        request_kwargs: dict[str, Any],
    ) -> Outcome[Any]:
        self._ensure_open()
        logger.debug("request start method=%s url=%s", method, url)
        try:
            response = self._client.request(method, url, **request_kwargs)
        except httpx.HTTPError as exc:
            logger.error(
                "request transport error method=%s url=%s error=%s",
                method,
                url,
                exc.__class__.__name__,
            )
            exchange = exchange_from_transport_error(exc)
        else:
            logger.info(
                "request complete method=%s url=%s http_status=%s",
                method,
                url,
                response.status_code,
            )
            exchange = exchange_from_response(
                response,
                validate_status=self._config.validate_status,
            )
        outcome = serialize_exchange(
            exchange,
            many=many,
            target_type=target_type,
            key_path=key_path,
            context=context,
            mapper=self._mapper,
        )
        return deliver(outcome, completion)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ClientClosedError("MappableClient is already closed")

    def close(self) -> None:
        if self._closed:
            return
        if self._owns_client:
            self._client.close()
        self._closed = True

    def __enter__(self) -> "MappableClient":
        self._ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.close()
        return False


__all__ = [
    "MappableClient",
    "response_object",
    "response_object_array",
]
