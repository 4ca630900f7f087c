"""Public async client entrypoint."""

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


class AsyncMappableClient:
    """Async httpx client whose requests complete with mapped objects.

    Only the request is awaited; mapping runs synchronously once the
    response has arrived.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        mapper: ObjectMapper | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        validate_client_config(self._config)

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**build_client_kwargs(self._config))
        self._mapper = mapper
        self._closed = False

    async def request_object(
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
        return await self._request(
            method,
            url,
            many=False,
            target_type=target_type,
            key_path=key_path,
            context=context,
            completion=completion,
            request_kwargs=request_kwargs,
        )

    async def request_object_array(
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
        return await self._request(
            method,
            url,
            many=True,
            target_type=target_type,
            key_path=key_path,
            context=context,
            completion=completion,
            request_kwargs=request_kwargs,
        )

    async def get_object(
        self,
        url: str,
        target_type: type[T] | None = None,
        **kwargs: Any,
    ) -> Outcome[T]:
        return await self.request_object("GET", url, target_type, **kwargs)

    async def get_object_array(
        self,
        url: str,
        target_type: type[T],
        **kwargs: Any,
    ) -> Outcome[list[T]]:
        return await self.request_object_array("GET", url, target_type, **kwargs)

    async def _request(
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
            response = await self._client.request(method, url, **request_kwargs)
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
            raise ClientClosedError("AsyncMappableClient is already closed")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncMappableClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncMappableClient",
]
