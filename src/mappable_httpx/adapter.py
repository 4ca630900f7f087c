"""Response-to-object adapter.

Turns one completed :class:`Exchange` into exactly one :class:`Outcome`:
transport errors and empty bodies short-circuit, the JSON body is narrowed
by an optional key path, and the mapper runs either on its own or inside a
write transaction of the object store carried by the mapping context.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from .core.errors import (
    MAPPING_FAILED_REASON,
    ErrorCode,
    MappableError,
    MappableMappingError,
    MappablePersistenceError,
    ObjectStoreError,
    new_error,
)
from .core.exchange import Exchange, check_exchange
from .core.json_values import JsonValue, extract_json
from .core.outcome import Failure, Outcome, Success
from .mapping.mapper import MapperOptions, ObjectMapper, PydanticObjectMapper, copy_fields
from .persistence.object_store import ObjectStore

T = TypeVar("T")
logger = logging.getLogger("mappable_httpx")

_default_mapper = PydanticObjectMapper()


@dataclass(slots=True, frozen=True)
class MappingContext:
    """Caller-supplied configuration for one mapping call."""

    existing_target: Any | None = None
    store: ObjectStore | None = None
    options: MapperOptions = field(default_factory=MapperOptions)


class _MappingAborted(Exception):
    """Unwinds a write transaction when the mapper produced nothing."""


def map_object(
    exchange: Exchange,
    target_type: type[T] | None = None,
    *,
    key_path: str | None = None,
    context: MappingContext | None = None,
    mapper: ObjectMapper | None = None,
) -> Outcome[T]:
    """Map the exchange body onto a single object."""

    context = context or MappingContext()
    resolved_type = _resolve_target_type(target_type, context)
    active_mapper = mapper or _default_mapper

    target = context.existing_target

    def _map(json_value: JsonValue) -> T | None:
        if target is None:
            return active_mapper.map(json_value, resolved_type, context.options)
        if context.store is None:
            return active_mapper.map_into(json_value, target, context.options)
        # The caller's object only changes once the transaction has committed.
        return active_mapper.map_into(json_value, copy.deepcopy(target), context.options)

    def _apply_committed(staged: T) -> T:
        copy_fields(staged, target)
        return target

    return _run(
        exchange,
        key_path=key_path,
        context=context,
        map_json=_map,
        many=False,
        after_commit=_apply_committed if target is not None else None,
    )


def map_object_array(
    exchange: Exchange,
    target_type: type[T],
    *,
    key_path: str | None = None,
    context: MappingContext | None = None,
    mapper: ObjectMapper | None = None,
) -> Outcome[list[T]]:
    """Map the exchange body, a JSON array, onto a list of objects."""

    if target_type is None:
        raise TypeError("target_type is required for array mapping")
    context = context or MappingContext()
    active_mapper = mapper or _default_mapper

    def _map(json_value: JsonValue) -> list[T] | None:
        return active_mapper.map_array(json_value, target_type, context.options)

    return _run(exchange, key_path=key_path, context=context, map_json=_map, many=True)


def object_serializer(
    target_type: type[T] | None = None,
    *,
    key_path: str | None = None,
    context: MappingContext | None = None,
    mapper: ObjectMapper | None = None,
) -> Callable[[Exchange], Outcome[T]]:
    """Bind the single-object mapping arguments into an exchange serializer."""

    _resolve_target_type(target_type, context or MappingContext())

    def serialize(exchange: Exchange) -> Outcome[T]:
        return map_object(
            exchange,
            target_type,
            key_path=key_path,
            context=context,
            mapper=mapper,
        )

    return serialize


def object_array_serializer(
    target_type: type[T],
    *,
    key_path: str | None = None,
    context: MappingContext | None = None,
    mapper: ObjectMapper | None = None,
) -> Callable[[Exchange], Outcome[list[T]]]:
    """Bind the array mapping arguments into an exchange serializer."""

    if target_type is None:
        raise TypeError("target_type is required for array mapping")

    def serialize(exchange: Exchange) -> Outcome[list[T]]:
        return map_object_array(
            exchange,
            target_type,
            key_path=key_path,
            context=context,
            mapper=mapper,
        )

    return serialize


def _resolve_target_type(target_type: type[T] | None, context: MappingContext) -> type[T]:
    if target_type is not None:
        return target_type
    if context.existing_target is not None:
        return type(context.existing_target)
    raise TypeError("target_type is required when no existing_target is supplied")


def _run(
    exchange: Exchange,
    *,
    key_path: str | None,
    context: MappingContext,
    map_json: Callable[[JsonValue], Any],
    many: bool,
    after_commit: Callable[[Any], Any] | None = None,
) -> Outcome[Any]:
    error = check_exchange(exchange)
    if error is not None:
        logger.debug(
            "exchange rejected url=%s kind=%s",
            exchange.url,
            error.kind.value,
        )
        return Failure(error)

    json_value = extract_json(exchange.data, key_path)
    if context.store is None:
        try:
            mapped = map_json(json_value)
        except Exception as exc:
            logger.error(
                "mapper raised url=%s error=%s",
                exchange.url,
                exc.__class__.__name__,
            )
            return Failure(_mapping_failed(exchange, cause=exc))
    else:
        try:
            mapped = _map_in_transaction(context.store, json_value, map_json, many=many)
        except MappableError as exc:
            logger.error(
                "mapper raised inside write transaction url=%s error=%s",
                exchange.url,
                exc.cause.__class__.__name__,
            )
            return Failure(exc)
        except ObjectStoreError as exc:
            logger.error(
                "write transaction failed url=%s error=%s",
                exchange.url,
                exc,
            )
            return Failure(
                MappablePersistenceError(
                    str(exc),
                    http_status=exchange.status_code,
                    cause=exc,
                )
            )
        if mapped is not None and after_commit is not None:
            try:
                mapped = after_commit(mapped)
            except Exception as exc:
                logger.error(
                    "committed object could not be applied url=%s error=%s",
                    exchange.url,
                    exc.__class__.__name__,
                )
                return Failure(_mapping_failed(exchange, cause=exc))

    if mapped is None:
        logger.debug("mapping produced nothing url=%s key_path=%s", exchange.url, key_path)
        return Failure(_mapping_failed(exchange))
    return Success(mapped)


def _map_in_transaction(
    store: ObjectStore,
    json_value: JsonValue,
    map_json: Callable[[JsonValue], Any],
    *,
    many: bool,
) -> Any:
    try:
        with store.write() as transaction:
            try:
                mapped = map_json(json_value)
            except Exception as exc:
                raise MappableMappingError(cause=exc) from exc
            if mapped is None:
                raise _MappingAborted
            for obj in mapped if many else (mapped,):
                transaction.add(obj)
    except _MappingAborted:
        return None
    return mapped


def _mapping_failed(exchange: Exchange, *, cause: BaseException | None = None) -> MappableError:
    if cause is not None:
        return MappableMappingError(http_status=exchange.status_code, cause=cause)
    return new_error(
        ErrorCode.DATA_SERIALIZATION_FAILED,
        MAPPING_FAILED_REASON,
        http_status=exchange.status_code,
    )


__all__ = [
    "MappingContext",
    "map_object",
    "map_object_array",
    "object_serializer",
    "object_array_serializer",
]
