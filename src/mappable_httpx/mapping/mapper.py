"""Object mapper contract and pydantic-backed implementation."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..core.json_values import JsonValue

T = TypeVar("T")
logger = logging.getLogger("mappable_httpx")


@dataclass(slots=True, frozen=True)
class MapperOptions:
    """Options forwarded untouched from the mapping context to the mapper."""

    strict: bool = False
    skip_invalid_elements: bool = False
    validation_context: Mapping[str, Any] | None = None


class ObjectMapper(Protocol):
    """Converts JSON values into application objects."""

    def map(self, json_value: JsonValue, target_type: type[T], options: MapperOptions) -> T | None:
        """Construct a new ``target_type`` or return ``None``."""

    def map_into(self, json_value: JsonValue, target: T, options: MapperOptions) -> T | None:
        """Update ``target`` in place and return it, or return ``None``."""

    def map_array(
        self,
        json_value: JsonValue,
        target_type: type[T],
        options: MapperOptions,
    ) -> list[T] | None:
        """Map every element of a JSON array or return ``None``."""


@lru_cache(maxsize=256)
def type_adapter(target_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target_type)


class PydanticObjectMapper:
    """ObjectMapper backed by ``pydantic.TypeAdapter``.

    Works with pydantic models, standard dataclasses and pydantic dataclasses.
    """

    def map(self, json_value: JsonValue, target_type: type[T], options: MapperOptions) -> T | None:
        if json_value is None:
            return None
        try:
            return self._validate(target_type, json_value, options)
        except ValidationError as exc:
            logger.debug(
                "mapping failed target=%s errors=%s",
                _type_name(target_type),
                exc.error_count(),
            )
            return None

    def map_into(self, json_value: JsonValue, target: T, options: MapperOptions) -> T | None:
        if not isinstance(json_value, dict):
            return None
        target_type = type(target)
        current = _field_values(target)
        if current is None:
            logger.debug("in-place mapping unsupported target=%s", _type_name(target_type))
            return None
        merged = {**current, **json_value}
        try:
            updated = self._validate(target_type, merged, options)
        except ValidationError as exc:
            logger.debug(
                "in-place mapping failed target=%s errors=%s",
                _type_name(target_type),
                exc.error_count(),
            )
            return None
        try:
            copy_fields(updated, target)
        except (dataclasses.FrozenInstanceError, ValidationError, TypeError, AttributeError):
            logger.debug("in-place mapping rejected frozen target=%s", _type_name(target_type))
            return None
        return target

    def map_array(
        self,
        json_value: JsonValue,
        target_type: type[T],
        options: MapperOptions,
    ) -> list[T] | None:
        if not isinstance(json_value, list):
            return None
        if not options.skip_invalid_elements:
            try:
                return self._validate(list[target_type], json_value, options)  # type: ignore[valid-type]
            except ValidationError as exc:
                logger.debug(
                    "array mapping failed target=%s errors=%s",
                    _type_name(target_type),
                    exc.error_count(),
                )
                return None

        mapped: list[T] = []
        for index, element in enumerate(json_value):
            item = self.map(element, target_type, options)
            if item is None:
                logger.warning(
                    "array element dropped target=%s index=%s",
                    _type_name(target_type),
                    index,
                )
                continue
            mapped.append(item)
        return mapped

    @staticmethod
    def _validate(target_type: Any, value: object, options: MapperOptions) -> Any:
        context = dict(options.validation_context) if options.validation_context is not None else None
        return type_adapter(target_type).validate_python(
            value,
            strict=options.strict,
            context=context,
        )


def copy_fields(source: object, target: object) -> None:
    """Assign every mapped field of ``source`` onto ``target``."""

    names = _field_names(target)
    if names:
        for name in names:
            setattr(target, name, getattr(source, name))
        return
    vars(target).update(vars(source))


def _type_name(target_type: Any) -> str:
    return getattr(target_type, "__name__", repr(target_type))


def _field_names(target: object) -> tuple[str, ...]:
    if isinstance(target, BaseModel):
        return tuple(type(target).model_fields)
    if dataclasses.is_dataclass(target) and not isinstance(target, type):
        return tuple(item.name for item in dataclasses.fields(target))
    return ()


def _field_values(target: object) -> dict[str, object] | None:
    if isinstance(target, BaseModel):
        return target.model_dump(by_alias=True)
    if dataclasses.is_dataclass(target) and not isinstance(target, type):
        return {name: getattr(target, name) for name in _field_names(target)}
    return None


__all__ = [
    "MapperOptions",
    "ObjectMapper",
    "PydanticObjectMapper",
    "type_adapter",
    "copy_fields",
]
