"""Public package exports for mappable-httpx."""

from .adapter import (
    MappingContext,
    map_object,
    map_object_array,
    object_array_serializer,
    object_serializer,
)
from .async_client import AsyncMappableClient
from .client import MappableClient, response_object, response_object_array
from .config import ClientConfig, TransportConfig
from .core.errors import ErrorKind, MappableError
from .core.exchange import Exchange
from .core.outcome import Failure, Outcome, Success
from .mapping.mapper import MapperOptions, PydanticObjectMapper
from .persistence.object_store import MemoryObjectStore, SqliteObjectStore

__all__ = [
    "MappableClient",
    "AsyncMappableClient",
    "ClientConfig",
    "TransportConfig",
    "MappingContext",
    "map_object",
    "map_object_array",
    "object_serializer",
    "object_array_serializer",
    "response_object",
    "response_object_array",
    "Exchange",
    "Outcome",
    "Success",
    "Failure",
    "ErrorKind",
    "MappableError",
    "MapperOptions",
    "PydanticObjectMapper",
    "MemoryObjectStore",
    "SqliteObjectStore",
]
