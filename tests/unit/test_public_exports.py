from __future__ import annotations

import mappable_httpx


def test_package_exports_public_surface():
    expected = {
        "MappableClient",
        "AsyncMappableClient",
        "ClientConfig",
        "MappingContext",
        "map_object",
        "map_object_array",
        "object_serializer",
        "object_array_serializer",
        "response_object",
        "response_object_array",
        "Exchange",
        "Success",
        "Failure",
        "ErrorKind",
        "MapperOptions",
        "PydanticObjectMapper",
        "MemoryObjectStore",
        "SqliteObjectStore",
    }
    assert expected.issubset(set(mappable_httpx.__all__))
    for name in mappable_httpx.__all__:
        assert hasattr(mappable_httpx, name)
    assert not hasattr(mappable_httpx, "_run")
