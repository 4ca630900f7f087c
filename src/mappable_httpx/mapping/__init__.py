"""JSON-to-object mapping."""

from .mapper import MapperOptions, ObjectMapper, PydanticObjectMapper

__all__ = ["MapperOptions", "ObjectMapper", "PydanticObjectMapper"]
