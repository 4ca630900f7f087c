from __future__ import annotations

from dataclasses import dataclass

import pytest
from pydantic import BaseModel, ValidationInfo, field_validator

from mappable_httpx.mapping.mapper import MapperOptions, PydanticObjectMapper
from tests.shared.models import FrozenItem, Item, Tag, User

OPTIONS = MapperOptions()


@pytest.fixture
def mapper() -> PydanticObjectMapper:
    return PydanticObjectMapper()


def test_map_builds_pydantic_model(mapper):
    assert mapper.map({"name": "x", "age": 2}, User, OPTIONS) == User(name="x", age=2)


def test_map_builds_dataclass(mapper):
    assert mapper.map({"slug": "s"}, Tag, OPTIONS) == Tag(slug="s", weight=0)


def test_map_returns_none_for_absent_json(mapper):
    assert mapper.map(None, User, OPTIONS) is None


def test_map_returns_none_on_validation_error(mapper):
    assert mapper.map({"id": "abc"}, Item, OPTIONS) is None


def test_strict_option_disables_coercion(mapper):
    assert mapper.map({"id": "1"}, Item, OPTIONS) == Item(id=1)
    assert mapper.map({"id": "1"}, Item, MapperOptions(strict=True)) is None


class _Scaled(BaseModel):
    value: int

    @field_validator("value")
    @classmethod
    def _scale(cls, value: int, info: ValidationInfo) -> int:
        factor = (info.context or {}).get("factor", 1)
        return value * factor


def test_validation_context_is_forwarded(mapper):
    options = MapperOptions(validation_context={"factor": 10})
    assert mapper.map({"value": 3}, _Scaled, options) == _Scaled(value=30)


def test_map_into_updates_dataclass_in_place(mapper):
    tag = Tag(slug="old", weight=1)

    result = mapper.map_into({"slug": "new"}, tag, OPTIONS)

    assert result is tag
    assert tag == Tag(slug="new", weight=1)


def test_map_into_requires_json_object(mapper):
    tag = Tag(slug="old")
    assert mapper.map_into([{"slug": "new"}], tag, OPTIONS) is None
    assert mapper.map_into(None, tag, OPTIONS) is None


def test_map_into_rejects_frozen_targets(mapper):
    item = FrozenItem(id=1)
    assert mapper.map_into({"id": 2}, item, OPTIONS) is None
    assert item.id == 1


@dataclass(frozen=True)
class _FrozenTag:
    slug: str


def test_map_into_rejects_frozen_dataclass(mapper):
    tag = _FrozenTag(slug="a")
    assert mapper.map_into({"slug": "b"}, tag, OPTIONS) is None
    assert tag.slug == "a"


def test_map_into_rejects_unsupported_targets(mapper):
    assert mapper.map_into({"a": 1}, {"a": 0}, OPTIONS) is None


def test_map_array(mapper):
    assert mapper.map_array([{"id": 1}, {"id": 2}], Item, OPTIONS) == [Item(id=1), Item(id=2)]
    assert mapper.map_array([], Item, OPTIONS) == []
    assert mapper.map_array({"id": 1}, Item, OPTIONS) is None


def test_map_array_skip_policy(mapper):
    strict_result = mapper.map_array([{"id": 1}, None, {"id": "bad"}], Item, OPTIONS)
    lenient_result = mapper.map_array(
        [{"id": 1}, None, {"id": "bad"}, {"id": 4}],
        Item,
        MapperOptions(skip_invalid_elements=True),
    )

    assert strict_result is None
    assert lenient_result == [Item(id=1), Item(id=4)]
