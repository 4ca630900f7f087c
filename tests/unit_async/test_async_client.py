from __future__ import annotations

import httpx
import pytest

from mappable_httpx.adapter import MappingContext
from mappable_httpx.async_client import AsyncMappableClient
from mappable_httpx.config import ClientConfig
from mappable_httpx.core.errors import ClientClosedError, ErrorKind
from mappable_httpx.core.outcome import Failure, Success
from tests.shared.models import Item, User
from tests.shared.transport import Completions, RecordingHandler, async_client, json_response


@pytest.mark.asyncio
async def test_async_get_object_maps_and_completes_once():
    handler = RecordingHandler([json_response({"a": {"b": {"name": "x"}}})])
    completions = Completions()

    async with AsyncMappableClient(client=async_client(handler)) as client:
        outcome = await client.get_object("/me", User, key_path="a.b", completion=completions)

    assert isinstance(outcome, Success)
    assert outcome.value.name == "x"
    assert completions.outcomes == [outcome]


@pytest.mark.asyncio
async def test_async_get_object_array_persists(memory_store):
    handler = RecordingHandler([json_response([{"id": 1}, {"id": 2}])])

    async with AsyncMappableClient(client=async_client(handler)) as client:
        outcome = await client.get_object_array(
            "/items",
            Item,
            context=MappingContext(store=memory_store),
        )

    assert [item.id for item in outcome.unwrap()] == [1, 2]
    assert memory_store.count(Item) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("step", "config", "expected_kind"),
    [
        (httpx.ConnectTimeout("slow"), ClientConfig(), ErrorKind.TRANSPORT),
        (httpx.Response(204), ClientConfig(), ErrorKind.NO_DATA),
        (json_response({"unexpected": True}), ClientConfig(), ErrorKind.MAPPING_FAILED),
        (json_response({"name": "x"}, status_code=500), ClientConfig(validate_status=True), ErrorKind.TRANSPORT),
    ],
    ids=["timeout", "no-body", "shape-mismatch", "validated-status"],
)
async def test_async_failure_matrix(step, config: ClientConfig, expected_kind: ErrorKind):
    handler = RecordingHandler([step])

    async with AsyncMappableClient(config, client=async_client(handler)) as client:
        outcome = await client.request_object("GET", "/me", User)

    assert isinstance(outcome, Failure)
    assert outcome.kind is expected_kind


@pytest.mark.asyncio
async def test_async_client_raises_when_used_after_close():
    client = AsyncMappableClient(client=async_client(RecordingHandler([])))
    await client.close()
    with pytest.raises(ClientClosedError):
        await client.get_object("/me", User)


@pytest.mark.asyncio
async def test_async_owned_client_is_closed():
    client = AsyncMappableClient(ClientConfig(base_url="https://api.example.test"))
    inner = client._client
    await client.close()
    assert inner.is_closed is True
