from __future__ import annotations

import httpx
import pytest

from mappable_httpx.adapter import MappingContext
from mappable_httpx.client import MappableClient, response_object, response_object_array
from mappable_httpx.config import ClientConfig
from mappable_httpx.core.errors import ClientClosedError, ErrorKind, MappableTransportError
from mappable_httpx.core.outcome import Failure, Success
from tests.shared.models import Item, User
from tests.shared.transport import Completions, RecordingHandler, json_response, sync_client


def test_get_object_maps_response_and_calls_completion_once():
    handler = RecordingHandler([json_response({"data": {"user": {"name": "x"}}})])
    completions = Completions()

    with MappableClient(client=sync_client(handler)) as client:
        outcome = client.get_object("/me", User, key_path="data.user", completion=completions)

    assert isinstance(outcome, Success)
    assert outcome.value == User(name="x")
    assert completions.outcomes == [outcome]
    assert handler.requests[0].url.path == "/me"


def test_get_object_array_forwards_request_kwargs():
    handler = RecordingHandler([json_response([{"id": 1}, {"id": 2}])])

    with MappableClient(client=sync_client(handler)) as client:
        outcome = client.get_object_array("/items", Item, params={"page": "2"})

    assert [item.id for item in outcome.unwrap()] == [1, 2]
    assert handler.requests[0].url.params["page"] == "2"


def test_request_object_with_post_body():
    handler = RecordingHandler([json_response({"id": 9}, status_code=201)])

    with MappableClient(client=sync_client(handler)) as client:
        outcome = client.request_object("POST", "/items", Item, json={"label": "new"})

    assert outcome.unwrap() == Item(id=9)
    assert handler.requests[0].method == "POST"


def test_transport_error_is_delivered_as_failure():
    handler = RecordingHandler([httpx.ConnectError("refused")])
    completions = Completions()

    with MappableClient(client=sync_client(handler)) as client:
        outcome = client.get_object("/me", User, completion=completions)

    assert isinstance(outcome, Failure)
    assert outcome.kind is ErrorKind.TRANSPORT
    assert isinstance(outcome.error.cause, httpx.ConnectError)
    assert completions.outcomes == [outcome]


def test_error_status_is_mapped_without_validation():
    handler = RecordingHandler([json_response({"name": "still mapped"}, status_code=500)])

    with MappableClient(client=sync_client(handler)) as client:
        outcome = client.get_object("/me", User)

    assert outcome.unwrap().name == "still mapped"


def test_validate_status_turns_error_status_into_transport_failure():
    handler = RecordingHandler([json_response({"name": "x"}, status_code=404)])

    with MappableClient(ClientConfig(validate_status=True), client=sync_client(handler)) as client:
        outcome = client.get_object("/me", User)

    assert isinstance(outcome, Failure)
    assert outcome.kind is ErrorKind.TRANSPORT
    assert isinstance(outcome.error, MappableTransportError)
    assert outcome.error.http_status == 404


def test_empty_response_is_no_data():
    handler = RecordingHandler([httpx.Response(204)])

    with MappableClient(client=sync_client(handler)) as client:
        outcome = client.get_object("/me", User)

    assert isinstance(outcome, Failure)
    assert outcome.kind is ErrorKind.NO_DATA


def test_persisting_request(memory_store):
    handler = RecordingHandler([json_response([{"id": 1}, {"id": 2}])])

    with MappableClient(client=sync_client(handler)) as client:
        client.get_object_array("/items", Item, context=MappingContext(store=memory_store))

    assert memory_store.count(Item) == 2


def test_client_raises_when_used_after_close():
    client = MappableClient(client=sync_client(RecordingHandler([])))
    client.close()
    with pytest.raises(ClientClosedError):
        client.get_object("/me", User)


def test_injected_client_is_not_closed():
    injected = sync_client(RecordingHandler([]))
    with MappableClient(client=injected):
        pass
    assert injected.is_closed is False
    injected.close()


def test_owned_client_is_closed():
    client = MappableClient(ClientConfig(base_url="https://api.example.test"))
    inner = client._client
    client.close()
    client.close()
    assert inner.is_closed is True


def test_response_object_functions_map_completed_responses():
    completions = Completions()

    single = response_object(json_response({"name": "x"}), User, completion=completions)
    many = response_object_array(json_response([{"id": 3}]), Item)
    rejected = response_object(
        json_response({"name": "x"}, status_code=503),
        User,
        validate_status=True,
    )

    assert single.unwrap() == User(name="x")
    assert completions.outcomes == [single]
    assert [item.id for item in many.unwrap()] == [3]
    assert isinstance(rejected, Failure)
    assert rejected.error.http_status == 503
