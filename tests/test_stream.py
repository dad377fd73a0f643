import pytest

from fakes import FakeChangeStream

from mondo.errors import ConstructionError
from mondo.iterators import ChangeEvent, Namespace, OperationType, Stream


def insert_event(uid: str) -> dict:
    return {
        "_id": {"_data": f"token-{uid}"},
        "operationType": "insert",
        "clusterTime": 1,
        "ns": {"db": "test", "coll": "users"},
        "documentKey": {"_id": uid},
        "fullDocument": {"_id": uid, "age": 10},
        "wallTime": "now",
    }


@pytest.mark.asyncio
async def test_stream_yields_change_events():
    stream = Stream.opened(FakeChangeStream([insert_event("uid1")]))

    assert await stream.next()
    event = await stream.one(ChangeEvent)

    assert event.operation_type is OperationType.INSERT
    assert event.namespace == Namespace("test", "users")
    assert event.document_key == {"_id": "uid1"}
    assert event.full_document == {"_id": "uid1", "age": 10}
    assert event.extra == {"wallTime": "now"}
    assert stream.resume_token == {"_data": "token-uid1"}


@pytest.mark.asyncio
async def test_try_next_does_not_wait():
    stream = Stream.opened(FakeChangeStream([insert_event("uid1")]))

    assert await stream.try_next()
    assert await stream.try_next() is False
    assert stream.current is None
    assert stream.error is None
    assert stream.alive


@pytest.mark.asyncio
async def test_failed_stream():
    error = ConstructionError("change streams need a replica set")
    stream = Stream.failed(error)

    assert await stream.next() is False
    assert await stream.try_next() is False
    assert stream.resume_token is None
    assert stream.error is error
    assert await stream.close() is error
    with pytest.raises(ConstructionError):
        await stream.one(ChangeEvent)


@pytest.mark.asyncio
async def test_closing_a_live_stream():
    handle = FakeChangeStream([])
    async with Stream.opened(handle) as stream:
        assert stream.alive

    assert handle.closed
    assert stream.alive is False


def test_invalidate_event_without_namespace():
    event = ChangeEvent.from_document({"_id": {"_data": "x"}, "operationType": "invalidate"})
    assert event.operation_type is OperationType.INVALIDATE
    assert event.namespace is None
