from dataclasses import dataclass
from datetime import timedelta

import pytest
from pymongo import DeleteMany, InsertOne, ReplaceOne, ReturnDocument, UpdateMany, UpdateOne
from pymongo.errors import InvalidOperation

from mondo.builders import FindAndModify, Operation
from mondo.errors import ConstructionError, NoDocumentsError, SessionEndedError, UsageError
from mondo.results import OperationResult


@dataclass
class User:
    _id: str
    age: int


@pytest.mark.asyncio
async def test_query_one(users):
    user = await users.find({"_id": "uid2"}).select({"age": 1}).max_time(timedelta(seconds=1)).one(User).or_raise()

    assert user == User("uid2", 11)
    _, kwargs = users.handle.last_call("find_one")
    assert kwargs == {"session": None, "projection": {"age": 1}, "max_time_ms": 1000}


@pytest.mark.asyncio
async def test_query_one_without_a_match(users):
    match await users.find({"_id": "missing"}).one():
        case OperationResult.Failure(NoDocumentsError()):
            pass

        case result:
            pytest.fail(f"Expected a NoDocumentsError failure, got {result!r}")


@pytest.mark.asyncio
async def test_query_all_sorted(users):
    result = await users.find({"_id": {"$in": ["uid1", "uid2"]}}).sort("-age").all(User)

    assert result.result == [User("uid2", 11), User("uid1", 10)]
    _, kwargs = users.handle.last_call("find")
    assert kwargs["sort"] == [("age", -1)]


@pytest.mark.asyncio
async def test_query_sort_with_no_fields_keeps_the_previous_sort(users):
    query = users.find().sort("age").sort()
    assert query.compile(Operation.FIND)["sort"] == [("age", 1)]

    query.sort("-_id", "age")
    assert query.compile(Operation.FIND)["sort"] == [("_id", -1), ("age", 1)]


@pytest.mark.asyncio
async def test_query_count(users):
    count = await users.find({"age": {"$gt": 10}}).limit(5).skip(0).count().or_raise()

    assert count == 2
    _, kwargs = users.handle.last_call("count_documents")
    assert kwargs == {"session": None, "skip": 0, "limit": 5}


@pytest.mark.asyncio
async def test_query_cursor_applies_max_await_time(users):
    cursor = users.find().batch_size(2).max_await_time(timedelta(milliseconds=100)).cursor()

    _, kwargs = users.handle.last_call("find")
    assert kwargs == {"session": None, "batch_size": 2}
    assert cursor._handle.value.max_await_time == 100
    assert await cursor.close() is None


@pytest.mark.asyncio
async def test_query_cursor_construction_error_is_captured(users):
    users.handle.errors["find"] = InvalidOperation("bad cursor")
    cursor = users.find().cursor()

    assert await cursor.next() is False
    assert isinstance(cursor.error, ConstructionError)
    assert isinstance(cursor.error.__cause__, InvalidOperation)

    result = await users.find().all()
    assert isinstance(result.exception, ConstructionError)


@pytest.mark.asyncio
async def test_queries_are_routed_through_the_bound_session(client, users):
    session = await client.start_session()
    with session.bind():
        await users.find({"_id": "uid1"}).one().or_raise()

    _, kwargs = users.handle.last_call("find_one")
    assert kwargs["session"] is session.handle


@pytest.mark.asyncio
async def test_ended_session_is_a_usage_error_not_a_failure(client, users):
    session = await client.start_session()
    await session.end_session()

    with pytest.raises(SessionEndedError):
        await users.find(session=session).one()

    with pytest.raises(SessionEndedError):
        await users.find(session=session).one().or_use(None)


@pytest.mark.asyncio
async def test_aggregate(users):
    users.handle.results["aggregate"] = [{"_id": "uid1", "age": 10}]
    pipeline = [{"$match": {"age": 10}}]

    user = await users.aggregate(pipeline).allow_disk_use(True).max_time(timedelta(seconds=3)).one(User).or_raise()

    assert user == User("uid1", 10)
    args, kwargs = users.handle.last_call("aggregate")
    assert args == (pipeline,)
    assert kwargs == {"session": None, "allowDiskUse": True, "maxTimeMS": 3000}


@pytest.mark.asyncio
async def test_aggregate_one_without_results(users):
    assert isinstance((await users.aggregate([]).one()).exception, NoDocumentsError)
    assert await users.aggregate([]).all().or_raise() == []


@pytest.mark.asyncio
async def test_distinct_into_containers(users):
    ages = [99]
    assert await users.distinct("age").max_time(timedelta(seconds=1)).apply(ages).or_raise() is ages
    assert ages == [10, 11, 30]

    ids = set()
    await users.distinct("_id", {"age": {"$gt": 10}}).apply(ids).or_raise()
    assert ids == {"uid2", "uid3"}

    assert await users.distinct("age").apply().or_raise() == [10, 11, 30]
    _, kwargs = users.handle.last_call("distinct")
    assert kwargs == {"session": None}


@pytest.mark.asyncio
async def test_distinct_rejects_non_collections(users):
    with pytest.raises(UsageError):
        await users.distinct("age").apply("not a list")

    with pytest.raises(UsageError):
        await users.distinct("age").apply((1, 2))


@pytest.mark.asyncio
async def test_find_one_and_update(users):
    users.handle.results["find_one_and_update"] = {"_id": "uid1", "age": 12}

    user = await (
        users.find_one_and_update({"_id": "uid1"}, {"$set": {"age": 12}})
        .return_document(ReturnDocument.AFTER)
        .upsert(False)
        .sort("-age")
        .apply(User).or_raise()
    )

    assert user == User("uid1", 12)
    args, kwargs = users.handle.last_call("find_one_and_update")
    assert args == ({"_id": "uid1"}, {"$set": {"age": 12}})
    assert kwargs == {"session": None, "sort": [("age", -1)], "upsert": False, "return_document": ReturnDocument.AFTER}


@pytest.mark.asyncio
async def test_find_one_and_replace_and_delete(users):
    users.handle.results["find_one_and_replace"] = {"_id": "uid1", "age": 1}

    assert await users.find_one_and_replace({"_id": "uid1"}, {"age": 1}).apply().or_raise() == {"_id": "uid1", "age": 1}
    assert await users.find_one_and_delete({"_id": "uid1"}).hint("_id_").apply().or_use("gone") == "gone"

    _, kwargs = users.handle.last_call("find_one_and_delete")
    assert kwargs == {"session": None, "hint": "_id_"}


def test_find_and_modify_needs_a_command(users):
    with pytest.raises(TypeError):
        FindAndModify(users.handle, {"_id": "uid1"})


@pytest.mark.asyncio
async def test_bulk(users):
    users.handle.results["bulk_write"] = "bulk result"

    bulk = (
        users.bulk()
        .ordered(False)
        .insert_one({"_id": "uid4"})
        .insert_one_nx({"_id": "uid5"}, {"_id": "uid5", "age": 5})
        .repsert_one({"_id": "uid1"}, {"age": 1})
        .upsert_id("uid6", {"$set": {"age": 6}})
        .upsert({"age": 0}, {"$set": {"age": 1}})
        .update_many({"age": 1}, {"$inc": {"age": 1}})
        .delete_many({"age": {"$gt": 99}})
        .add_model(None)
    )

    assert bulk.models == [
        InsertOne({"_id": "uid4"}),
        UpdateOne({"_id": "uid5"}, {"$setOnInsert": {"_id": "uid5", "age": 5}}, upsert=True),
        ReplaceOne({"_id": "uid1"}, {"age": 1}, upsert=True),
        UpdateOne({"_id": "uid6"}, {"$set": {"age": 6}}, upsert=True),
        UpdateMany({"age": 0}, {"$set": {"age": 1}}, upsert=True),
        UpdateMany({"age": 1}, {"$inc": {"age": 1}}),
        DeleteMany({"age": {"$gt": 99}}),
    ]
    assert await bulk.apply().or_raise() == "bulk result"
    args, kwargs = users.handle.last_call("bulk_write")
    assert args == (bulk.models,)
    assert kwargs == {"session": None, "ordered": False}


@pytest.mark.asyncio
async def test_watch(users):
    users.handle.results["watch"] = [{"_id": {"_data": "1"}, "operationType": "delete"}]

    async with users.watch([{"$match": {}}]).full_document("updateLookup").batch_size(10).stream() as stream:
        assert await stream.next()
        assert stream.resume_token == {"_data": "1"}

    args, kwargs = users.handle.last_call("watch")
    assert args == ([{"$match": {}}],)
    assert kwargs == {"session": None, "full_document": "updateLookup", "batch_size": 10}


@pytest.mark.asyncio
async def test_watch_construction_error(users):
    users.handle.errors["watch"] = InvalidOperation("not a replica set")
    stream = users.watch().stream()

    assert await stream.next() is False
    assert isinstance(await stream.close(), ConstructionError)
