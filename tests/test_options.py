from datetime import timedelta

import pytest
from pymongo import ReturnDocument

from mondo.builders import Operation, OptionSet, RequestOptions


def build(setters) -> OptionSet:
    options = OptionSet()
    for name, value in setters:
        options.set(name, value)

    return options


def test_only_set_options_are_compiled():
    options = build([("limit", 10)])
    assert options.compile(Operation.FIND) == RequestOptions(Operation.FIND, {"limit": 10})


def test_false_and_zero_are_forwarded():
    options = build([("no_cursor_timeout", False), ("skip", 0)])
    assert options.compile(Operation.FIND).as_kwargs() == {"skip": 0, "no_cursor_timeout": False}


def test_unset_option_is_nothing():
    options = OptionSet()
    assert not options.get("limit")
    assert "limit" not in options


def test_durations_compile_to_milliseconds():
    options = build([("max_time", timedelta(seconds=2)), ("max_await_time", timedelta(milliseconds=250))])
    assert options.compile(Operation.FIND).as_kwargs() == {"max_time_ms": 2000, "max_await_time_ms": 250}
    assert options.compile(Operation.AGGREGATE).as_kwargs() == {"maxTimeMS": 2000, "maxAwaitTimeMS": 250}


def test_options_are_renamed_per_operation():
    options = build([("allow_disk_use", True), ("batch_size", 5), ("projection", {"age": 1})])
    assert options.compile(Operation.FIND).as_kwargs() == {
        "projection": {"age": 1},
        "batch_size": 5,
        "allow_disk_use": True,
    }
    assert options.compile(Operation.AGGREGATE).as_kwargs() == {"allowDiskUse": True, "batchSize": 5}


def test_options_the_operation_does_not_accept_are_left_out():
    options = build([("limit", 1), ("batch_size", 100), ("collation", {"locale": "en"})])
    assert options.compile(Operation.FIND_ONE).as_kwargs() == {"collation": {"locale": "en"}}


def test_find_and_modify_options():
    options = build([("return_document", ReturnDocument.AFTER), ("upsert", True), ("array_filters", [{"x": 1}])])
    assert options.compile(Operation.FIND_ONE_AND_UPDATE).as_kwargs() == {
        "upsert": True,
        "return_document": ReturnDocument.AFTER,
        "array_filters": [{"x": 1}],
    }
    assert "array_filters" not in options.compile(Operation.FIND_ONE_AND_REPLACE)


def test_empty_sort_is_left_out():
    options = build([("sort", [])])
    assert options.compile(Operation.FIND) == RequestOptions(Operation.FIND, {})


def test_compiling_is_deterministic():
    setters = [("sort", [("age", -1)]), ("limit", 5), ("max_time", timedelta(seconds=1)), ("comment", "report")]
    first = build(setters).compile(Operation.FIND)
    second = build(reversed(setters)).compile(Operation.FIND)
    assert first == second
    assert list(first) == list(second)


def test_compiled_options_are_read_only():
    compiled = build([("limit", 5)]).compile(Operation.FIND)
    with pytest.raises(TypeError):
        compiled["limit"] = 10

    kwargs = compiled.as_kwargs()
    kwargs["limit"] = 10
    assert compiled["limit"] == 5


def test_compiled_options_do_not_share_state_with_the_option_set():
    sort = [("age", 1)]
    options = build([("sort", sort)])
    compiled = options.compile(Operation.FIND)
    sort.append(("name", 1))
    assert compiled["sort"] == [("age", 1)]


def test_different_operations_are_not_equal():
    options = build([("collation", {"locale": "en"})])
    assert options.compile(Operation.DISTINCT) != options.compile(Operation.COUNT)
