"""Option accumulation and compilation for the request builders.

Builders record each chained setter call in an `OptionSet`. An option that was never set is `Optional.Nothing()`,
so an option explicitly set to `False` or `0` is still forwarded. When a terminal call runs, the set is compiled
into a `RequestOptions` for one specific operation. The compiled options contain only the fields that were set and
that the operation accepts, renamed to the keyword arguments motor expects for that call.
"""
from collections.abc import Mapping
from datetime import timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator

from tramp.optionals import Optional


class Operation(Enum):
    """The collaborator calls a builder can compile options for.

    Each member's value maps option names, as used by the builder setters, to the keyword argument the motor method
    takes. The order of the table is the order of the compiled options.
    """
    FIND = {
        "projection": "projection",
        "sort": "sort",
        "skip": "skip",
        "limit": "limit",
        "batch_size": "batch_size",
        "hint": "hint",
        "collation": "collation",
        "comment": "comment",
        "max_time": "max_time_ms",
        "max_await_time": "max_await_time_ms",
        "max": "max",
        "min": "min",
        "return_key": "return_key",
        "show_record_id": "show_record_id",
        "allow_disk_use": "allow_disk_use",
        "allow_partial_results": "allow_partial_results",
        "no_cursor_timeout": "no_cursor_timeout",
    }
    FIND_ONE = {
        "projection": "projection",
        "sort": "sort",
        "skip": "skip",
        "hint": "hint",
        "collation": "collation",
        "comment": "comment",
        "max_time": "max_time_ms",
        "max": "max",
        "min": "min",
        "return_key": "return_key",
        "show_record_id": "show_record_id",
        "allow_partial_results": "allow_partial_results",
    }
    COUNT = {
        "skip": "skip",
        "limit": "limit",
        "hint": "hint",
        "collation": "collation",
        "comment": "comment",
        "max_time": "maxTimeMS",
    }
    AGGREGATE = {
        "allow_disk_use": "allowDiskUse",
        "batch_size": "batchSize",
        "bypass_document_validation": "bypassDocumentValidation",
        "collation": "collation",
        "comment": "comment",
        "hint": "hint",
        "max_time": "maxTimeMS",
        "max_await_time": "maxAwaitTimeMS",
    }
    DISTINCT = {
        "collation": "collation",
        "comment": "comment",
        "max_time": "maxTimeMS",
    }
    FIND_ONE_AND_UPDATE = {
        "projection": "projection",
        "sort": "sort",
        "upsert": "upsert",
        "return_document": "return_document",
        "array_filters": "array_filters",
        "hint": "hint",
        "comment": "comment",
        "collation": "collation",
        "max_time": "maxTimeMS",
        "bypass_document_validation": "bypassDocumentValidation",
    }
    FIND_ONE_AND_REPLACE = {
        "projection": "projection",
        "sort": "sort",
        "upsert": "upsert",
        "return_document": "return_document",
        "hint": "hint",
        "comment": "comment",
        "collation": "collation",
        "max_time": "maxTimeMS",
        "bypass_document_validation": "bypassDocumentValidation",
    }
    FIND_ONE_AND_DELETE = {
        "projection": "projection",
        "sort": "sort",
        "hint": "hint",
        "comment": "comment",
        "collation": "collation",
        "max_time": "maxTimeMS",
    }
    BULK_WRITE = {
        "ordered": "ordered",
        "bypass_document_validation": "bypass_document_validation",
        "comment": "comment",
    }
    WATCH = {
        "full_document": "full_document",
        "resume_after": "resume_after",
        "start_after": "start_after",
        "start_at_operation_time": "start_at_operation_time",
        "batch_size": "batch_size",
        "collation": "collation",
        "comment": "comment",
        "max_await_time": "max_await_time_ms",
    }


class RequestOptions(Mapping[str, Any]):
    """The compiled, read-only options for a single collaborator call.

    Two `RequestOptions` compare equal when they were compiled for the same operation from the same settings.
    """
    __slots__ = ("operation", "_options")

    def __init__(self, operation: Operation, options: dict[str, Any]):
        self.operation = operation
        self._options = MappingProxyType(dict(options))

    def __getitem__(self, key: str) -> Any:
        return self._options[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __eq__(self, other):
        if not isinstance(other, RequestOptions):
            return NotImplemented

        return self.operation is other.operation and dict(self._options) == dict(other._options)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.operation.name}, {dict(self._options)!r})"

    def as_kwargs(self) -> dict[str, Any]:
        """A fresh, mutable copy of the options for passing as keyword arguments."""
        return dict(self._options)


class OptionSet:
    """The options a builder has accumulated so far."""
    def __init__(self):
        self._options: dict[str, Optional[Any]] = {}

    def __contains__(self, name: str) -> bool:
        return bool(self.get(name))

    def set(self, name: str, value: Any) -> None:
        self._options[name] = Optional.Some(value)

    def get(self, name: str) -> Optional[Any]:
        return self._options.get(name, Optional.Nothing())

    def compile(self, operation: Operation) -> RequestOptions:
        compiled = {}
        for name, keyword in operation.value.items():
            match self.get(name):
                case Optional.Some([]) if name == "sort":
                    continue

                case Optional.Some(value):
                    compiled[keyword] = _convert(value)

        return RequestOptions(operation, compiled)


def _convert(value: Any) -> Any:
    match value:
        case timedelta():
            return int(value.total_seconds() * 1000)

        case list():
            return list(value)

        case _:
            return value
