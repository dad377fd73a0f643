from typing import Any, Mapping, Self, TYPE_CHECKING

from mondo.builders.options import Operation, OptionSet, RequestOptions
from mondo.builders.sorting import parse_sort
from mondo.errors import ConstructionError
from mondo.session_context import SessionScope, resolve_session

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClientSession


type Document = Mapping[str, Any]


class Builder:
    """Shared plumbing for the request builders.

    A builder is single use: setters accumulate options without doing any I/O, and one terminal call compiles them
    and sends the request. Each setter returns the builder so calls can be chained.
    """
    def __init__(self, target: Any, session: SessionScope | None = None):
        self._target = target
        self._session = session
        self._options = OptionSet()

    def compile(self, operation: Operation) -> RequestOptions:
        return self._options.compile(operation)

    def _set(self, name: str, value: Any) -> Self:
        self._options.set(name, value)
        return self

    def _resolve_session(self) -> "AsyncIOMotorClientSession | None":
        return resolve_session(self._session)

    def _set_sort(self, fields: tuple[str, ...]) -> Self:
        if not fields:
            return self

        return self._set("sort", parse_sort(*fields))


def construction_failed(what: str, error: Exception) -> ConstructionError:
    """Builds the error an iterator captures when the driver refuses to open it."""
    failure = ConstructionError(f"Failed to open {what}: {error}")
    failure.__cause__ = error
    return failure
