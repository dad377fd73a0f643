from collections.abc import MutableSequence, MutableSet
from datetime import timedelta
from typing import Any, Mapping, Self, TYPE_CHECKING

from mondo.builders.base import Builder, Document
from mondo.builders.options import Operation
from mondo.errors import UsageError
from mondo.results import DeferredResult
from mondo.session_context import SessionScope

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection


type Container = MutableSequence[Any] | MutableSet[Any]


class Distinct(Builder):
    """Finds the distinct values of one field across the documents matching a filter."""
    def __init__(
        self,
        collection: "AsyncIOMotorCollection",
        field: str,
        filter: Document | None = None,
        session: SessionScope | None = None,
    ):
        super().__init__(collection, session)
        self._field = field
        self._filter = filter or {}

    def collation(self, collation: Mapping[str, Any]) -> Self:
        return self._set("collation", collation)

    def comment(self, comment: Any) -> Self:
        return self._set("comment", comment)

    def max_time(self, duration: timedelta) -> Self:
        return self._set("max_time", duration)

    @DeferredResult
    async def apply[C: Container](self, into: C | None = None) -> C | list[Any]:
        """Fetches the distinct values.

        When `into` is given its contents are replaced by the values and it is returned, otherwise a new list is
        returned.

        Raises:
            UsageError: If `into` is not a mutable sequence or a mutable set.
        """
        if into is not None and not isinstance(into, (MutableSequence, MutableSet)):
            raise UsageError(
                f"Distinct values can only be stored in a mutable sequence or set, not {type(into).__name__}"
            )

        options = self.compile(Operation.DISTINCT)
        values = await self._target.distinct(
            self._field, self._filter, session=self._resolve_session(), **options.as_kwargs()
        )
        if into is None:
            return values

        into.clear()
        match into:
            case MutableSequence():
                into.extend(values)

            case MutableSet():
                for value in values:
                    into.add(value)

        return into
