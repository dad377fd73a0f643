from datetime import timedelta
from typing import Any, Mapping, Self, TYPE_CHECKING

from pymongo.errors import PyMongoError

from mondo.builders.base import Builder, Document, construction_failed
from mondo.builders.options import Operation
from mondo.decoding import Decoder, decode
from mondo.errors import NoDocumentsError
from mondo.iterators import Cursor
from mondo.results import DeferredResult
from mondo.session_context import SessionScope

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection


class Query(Builder):
    """A find request against a collection.

    Example:
        ```python
        adults = await users.find({"age": {"$gte": 18}}).sort("-age", "name").limit(10).all().or_raise()
        ```
    """
    def __init__(self, collection: "AsyncIOMotorCollection", filter: Document, session: SessionScope | None = None):
        super().__init__(collection, session)
        self._filter = filter

    def allow_disk_use(self, allow: bool) -> Self:
        return self._set("allow_disk_use", allow)

    def allow_partial_results(self, allow: bool) -> Self:
        return self._set("allow_partial_results", allow)

    def batch_size(self, size: int) -> Self:
        return self._set("batch_size", size)

    def collation(self, collation: Mapping[str, Any]) -> Self:
        return self._set("collation", collation)

    def comment(self, comment: Any) -> Self:
        return self._set("comment", comment)

    def hint(self, hint: str | list[tuple[str, int]]) -> Self:
        return self._set("hint", hint)

    def limit(self, limit: int) -> Self:
        return self._set("limit", limit)

    def max(self, spec: list[tuple[str, Any]]) -> Self:
        return self._set("max", spec)

    def max_await_time(self, duration: timedelta) -> Self:
        return self._set("max_await_time", duration)

    def max_time(self, duration: timedelta) -> Self:
        return self._set("max_time", duration)

    def min(self, spec: list[tuple[str, Any]]) -> Self:
        return self._set("min", spec)

    def no_cursor_timeout(self, enabled: bool) -> Self:
        return self._set("no_cursor_timeout", enabled)

    def return_key(self, enabled: bool) -> Self:
        return self._set("return_key", enabled)

    def select(self, projection: Document) -> Self:
        return self._set("projection", projection)

    def show_record_id(self, enabled: bool) -> Self:
        return self._set("show_record_id", enabled)

    def skip(self, skip: int) -> Self:
        return self._set("skip", skip)

    def sort(self, *fields: str) -> Self:
        """Sets the sort order, replacing any earlier one. Calling it with no fields leaves the order unchanged."""
        return self._set_sort(fields)

    @DeferredResult
    async def one[T](self, into: Decoder[T] | None = None) -> T | Document:
        """Finds the first matching document.

        Raises:
            NoDocumentsError: If nothing matches the filter.
        """
        options = self.compile(Operation.FIND_ONE)
        document = await self._target.find_one(self._filter, session=self._resolve_session(), **options.as_kwargs())
        if document is None:
            raise NoDocumentsError(f"No documents in {self._target.name} match {self._filter!r}")

        return decode(document, into)

    @DeferredResult
    async def all[T](self, into: Decoder[T] | None = None) -> list[T | Document]:
        """Opens a cursor, reads every matching document, and closes the cursor."""
        async with self.cursor() as cursor:
            return await cursor.all(into)

    @DeferredResult
    async def count(self) -> int:
        options = self.compile(Operation.COUNT)
        return await self._target.count_documents(
            self._filter, session=self._resolve_session(), **options.as_kwargs()
        )

    def cursor(self) -> Cursor:
        """Opens a cursor over the matching documents. The caller owns it and must close it.

        A cursor the driver refuses to open is returned in its error state rather than raising.
        """
        options = self.compile(Operation.FIND).as_kwargs()
        max_await_time_ms = options.pop("max_await_time_ms", None)
        session = self._resolve_session()
        try:
            handle = self._target.find(self._filter, session=session, **options)
            if max_await_time_ms is not None:
                handle = handle.max_await_time_ms(max_await_time_ms)

        except (PyMongoError, TypeError, ValueError) as e:
            return Cursor.failed(construction_failed("cursor", e))

        return Cursor.opened(handle)
