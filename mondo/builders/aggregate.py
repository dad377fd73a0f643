from datetime import timedelta
from typing import Any, Mapping, Self, Sequence, TYPE_CHECKING

from pymongo.errors import PyMongoError

from mondo.builders.base import Builder, Document, construction_failed
from mondo.builders.options import Operation
from mondo.decoding import Decoder
from mondo.errors import NoDocumentsError
from mondo.iterators import Cursor
from mondo.results import DeferredResult
from mondo.session_context import SessionScope

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection


class Aggregate(Builder):
    """An aggregation pipeline run against a collection."""
    def __init__(
        self, collection: "AsyncIOMotorCollection", pipeline: Sequence[Document], session: SessionScope | None = None
    ):
        super().__init__(collection, session)
        self._pipeline = list(pipeline)

    def allow_disk_use(self, allow: bool) -> Self:
        return self._set("allow_disk_use", allow)

    def batch_size(self, size: int) -> Self:
        return self._set("batch_size", size)

    def bypass_document_validation(self, bypass: bool) -> Self:
        return self._set("bypass_document_validation", bypass)

    def collation(self, collation: Mapping[str, Any]) -> Self:
        return self._set("collation", collation)

    def comment(self, comment: Any) -> Self:
        return self._set("comment", comment)

    def hint(self, hint: str | list[tuple[str, int]]) -> Self:
        return self._set("hint", hint)

    def max_time(self, duration: timedelta) -> Self:
        return self._set("max_time", duration)

    def max_await_time(self, duration: timedelta) -> Self:
        return self._set("max_await_time", duration)

    @DeferredResult
    async def one[T](self, into: Decoder[T] | None = None) -> T | Document:
        """Decodes the first document the pipeline produces.

        Raises:
            NoDocumentsError: If the pipeline produces nothing.
        """
        async with self.cursor() as cursor:
            if not await cursor.next():
                if cursor.error:
                    raise cursor.error

                raise NoDocumentsError("The aggregation pipeline produced no documents")

            return await cursor.one(into)

    @DeferredResult
    async def all[T](self, into: Decoder[T] | None = None) -> list[T | Document]:
        async with self.cursor() as cursor:
            return await cursor.all(into)

    def cursor(self) -> Cursor:
        options = self.compile(Operation.AGGREGATE)
        session = self._resolve_session()
        try:
            handle = self._target.aggregate(self._pipeline, session=session, **options.as_kwargs())
        except (PyMongoError, TypeError, ValueError) as e:
            return Cursor.failed(construction_failed("aggregation cursor", e))

        return Cursor.opened(handle)
