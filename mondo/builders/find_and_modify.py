"""Builders for the atomic find-and-modify commands.

Each one finds a single document, modifies or removes it, and returns one version of it. Update and replace return
the document as it was before the change unless `return_document(ReturnDocument.AFTER)` is set.
"""
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Mapping, Self, TYPE_CHECKING

from pymongo import ReturnDocument

from mondo.builders.base import Builder, Document
from mondo.builders.options import Operation
from mondo.decoding import Decoder, decode
from mondo.errors import NoDocumentsError
from mondo.results import DeferredResult
from mondo.session_context import SessionScope

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection


class FindAndModify(Builder, ABC):
    operation: Operation

    def __init__(self, collection: "AsyncIOMotorCollection", filter: Document, session: SessionScope | None = None):
        super().__init__(collection, session)
        self._filter = filter

    def collation(self, collation: Mapping[str, Any]) -> Self:
        return self._set("collation", collation)

    def comment(self, comment: Any) -> Self:
        return self._set("comment", comment)

    def hint(self, hint: str | list[tuple[str, int]]) -> Self:
        return self._set("hint", hint)

    def max_time(self, duration: timedelta) -> Self:
        return self._set("max_time", duration)

    def select(self, projection: Document) -> Self:
        return self._set("projection", projection)

    def sort(self, *fields: str) -> Self:
        """Picks which document is modified when several match. Calling it with no fields is a no-op."""
        return self._set_sort(fields)

    @DeferredResult
    async def apply[T](self, into: Decoder[T] | None = None) -> T | Document:
        """Runs the command and decodes the returned document.

        Raises:
            NoDocumentsError: If nothing matched, or an upsert was asked to return the document as it was before.
        """
        options = self.compile(self.operation)
        document = await self._execute(self._resolve_session(), options.as_kwargs())
        if document is None:
            raise NoDocumentsError(f"No documents in {self._target.name} match {self._filter!r}")

        return decode(document, into)

    @abstractmethod
    async def _execute(
        self, session: "AsyncIOMotorClientSession | None", options: dict[str, Any]
    ) -> Document | None:
        ...


class FindDelete(FindAndModify):
    operation = Operation.FIND_ONE_AND_DELETE

    async def _execute(self, session, options):
        return await self._target.find_one_and_delete(self._filter, session=session, **options)


class FindReplace(FindAndModify):
    operation = Operation.FIND_ONE_AND_REPLACE

    def __init__(
        self,
        collection: "AsyncIOMotorCollection",
        filter: Document,
        replacement: Document,
        session: SessionScope | None = None,
    ):
        super().__init__(collection, filter, session)
        self._document = replacement

    def bypass_document_validation(self, bypass: bool) -> Self:
        return self._set("bypass_document_validation", bypass)

    def return_document(self, which: ReturnDocument) -> Self:
        return self._set("return_document", which)

    def upsert(self, upsert: bool) -> Self:
        return self._set("upsert", upsert)

    async def _execute(self, session, options):
        return await self._target.find_one_and_replace(self._filter, self._document, session=session, **options)


class FindUpdate(FindReplace):
    operation = Operation.FIND_ONE_AND_UPDATE

    def __init__(
        self,
        collection: "AsyncIOMotorCollection",
        filter: Document,
        update: Document,
        session: SessionScope | None = None,
    ):
        super().__init__(collection, filter, update, session)

    def array_filters(self, filters: list[Document]) -> Self:
        return self._set("array_filters", filters)

    async def _execute(self, session, options):
        return await self._target.find_one_and_update(self._filter, self._document, session=session, **options)
