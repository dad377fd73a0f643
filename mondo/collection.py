"""Collections, and the builders and writes they issue.

Reads and the complex writes go through builders (`find`, `aggregate`, `bulk`, `distinct`, `find_one_and_*`,
`watch`). The plain writes are passed straight to motor. Every operation is sent with the session resolved when it
runs: the `session=` argument if one is given, otherwise the session bound in the current context (see
`mondo.session_context`), otherwise no session.
"""
from typing import Any, Sequence, TYPE_CHECKING

from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from mondo.builders import Aggregate, Bulk, Distinct, FindDelete, FindReplace, FindUpdate, Query, Watcher
from mondo.builders.base import Document
from mondo.capabilities import ServerInfo
from mondo.session_context import SessionScope, resolve_session

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection
    from mondo.database import Database


class Collection:
    def __init__(self, database: "Database", handle: "AsyncIOMotorCollection"):
        self._database = database
        self._handle = handle

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._handle.full_name!r}>"

    @property
    def database(self) -> "Database":
        return self._database

    @property
    def handle(self) -> "AsyncIOMotorCollection":
        return self._handle

    @property
    def name(self) -> str:
        return self._handle.name

    @property
    def server_info(self) -> ServerInfo:
        return self._database.server_info

    def find(self, filter: Document | None = None, *, session: SessionScope | None = None) -> Query:
        return Query(self._handle, filter or {}, session)

    def aggregate(self, pipeline: Sequence[Document], *, session: SessionScope | None = None) -> Aggregate:
        return Aggregate(self._handle, pipeline, session)

    def bulk(self, *, session: SessionScope | None = None) -> Bulk:
        return Bulk(self._handle, session)

    def distinct(
        self, field: str, filter: Document | None = None, *, session: SessionScope | None = None
    ) -> Distinct:
        return Distinct(self._handle, field, filter, session)

    def find_one_and_update(
        self, filter: Document, update: Document, *, session: SessionScope | None = None
    ) -> FindUpdate:
        return FindUpdate(self._handle, filter, update, session)

    def find_one_and_replace(
        self, filter: Document, replacement: Document, *, session: SessionScope | None = None
    ) -> FindReplace:
        return FindReplace(self._handle, filter, replacement, session)

    def find_one_and_delete(self, filter: Document, *, session: SessionScope | None = None) -> FindDelete:
        return FindDelete(self._handle, filter, session)

    def watch(self, pipeline: Sequence[Document] | None = None, *, session: SessionScope | None = None) -> Watcher:
        return Watcher(self._handle, pipeline, session)

    async def insert_one(
        self, document: Document, *, session: SessionScope | None = None, **kwargs: Any
    ) -> InsertOneResult:
        return await self._handle.insert_one(document, session=resolve_session(session), **kwargs)

    async def insert_many(
        self, documents: Sequence[Document], *, session: SessionScope | None = None, **kwargs: Any
    ) -> InsertManyResult:
        return await self._handle.insert_many(documents, session=resolve_session(session), **kwargs)

    async def update_one(
        self, filter: Document, update: Document, *, session: SessionScope | None = None, **kwargs: Any
    ) -> UpdateResult:
        return await self._handle.update_one(filter, update, session=resolve_session(session), **kwargs)

    async def update_many(
        self, filter: Document, update: Document, *, session: SessionScope | None = None, **kwargs: Any
    ) -> UpdateResult:
        return await self._handle.update_many(filter, update, session=resolve_session(session), **kwargs)

    async def replace_one(
        self, filter: Document, replacement: Document, *, session: SessionScope | None = None, **kwargs: Any
    ) -> UpdateResult:
        return await self._handle.replace_one(filter, replacement, session=resolve_session(session), **kwargs)

    async def delete_one(
        self, filter: Document, *, session: SessionScope | None = None, **kwargs: Any
    ) -> DeleteResult:
        return await self._handle.delete_one(filter, session=resolve_session(session), **kwargs)

    async def delete_many(
        self, filter: Document, *, session: SessionScope | None = None, **kwargs: Any
    ) -> DeleteResult:
        return await self._handle.delete_many(filter, session=resolve_session(session), **kwargs)
