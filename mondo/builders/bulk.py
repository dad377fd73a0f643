from typing import Any, Self, TYPE_CHECKING

from pymongo import DeleteMany, DeleteOne, InsertOne, ReplaceOne, UpdateMany, UpdateOne
from pymongo.results import BulkWriteResult

from mondo.builders.base import Builder, Document
from mondo.builders.options import Operation
from mondo.results import DeferredResult
from mondo.session_context import SessionScope

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection

    type WriteModel = InsertOne | UpdateOne | UpdateMany | ReplaceOne | DeleteOne | DeleteMany


class Bulk(Builder):
    """A batch of write operations sent to the server in a single `bulk_write`.

    Example:
        ```python
        result = await (
            users.bulk()
            .ordered(False)
            .insert_one_nx({"_id": uid}, {"_id": uid, "age": 10})
            .update_id(other, {"$inc": {"age": 1}})
            .delete_many({"age": {"$gt": 99}})
            .apply().or_raise()
        )
        ```
    """
    def __init__(self, collection: "AsyncIOMotorCollection", session: SessionScope | None = None):
        super().__init__(collection, session)
        self._models: list["WriteModel"] = []

    @property
    def models(self) -> list["WriteModel"]:
        return list(self._models)

    def ordered(self, ordered: bool) -> Self:
        return self._set("ordered", ordered)

    def bypass_document_validation(self, bypass: bool) -> Self:
        return self._set("bypass_document_validation", bypass)

    def add_model(self, model: "WriteModel | None") -> Self:
        if model is not None:
            self._models.append(model)

        return self

    def insert_one(self, document: Document) -> Self:
        return self.add_model(InsertOne(document))

    def insert_one_nx(self, filter: Document, document: Document) -> Self:
        """Inserts `document` only if nothing matches `filter`."""
        return self.add_model(UpdateOne(filter, {"$setOnInsert": document}, upsert=True))

    def repsert_one(self, filter: Document, replacement: Document) -> Self:
        """Replaces the first match, or inserts `replacement` if nothing matches."""
        return self.add_model(ReplaceOne(filter, replacement, upsert=True))

    def replace_one(self, filter: Document, replacement: Document) -> Self:
        return self.add_model(ReplaceOne(filter, replacement))

    def upsert_one(self, filter: Document, update: Document) -> Self:
        return self.add_model(UpdateOne(filter, update, upsert=True))

    def upsert_id(self, id: Any, update: Document) -> Self:
        return self.upsert_one({"_id": id}, update)

    def upsert(self, filter: Document, update: Document) -> Self:
        return self.add_model(UpdateMany(filter, update, upsert=True))

    def update_one(self, filter: Document, update: Document) -> Self:
        return self.add_model(UpdateOne(filter, update))

    def update_id(self, id: Any, update: Document) -> Self:
        return self.update_one({"_id": id}, update)

    def update_many(self, filter: Document, update: Document) -> Self:
        return self.add_model(UpdateMany(filter, update))

    def delete_one(self, filter: Document) -> Self:
        return self.add_model(DeleteOne(filter))

    def delete_id(self, id: Any) -> Self:
        return self.delete_one({"_id": id})

    def delete_many(self, filter: Document) -> Self:
        return self.add_model(DeleteMany(filter))

    @DeferredResult
    async def apply(self) -> BulkWriteResult:
        options = self.compile(Operation.BULK_WRITE)
        return await self._target.bulk_write(self._models, session=self._resolve_session(), **options.as_kwargs())
