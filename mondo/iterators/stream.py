from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Mapping, TYPE_CHECKING

from tramp.results import Result

from mondo.iterators.base import StickyIterator

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorChangeStream


class OperationType(StrEnum):
    INSERT = "insert"
    DELETE = "delete"
    REPLACE = "replace"
    UPDATE = "update"
    INVALIDATE = "invalidate"
    DROP = "drop"
    RENAME = "rename"
    DROP_DATABASE = "dropDatabase"


@dataclass(frozen=True)
class Namespace:
    database: str
    collection: str | None = None


@dataclass
class ChangeEvent:
    """A decoded change stream event.

    Pass `ChangeEvent` (or a subclass that decodes `full_document` further) to `Stream.one()`:

        ```python
        async for _ in stream:
            event = await stream.one(ChangeEvent)
            if event.operation_type is OperationType.INSERT:
                print(event.full_document)
        ```
    """
    id: Mapping[str, Any]
    operation_type: OperationType
    cluster_time: Any = None
    namespace: Namespace | None = None
    document_key: Mapping[str, Any] | None = None
    full_document: Mapping[str, Any] | None = None
    update_description: Mapping[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    _known_fields = frozenset(
        {"_id", "operationType", "clusterTime", "ns", "documentKey", "fullDocument", "updateDescription"}
    )

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "ChangeEvent":
        namespace = None
        if ns := document.get("ns"):
            namespace = Namespace(ns["db"], ns.get("coll"))

        return cls(
            id=document["_id"],
            operation_type=OperationType(document["operationType"]),
            cluster_time=document.get("clusterTime"),
            namespace=namespace,
            document_key=document.get("documentKey"),
            full_document=document.get("fullDocument"),
            update_description=document.get("updateDescription"),
            extra={key: value for key, value in document.items() if key not in cls._known_fields},
        )


class Stream(StickyIterator["AsyncIOMotorChangeStream"]):
    """A lazy iterator over a live feed of change events."""
    @property
    def resume_token(self) -> Mapping[str, Any] | None:
        match self._handle:
            case Result.Value(handle):
                return handle.resume_token

            case _:
                return None

    async def _fetch_next(self, handle: "AsyncIOMotorChangeStream") -> Mapping[str, Any]:
        return await handle.next()

    async def _fetch_available(self, handle: "AsyncIOMotorChangeStream") -> Mapping[str, Any] | None:
        return await handle.try_next()
