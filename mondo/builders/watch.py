from datetime import timedelta
from typing import Any, Mapping, Self, Sequence

from bson.timestamp import Timestamp
from pymongo.errors import PyMongoError

from mondo.builders.base import Builder, Document, construction_failed
from mondo.builders.options import Operation
from mondo.iterators import Stream
from mondo.session_context import SessionScope


class Watcher(Builder):
    """Opens a change stream on a client, database, or collection.

    Example:
        ```python
        async with users.watch().full_document("updateLookup").stream() as stream:
            async for _ in stream:
                event = await stream.one(ChangeEvent)
        ```
    """
    def __init__(self, target: Any, pipeline: Sequence[Document] | None = None, session: SessionScope | None = None):
        super().__init__(target, session)
        self._pipeline = list(pipeline or [])

    def batch_size(self, size: int) -> Self:
        return self._set("batch_size", size)

    def collation(self, collation: Mapping[str, Any]) -> Self:
        return self._set("collation", collation)

    def comment(self, comment: Any) -> Self:
        return self._set("comment", comment)

    def full_document(self, full_document: str) -> Self:
        return self._set("full_document", full_document)

    def max_await_time(self, duration: timedelta) -> Self:
        return self._set("max_await_time", duration)

    def resume_after(self, token: Mapping[str, Any]) -> Self:
        return self._set("resume_after", token)

    def start_at_operation_time(self, timestamp: Timestamp) -> Self:
        return self._set("start_at_operation_time", timestamp)

    def start_after(self, token: Mapping[str, Any]) -> Self:
        return self._set("start_after", token)

    def stream(self) -> Stream:
        """Opens the change stream. The caller owns it and must close it."""
        options = self.compile(Operation.WATCH)
        session = self._resolve_session()
        try:
            handle = self._target.watch(self._pipeline, session=session, **options.as_kwargs())
        except (PyMongoError, TypeError, ValueError) as e:
            return Stream.failed(construction_failed("change stream", e))

        return Stream.opened(handle)
