from typing import Any, Mapping, TYPE_CHECKING

from tramp.results import Result

from mondo.decoding import Decoder, decode_all
from mondo.iterators.base import StickyIterator

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCommandCursor, AsyncIOMotorCursor


type CursorHandle = "AsyncIOMotorCursor | AsyncIOMotorCommandCursor"


class Cursor(StickyIterator[CursorHandle]):
    """A lazy iterator over the results of a query or an aggregation.

    Query cursors have no notion of a partially available batch, so `try_next()` waits just like `next()` does.
    """
    @property
    def id(self) -> int:
        """The server side cursor id, 0 once exhausted or when the cursor never opened."""
        match self._handle:
            case Result.Value(handle):
                return handle.cursor_id or 0

            case _:
                return 0

    async def all[T](self, into: Decoder[T] | None = None) -> list[T | Mapping[str, Any]]:
        """Decodes every remaining document and closes the cursor.

        Raises:
            The captured error, if the cursor failed.
            DecodeError: If a document can't be decoded into `into`.
        """
        if error := self.error:
            raise error

        handle = self._handle.value
        try:
            documents = await handle.to_list(None)
        finally:
            await handle.close()

        self._current = None
        return decode_all(documents, into)

    async def _fetch_next(self, handle: CursorHandle) -> Mapping[str, Any]:
        return await handle.next()

    async def _fetch_available(self, handle: CursorHandle) -> Mapping[str, Any]:
        return await handle.next()
