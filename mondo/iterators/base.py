"""The sticky-error iterator shared by cursors and change streams.

Opening a cursor or a change stream can fail. Instead of raising from the builder call that opened it, the failure is
captured and the iterator starts out in an error state. The stored handle is a `Result`: either
`Result.Value(handle)` or `Result.Error(exception)`, and every method checks it before touching the handle.

In the error state:
-   `next()` and `try_next()` return `False` without blocking.
-   `one()` and `all()` raise the captured error.
-   `close()` returns the captured error.
-   `error` is the captured error.

This means a caller can always write

    ```python
    async with collection.find(query).cursor() as cursor:
        async for document in cursor:
            ...

    if cursor.error:
        ...
    ```

without special casing a cursor that never opened. Errors raised by the driver while iterating a live handle are
captured the same way, as are BSON errors from documents the driver can't decode, so iteration itself never raises.
"""
from abc import ABC, abstractmethod
from typing import Any, Mapping

from bson.errors import BSONError
from pymongo.errors import PyMongoError
from tramp.results import Result

from mondo.decoding import Decoder, decode
from mondo.errors import UsageError


class StickyIterator[H](ABC):
    def __init__(self, handle: Result[H]):
        self._handle = handle
        self._current: Mapping[str, Any] | None = None
        self._iteration_error: Exception | None = None

    @classmethod
    def opened(cls, handle: H):
        return cls(Result.Value(handle))

    @classmethod
    def failed(cls, error: Exception):
        return cls(Result.Error(error))

    @property
    def error(self) -> Exception | None:
        """The construction error, or the first error raised while iterating."""
        match self._handle:
            case Result.Error(error):
                return error

            case _:
                return self._iteration_error

    @property
    def current(self) -> Mapping[str, Any] | None:
        return self._current

    @property
    def alive(self) -> bool:
        match self._handle:
            case Result.Value(handle) if self._iteration_error is None:
                return handle.alive

            case _:
                return False

    async def next(self) -> bool:
        """Advances to the next document, waiting for one if necessary.

        Returns `False` once there are no more documents, the iterator failed to open, or the driver raised an error.
        """
        match self._handle:
            case Result.Value(handle) if self._iteration_error is None:
                return await self._advance(self._fetch_next(handle))

            case _:
                return False

    async def try_next(self) -> bool:
        """Advances to the next document only if one is available without waiting on the server."""
        match self._handle:
            case Result.Value(handle) if self._iteration_error is None:
                return await self._advance(self._fetch_available(handle))

            case _:
                return False

    async def one[T](self, into: Decoder[T] | None = None) -> T | Mapping[str, Any]:
        """Decodes the current document.

        Raises:
            The captured error, if the iterator failed.
            UsageError: If `next()` hasn't produced a document yet.
            DecodeError: If the document can't be decoded into `into`.
        """
        if error := self.error:
            raise error

        if self._current is None:
            raise UsageError("There is no current document, call next() before one()")

        return decode(self._current, into)

    async def close(self) -> Exception | None:
        """Closes the underlying handle.

        Returns the captured error if there is one. The error has already ended the iterator, so nothing is closed in
        that case.
        """
        match self._handle:
            case Result.Error(error):
                return error

            case Result.Value(handle):
                await handle.close()
                return self._iteration_error

    async def _advance(self, fetch) -> bool:
        try:
            document = await fetch
        except StopAsyncIteration:
            self._current = None
            return False
        except (PyMongoError, BSONError) as e:
            self._current = None
            self._iteration_error = e
            return False

        self._current = document
        return document is not None

    @abstractmethod
    async def _fetch_next(self, handle: H) -> Mapping[str, Any]:
        ...

    @abstractmethod
    async def _fetch_available(self, handle: H) -> Mapping[str, Any] | None:
        ...

    def __aiter__(self):
        return self

    async def __anext__(self) -> Mapping[str, Any]:
        if await self.next():
            return self._current

        raise StopAsyncIteration

    async def __aenter__(self):
        return self

    async def __aexit__(self, *_):
        await self.close()
