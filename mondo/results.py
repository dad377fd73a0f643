"""Result types for builder terminal operations.

Every terminal call on a builder (`one`, `all`, `count`, `apply`) is deferred: calling it captures the arguments and
returns a `DeferredResult`. Nothing touches the server until that object is awaited or one of its `or_*` methods is
used. This lets the caller pick how failures are delivered:

-   `await builder.one()` resolves to an `OperationResult`, either `OperationResult.Success(value)` or
    `OperationResult.Failure(exception)`. Errors are values and can be matched on.
-   `await builder.one().or_raise()` returns the value or raises.
-   `await builder.one().or_use(default)` returns the value or the default.

`UsageError` is the exception to the rule. A usage error means the calling code is wrong, so it always raises,
whichever delivery was chosen.

Example:
    ```python
    match await users.find({"age": {"$gt": 18}}).sort("-age").one(User):
        case OperationResult.Success(user):
            print(user.name)
        case OperationResult.Failure(NoDocumentsError()):
            print("Nobody is old enough")
        case OperationResult.Failure(exception):
            print(f"Query failed: {exception}")
    ```

The write result classes are pymongo's own and are re-exported here so callers have one place to import them from.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Self, Type

from pymongo.results import (
    BulkWriteResult,
    DeleteResult,
    InsertManyResult,
    InsertOneResult,
    UpdateResult,
)

from mondo.errors import UsageError


__all__ = [
    "OperationResult",
    "Success",
    "Failure",
    "NoResultException",
    "DeferredResult",
    "BulkWriteResult",
    "DeleteResult",
    "InsertManyResult",
    "InsertOneResult",
    "UpdateResult",
]


class NoResultException(Exception):
    """Raised when reading `.result` from a `Failure` or `.exception` from a `Success`."""


class OperationResult[T](ABC):
    """The outcome of a terminal builder call.

    Supports `match/case` through `OperationResult.Success(value)` and `OperationResult.Failure(exception)`.
    """
    __match_args__ = ("result", "exception")

    Success: "Type[Success[T]]"
    Failure: "Type[Failure[T]]"

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.__name__ in OperationResult.__annotations__:
            setattr(OperationResult, cls.__name__, cls)

    @property
    @abstractmethod
    def result(self) -> T:
        """The value produced by the operation.

        Raises:
            NoResultException: If the operation failed.
        """
        ...

    @property
    @abstractmethod
    def exception(self) -> Exception:
        """The exception the operation failed with.

        Raises:
            NoResultException: If the operation succeeded.
        """
        ...

    @abstractmethod
    def result_or[D](self, default: D) -> T | D:
        ...

    @abstractmethod
    def exception_or[D](self, default: D) -> Exception | D:
        ...


class Success[T](OperationResult[T]):
    __match_args__ = ("result",)

    def __init__(self, result: T):
        self._result = result

    def __repr__(self) -> str:
        return f"{OperationResult.__name__}.{type(self).__name__}({self._result!r})"

    @property
    def result(self) -> T:
        return self._result

    @property
    def exception(self) -> Exception:
        raise NoResultException("OperationResult.Success does not wrap an exception")

    def result_or[D](self, default: D) -> T:
        return self._result

    def exception_or[D](self, default: D) -> D:
        return default


class Failure[T](OperationResult[T]):
    __match_args__ = ("exception",)

    def __init__(self, exception: Exception):
        self._exception = exception

    def __repr__(self) -> str:
        return f"{OperationResult.__name__}.{type(self).__name__}({self._exception!r})"

    @property
    def result(self) -> T:
        raise NoResultException("OperationResult.Failure does not wrap a result, it only contains an exception")

    @property
    def exception(self) -> Exception:
        return self._exception

    def result_or[D](self, default: D) -> D:
        return default

    def exception_or[D](self, default: D) -> Exception:
        return self._exception


class DeferredResult[T, **P]:
    """A descriptor that turns an async builder method into a deferred, awaitable terminal call.

    Accessing the decorated method on a builder returns a fresh `DeferredResult` bound to that builder. Calling it
    captures the arguments and returns the same object, which can then be awaited for an `OperationResult`, or
    resolved with `or_raise()`/`or_use()`.
    """
    def __init__(self, func: Callable[P, Awaitable[T]]):
        self._func = func
        self._args: tuple[Any, ...] = ()
        self._kwargs: dict[str, Any] = {}

    def __get__(self, instance, owner):
        return type(self)(self._func.__get__(instance, owner))

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Self:
        self._args = args
        self._kwargs = kwargs
        return self

    def __await__(self):
        return self._resolve().__await__()

    async def _resolve(self) -> OperationResult[T]:
        try:
            result = await self.or_raise()
        except UsageError:
            raise
        except Exception as e:
            return Failure(e)
        else:
            return Success(result)

    async def or_use[D](self, default: D) -> T | D:
        """Runs the operation, returning `default` if it fails with anything other than a `UsageError`."""
        try:
            return await self.or_raise()
        except UsageError:
            raise
        except Exception:
            return default

    async def or_raise(self) -> T:
        """Runs the operation and lets any exception propagate."""
        return await self._func(*self._args, **self._kwargs)
