import logging
from typing import Any, Awaitable, Callable, TYPE_CHECKING

from pymongo.errors import PyMongoError

from mondo.errors import SessionEndedError, TransactionStateError
from mondo.session_context import UseSession, use_session
from mondo.sessions.transaction import Transaction, TransactionState, transaction_error

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClientSession


logger = logging.getLogger(__name__)


class Session:
    """A logical session with the server, wrapping a motor client session.

    Sessions are created by `Client.start_session()` and belong to the caller, who must end them. A session runs at
    most one transaction at a time, and can run any number of them one after another. Once ended, every use of the
    session raises `SessionEndedError`.

    Example:
        ```python
        async with await client.start_session() as session:
            tx = await session.begin()
            with session.bind():
                await users.insert_one({"_id": uid})
            await tx.commit()
        ```
    """
    def __init__(self, handle: "AsyncIOMotorClientSession"):
        self._handle = handle
        self._ended = False
        self._transaction: Transaction | None = None

    def __repr__(self) -> str:
        state = "ended" if self._ended else "open"
        return f"<{type(self).__name__} {state}>"

    @property
    def handle(self) -> "AsyncIOMotorClientSession":
        if self._ended:
            raise SessionEndedError("The session has already ended")

        return self._handle

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def transaction(self) -> Transaction | None:
        if self._transaction and self._transaction.is_active:
            return self._transaction

        return None

    @property
    def in_transaction(self) -> bool:
        return not self._ended and self._handle.in_transaction

    def start_transaction(self, **options: Any) -> None:
        """Starts a transaction that is finished with `commit_transaction()` or `abort_transaction()`.

        Accepts motor's transaction options: `read_concern`, `write_concern`, `read_preference` and
        `max_commit_time_ms`.

        Raises:
            SessionEndedError: If the session has ended.
            TransactionStateError: If a transaction is already running on the session.
        """
        self._begin(False, **options)

    async def commit_transaction(self) -> None:
        """Commits the running transaction.

        Raises:
            SessionEndedError: If the session has ended.
            TransactionStateError: If no transaction is running, including when it was already committed or aborted.
            TransactionError: If the server fails to commit.
        """
        handle = self._transaction_handle("commit")
        self._settle(TransactionState.COMMITTED)
        try:
            await handle.commit_transaction()
        except PyMongoError as e:
            raise transaction_error("commit", e) from e

        logger.debug("Committed transaction on %r", self)

    async def abort_transaction(self) -> None:
        handle = self._transaction_handle("abort")
        self._settle(TransactionState.ABORTED)
        try:
            await handle.abort_transaction()
        except PyMongoError as e:
            raise transaction_error("abort", e) from e

        logger.debug("Aborted transaction on %r", self)

    async def begin(self, **options: Any) -> Transaction:
        """Starts a transaction that the caller finishes with `commit()` or `rollback()`.

        The session stays open after the transaction finishes.
        """
        return self._begin(False, **options)

    def _begin(self, automatic: bool, **options: Any) -> Transaction:
        handle = self.handle
        if self.transaction is not None or handle.in_transaction:
            raise TransactionStateError("The session already has an active transaction")

        handle.start_transaction(**options)
        self._transaction = Transaction(self, automatic)
        logger.debug("Started transaction on %r", self)
        return self._transaction

    def _transaction_handle(self, action: str) -> "AsyncIOMotorClientSession":
        handle = self.handle
        if self.transaction is None:
            raise TransactionStateError(f"Cannot {action}, there is no active transaction on the session")

        return handle

    async def with_transaction[T](self, fn: Callable[["Session"], Awaitable[T]], **options: Any) -> T:
        """Runs `fn` inside a transaction, committing when it returns and aborting when it raises.

        The transaction is driven by motor, which retries `fn` and the commit on errors the server labels as
        transient. The session is bound while `fn` runs, so collection operations are routed into the transaction.

        Raises:
            SessionEndedError: If the session has ended.
            TransactionStateError: If a transaction is already running on the session.
        """
        handle = self.handle
        if self.transaction is not None or handle.in_transaction:
            raise TransactionStateError("The session already has an active transaction")

        async def callback(_):
            with self.bind():
                return await fn(self)

        return await handle.with_transaction(callback, **options)

    async def end_session(self) -> None:
        """Ends the session, aborting any transaction still running on it.

        Raises:
            SessionEndedError: If the session was already ended.
        """
        handle = self.handle
        self._ended = True
        self._settle(TransactionState.ABORTED)
        await handle.end_session()
        logger.debug("Ended %r", self)

    def bind(self) -> UseSession:
        """Routes collection operations in the `with` block through this session."""
        return use_session(self)

    def _settle(self, state: TransactionState):
        if self._transaction is not None:
            if self._transaction.is_active:
                self._transaction._settle(state)

            self._transaction = None

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, *_):
        if not self._ended:
            await self.end_session()
