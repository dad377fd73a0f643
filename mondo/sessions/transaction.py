import logging
from enum import Enum, auto
from typing import TYPE_CHECKING

from pymongo.errors import PyMongoError

from mondo.errors import TransactionError, TransactionStateError, TransientTransactionError
from mondo.session_context import UseSession

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClientSession
    from mondo.sessions.session import Session


logger = logging.getLogger(__name__)

RETRYABLE_LABELS = ("TransientTransactionError", "UnknownTransactionCommitResult")


class TransactionState(Enum):
    ACTIVE = auto()
    COMMITTED = auto()
    ABORTED = auto()


class Transaction:
    """A transaction running on a session.

    A transaction is finished by exactly one call to `commit()` or `rollback()`. Finishing it a second time raises
    `TransactionStateError`. Automatic transactions (`Client.begin()`) own their session and end it once they finish,
    whatever the outcome of the commit or rollback. A failure to end the session is logged and never replaces the
    outcome of the commit or rollback. Transactions begun on a caller held session (`Session.begin()`) leave the
    session open.

    Used as an async context manager, the transaction routes every collection operation in the block through its
    session, then commits if the block completes or rolls back if it raises:

        ```python
        async with await client.begin() as tx:
            await users.insert_one({"_id": uid1})
            await users.insert_one({"_id": uid2})
        ```
    """
    def __init__(self, session: "Session", automatic: bool = False):
        self._session = session
        self._automatic = automatic
        self._state = TransactionState.ACTIVE
        self._binding: UseSession | None = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._state.name} automatic={self._automatic}>"

    @property
    def session(self) -> "Session":
        return self._session

    @property
    def automatic(self) -> bool:
        return self._automatic

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is TransactionState.ACTIVE

    @property
    def handle(self) -> "AsyncIOMotorClientSession":
        """The motor session to send operations in this transaction with.

        Raises:
            TransactionStateError: If the transaction has been committed or rolled back.
            SessionEndedError: If the owning session has ended.
        """
        self._ensure_active("route an operation through")
        return self._session.handle

    async def commit(self):
        """Commits the transaction.

        Raises:
            TransactionStateError: If the transaction already finished.
            TransactionError: If the server fails to commit.
        """
        self._ensure_active("commit")
        try:
            await self._session.commit_transaction()
        finally:
            await self._release()

    async def rollback(self):
        """Aborts the transaction, discarding every write made in it.

        Raises:
            TransactionStateError: If the transaction already finished.
            TransactionError: If the server fails to abort.
        """
        self._ensure_active("roll back")
        try:
            await self._session.abort_transaction()
        finally:
            await self._release()

    abort = rollback

    def _settle(self, state: TransactionState):
        self._state = state

    def _ensure_active(self, action: str):
        if not self.is_active:
            raise TransactionStateError(f"Cannot {action} a transaction that was already {self._state.name.lower()}")

    async def _release(self):
        if not self._automatic or self._session.ended:
            return

        try:
            await self._session.end_session()
        except PyMongoError:
            logger.warning("Failed to end %r after its transaction finished", self._session, exc_info=True)

    async def __aenter__(self) -> "Transaction":
        self._binding = UseSession(self)
        self._binding.__enter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        try:
            self._binding.__exit__(exc_type, exc_val, exc_tb)
        finally:
            self._binding = None

        if not self.is_active:
            return

        if exc_type is None:
            await self.commit()
        else:
            await self.rollback()


def transaction_error(action: str, error: PyMongoError) -> TransactionError:
    """Wraps a driver error raised while finishing a transaction."""
    error_type = TransactionError
    if any(error.has_error_label(label) for label in RETRYABLE_LABELS):
        error_type = TransientTransactionError

    return error_type(f"Failed to {action} transaction: {error}")
