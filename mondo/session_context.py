"""
Context management for the active session

Operations issued inside a transaction need to be sent with that transaction's session. Rather than threading the
session through every call, mondo keeps the active session in a context variable. Collections read it whenever no
explicit `session=` argument is given, so the routing follows the current task and doesn't leak across concurrent
tasks.

Entering `async with transaction:` or `with session.bind():` sets the variable; leaving restores whatever was active
before.
"""
from contextvars import ContextVar
from typing import Protocol, runtime_checkable, TYPE_CHECKING

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClientSession


@runtime_checkable
class SessionScope(Protocol):
    """Anything that can route an operation to a motor session: a `Session` or a `Transaction`."""
    @property
    def handle(self) -> "AsyncIOMotorClientSession":
        ...


active_session: ContextVar[SessionScope | None] = ContextVar("active_session", default=None)
"""The session scope that collection operations in the current context are routed to.

Set by `UseSession` (returned from `Session.bind()` and used by `Transaction.__aenter__`). `None` means operations run
without a session.
"""


class UseSession:
    """A context manager that makes a session scope the active one.

    Attributes:
        scope (SessionScope): The session or transaction that becomes active inside the `with` block.
    """
    def __init__(self, scope: SessionScope):
        self.scope = scope
        self._previous_context_token = None

    def __enter__(self) -> SessionScope:
        self._previous_context_token = active_session.set(self.scope)
        return self.scope

    def __exit__(self, *_):
        active_session.reset(self._previous_context_token)


def use_session(scope: SessionScope) -> UseSession:
    """Creates a `UseSession` context manager for the given session scope.

    Example:
        ```python
        with use_session(tx):
            await users.insert_one({"_id": uid})  # sent with tx's session
        ```
    """
    return UseSession(scope)


def resolve_session(explicit: SessionScope | None = None) -> "AsyncIOMotorClientSession | None":
    """Finds the motor session an operation should be sent with.

    An explicitly passed scope wins over the active one. Reading `handle` validates the scope, so an ended session or
    a finished transaction raises before anything reaches the server.

    Raises:
        SessionEndedError: If the scope's session has ended.
        TransactionStateError: If the scope is a transaction that is no longer active.
    """
    scope = explicit if explicit is not None else active_session.get()
    if scope is None:
        return None

    return scope.handle
