"""Exceptions raised by mondo.

Errors coming out of motor are allowed to bubble up unchanged unless mondo has something more useful to say about
them. Lifecycle problems (ended sessions, finished transactions) are `UsageError` subclasses: they describe a bug in
the calling code and are always raised immediately, never wrapped into an `OperationResult`."""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mondo.client import Client


class MondoError(Exception):
    """Base exception for mondo errors."""
    def __init__(self, *args, client: "Client | None" = None):
        super().__init__(*args)

        self.client = client
        if client:
            self.add_note(f" - Using Client: {client!r}")


class ConnectFailed(MondoError):
    """Raised when a client fails to connect or to load the server status."""


class CapabilityError(MondoError):
    """Raised when sessions or transactions are requested from a deployment that doesn't support them."""


class ConstructionError(MondoError):
    """Raised (and captured by iterators) when a cursor or change stream could not be opened."""


class DecodeError(MondoError):
    """Raised when a document cannot be materialized into the requested type."""


class NoDocumentsError(MondoError):
    """Raised when a single document was requested and nothing matched."""


class UsageError(MondoError):
    """Raised when the calling code breaks a builder, iterator, session, or transaction contract."""


class SessionEndedError(UsageError):
    """Raised when a session is used after it has been ended."""


class TransactionStateError(UsageError):
    """Raised when a transaction is committed/rolled back twice or used after it has finished."""


class TransactionError(MondoError):
    """Raised when the server fails to commit or abort a transaction."""


class TransientTransactionError(TransactionError):
    """Raised when a commit or abort fails with an error the server labels as retryable."""
