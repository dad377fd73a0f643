"""mondo, an async access layer over motor.

mondo sits between an application and motor. It adds three things on top of the driver:

-   **Sessions and transactions with a strict lifecycle**: every session and transaction is started and finished
    exactly once. Transactions route collection operations through their session using a context variable, so the
    session doesn't have to be passed around.
-   **Lazy, sticky-error iterators**: cursors and change streams that failed to open report the failure when they're
    inspected instead of raising from the call that opened them.
-   **Fluent request builders**: chained setters accumulate options that are compiled into the keyword arguments of a
    single motor call, including a compact sort syntax (`"-age"`, `"$textScore:score"`).

Note:
This `__init__.py` file uses a custom `__getattr__` to load symbols lazily, so importing `mondo` doesn't import motor
until a client is actually needed.
"""
import importlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mondo.client import Client
    from mondo.collection import Collection
    from mondo.config import ClientSettings
    from mondo.database import Database
    from mondo.errors import (
        CapabilityError,
        ConnectFailed,
        ConstructionError,
        DecodeError,
        MondoError,
        NoDocumentsError,
        SessionEndedError,
        TransactionError,
        TransactionStateError,
        TransientTransactionError,
        UsageError,
    )
    from mondo.iterators import ChangeEvent, Cursor, OperationType, Stream
    from mondo.results import OperationResult
    from mondo.session_context import active_session, use_session
    from mondo.sessions import Session, Transaction, TransactionState


logging.getLogger(__name__).addHandler(logging.NullHandler())

__lookup = {
    "Client": "mondo.client",
    "ClientSettings": "mondo.config",
    "Database": "mondo.database",
    "Collection": "mondo.collection",
    "Session": "mondo.sessions",
    "Transaction": "mondo.sessions",
    "TransactionState": "mondo.sessions",
    "Cursor": "mondo.iterators",
    "Stream": "mondo.iterators",
    "ChangeEvent": "mondo.iterators",
    "OperationType": "mondo.iterators",
    "OperationResult": "mondo.results",
    "active_session": "mondo.session_context",
    "use_session": "mondo.session_context",
    "MondoError": "mondo.errors",
    "ConnectFailed": "mondo.errors",
    "CapabilityError": "mondo.errors",
    "ConstructionError": "mondo.errors",
    "DecodeError": "mondo.errors",
    "NoDocumentsError": "mondo.errors",
    "UsageError": "mondo.errors",
    "SessionEndedError": "mondo.errors",
    "TransactionStateError": "mondo.errors",
    "TransactionError": "mondo.errors",
    "TransientTransactionError": "mondo.errors",
}

__all__ = list(__lookup.keys())

__modules = set()

for _path in Path(__file__).parent.iterdir():
    if _path.name.startswith("_"):
        continue

    if not _path.is_dir() and _path.suffix != ".py":
        continue

    __modules.add(_path.stem)


def __getattr__(name):
    """Lazily loads the public symbols listed in `__lookup` and any submodule of the package.

    Raises:
        ImportError: If a symbol listed in `__lookup` cannot be imported from its module.
        AttributeError: If the name is neither a known symbol nor a submodule.
    """
    if name in __lookup:
        try:
            module = importlib.import_module(__lookup[name])
        except Exception as e:
            raise ImportError(f"Failed to import {name} from {__lookup[name]}: {e}") from e

        return getattr(module, name)

    if name in __modules:
        return importlib.import_module(f"mondo.{name}")

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
