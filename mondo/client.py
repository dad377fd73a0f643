"""The entry point to mondo.

A `Client` wraps a motor client together with what was learned about the server when connecting. It hands out
databases, starts sessions, and provides the one-call transaction helpers.

Example:
    ```python
    from mondo import Client, ClientSettings

    async with await Client.connect(ClientSettings.from_uri("mongodb://localhost/?replicaSet=rs0")) as client:
        users = client["app"]["users"]

        async with await client.begin() as tx:
            await users.insert_one({"_id": "uid1", "age": 10})
            await users.insert_one({"_id": "uid2", "age": 11})
    ```
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from mondo.builders import Watcher
from mondo.capabilities import ServerInfo, server_status
from mondo.config import ClientSettings
from mondo.database import Database
from mondo.errors import CapabilityError, ConnectFailed
from mondo.session_context import SessionScope
from mondo.sessions import Session, Transaction


logger = logging.getLogger(__name__)


class Client:
    def __init__(self, handle: AsyncIOMotorClient, server_info: ServerInfo):
        self._handle = handle
        self._server_info = server_info

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._server_info.topology} v{self._server_info.version}>"

    @classmethod
    async def connect(cls, settings: ClientSettings | None = None) -> "Client":
        """Connects to the server and checks what it supports.

        The server is pinged (bounded by `settings.connect_timeout`) and its status loaded once. Whether sessions and
        transactions are allowed is decided here and never rechecked.

        Raises:
            ConnectFailed: If the client can't be created, the ping fails, or the server status can't be loaded.
        """
        _settings = settings or ClientSettings()
        try:
            handle = AsyncIOMotorClient(**_settings.client_kwargs())
        except (PyMongoError, TypeError, ValueError) as error:
            raise ConnectFailed(f"Failed to initialize MongoDB client: {error}") from error

        try:
            await asyncio.wait_for(handle.admin.command("ping"), _settings.connect_timeout)
            server_info = await ServerInfo.load(handle)
        except (PyMongoError, TimeoutError, KeyError) as error:
            handle.close()
            raise ConnectFailed(f"Failed to connect to MongoDB: {error}") from error

        logger.debug("Connected to MongoDB %s (%s)", server_info.version, server_info.topology)
        return cls(handle, server_info)

    @property
    def handle(self) -> AsyncIOMotorClient:
        return self._handle

    @property
    def server_info(self) -> ServerInfo:
        return self._server_info

    @property
    def server_version(self) -> str:
        return self._server_info.version

    @property
    def transactions_allowed(self) -> bool:
        return self._server_info.transactions_allowed

    async def ping(self) -> None:
        await self._handle.admin.command("ping")

    async def server_status(self) -> dict[str, Any]:
        return await server_status(self._handle)

    async def close(self) -> None:
        self._handle.close()

    def database(self, name: str) -> Database:
        return Database(self, self._handle[name])

    def __getitem__(self, name: str) -> Database:
        return self.database(name)

    def watch(self, pipeline: Sequence[dict[str, Any]] | None = None, session: SessionScope | None = None) -> Watcher:
        """Watches every database on the deployment for changes."""
        return Watcher(self._handle, pipeline, session)

    async def start_session(self) -> Session:
        """Starts a session owned by the caller, who must end it.

        Raises:
            CapabilityError: If the deployment doesn't support transactions. Nothing is sent to the server.
        """
        if not self.transactions_allowed:
            raise CapabilityError(
                f"Sessions require a replica set or sharded cluster running MongoDB newer than 4.0.0, connected to a "
                f"{self._server_info.topology} deployment running {self._server_info.version}",
                client=self,
            )

        session = Session(await self._handle.start_session())
        logger.debug("Started %r", session)
        return session

    async def begin(self, **options: Any) -> Transaction:
        """Starts a session and a transaction on it in one call.

        The transaction ends its session once it is committed or rolled back. If the transaction can't be started the
        session is ended before the error is raised.
        """
        session = await self.start_session()
        try:
            return session._begin(True, **options)
        except Exception:
            await session.end_session()
            raise

    async def use_session[T](self, fn: Callable[[Session], Awaitable[T]]) -> T:
        """Runs `fn` with a new session and ends the session afterwards.

        No transaction is started, `fn` manages its own.
        """
        session = await self.start_session()
        try:
            return await fn(session)
        finally:
            if not session.ended:
                await session.end_session()

    async def with_transaction[T](self, fn: Callable[[Session], Awaitable[T]], **options: Any) -> T:
        """Runs `fn` in a transaction on a new session, committing if it returns and aborting if it raises.

        See `Session.with_transaction`. The session is always ended afterwards.
        """
        async def run(session: Session) -> T:
            return await session.with_transaction(fn, **options)

        return await self.use_session(run)

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *_):
        await self.close()
