from typing import Any, Awaitable, Callable, Sequence, TYPE_CHECKING

from mondo.builders import Watcher
from mondo.capabilities import ServerInfo
from mondo.collection import Collection
from mondo.session_context import SessionScope

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorDatabase
    from mondo.client import Client
    from mondo.sessions import Session, Transaction


class Database:
    """A database on the client's deployment.

    The session helpers are the client's: sessions belong to the deployment, not to one database.
    """
    def __init__(self, client: "Client", handle: "AsyncIOMotorDatabase"):
        self._client = client
        self._handle = handle

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    @property
    def client(self) -> "Client":
        return self._client

    @property
    def handle(self) -> "AsyncIOMotorDatabase":
        return self._handle

    @property
    def name(self) -> str:
        return self._handle.name

    @property
    def server_info(self) -> ServerInfo:
        return self._client.server_info

    def collection(self, name: str) -> Collection:
        return Collection(self, self._handle[name])

    def __getitem__(self, name: str) -> Collection:
        return self.collection(name)

    def watch(self, pipeline: Sequence[dict[str, Any]] | None = None, session: SessionScope | None = None) -> Watcher:
        return Watcher(self._handle, pipeline, session)

    async def start_session(self) -> "Session":
        return await self._client.start_session()

    async def begin(self, **options: Any) -> "Transaction":
        return await self._client.begin(**options)

    async def use_session[T](self, fn: Callable[["Session"], Awaitable[T]]) -> T:
        return await self._client.use_session(fn)

    async def with_transaction[T](self, fn: Callable[["Session"], Awaitable[T]], **options: Any) -> T:
        return await self._client.with_transaction(fn, **options)
