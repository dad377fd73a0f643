"""Server capability detection.

A client looks at the server exactly once, right after connecting, and records what it found in a `ServerInfo`. The
`ServerInfo` travels with the client into every database and collection it hands out, so deciding whether sessions
are allowed never costs a round trip.
"""
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient


MINIMUM_TRANSACTION_VERSION = "4.0.0"
UNSUPPORTED_TOPOLOGIES = frozenset({"Single", "Unknown"})


def compare_server_versions(v1: str, v2: str) -> int:
    """Compares two dotted version strings component by component.

    Only the components both versions have are compared. A component that isn't a number ends the comparison: if it
    is in `v1` then `v1` is considered newer, otherwise `v2` is.

    Returns:
        A positive number when `v1` is newer, a negative number when `v2` is newer, and 0 when they are equal.
    """
    for c1, c2 in zip(v1.split("."), v2.split(".")):
        try:
            n1 = int(c1)
        except ValueError:
            return 1

        try:
            n2 = int(c2)
        except ValueError:
            return -1

        if n1 != n2:
            return n1 - n2

    return 0


def transactions_supported(version: str, topology: str) -> bool:
    return topology not in UNSUPPORTED_TOPOLOGIES and compare_server_versions(version, MINIMUM_TRANSACTION_VERSION) > 0


@dataclass(frozen=True)
class ServerInfo:
    """What a client learned about its server when it connected.

    Attributes:
        version: The server version string reported by `serverStatus`.
        topology: The driver's topology type name ("Single", "ReplicaSetWithPrimary", "Sharded", ...).
        transactions_allowed: Whether sessions and transactions may be started.
    """
    version: str
    topology: str
    transactions_allowed: bool

    @classmethod
    def build(cls, version: str, topology: str) -> "ServerInfo":
        return cls(version, topology, transactions_supported(version, topology))

    @classmethod
    async def load(cls, handle: "AsyncIOMotorClient") -> "ServerInfo":
        """Runs `serverStatus` and reads the topology the driver discovered while doing so."""
        status = await server_status(handle)
        return cls.build(status["version"], handle.topology_description.topology_type_name)


async def server_status(handle: "AsyncIOMotorClient") -> dict[str, Any]:
    return await handle.admin.command("serverStatus")
