from dataclasses import dataclass, field
from typing import Any


@dataclass
class ClientSettings:
    """Configuration settings for connecting a mondo client.

    Attributes:
        uri: A full MongoDB connection string. When given it takes precedence over host/port.
        host: Hostname or IP address of the MongoDB server (default: "localhost")
        port: Port number the MongoDB server is listening on (default: 27017)
        username: Optional username for authentication
        password: Optional password for authentication
        auth_source: Authentication database name (default: "admin")
        timeout: Server selection timeout in milliseconds (default: 20000)
        connect_timeout: Seconds to wait for the initial ping (default: 15)
        connection_options: Additional keyword arguments passed to the motor client.
            Example: {"replicaSet": "rs0", "tlsAllowInvalidCertificates": True}
    """
    uri: str | None = None
    host: str = "localhost"
    port: int = 27017
    username: str | None = None
    password: str | None = None
    auth_source: str | None = "admin"
    timeout: int = 20000
    connect_timeout: float = 15.0
    connection_options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_uri(cls, uri: str, **connection_options: Any) -> "ClientSettings":
        return cls(uri=uri, connection_options=connection_options)

    def client_kwargs(self) -> dict[str, Any]:
        """Builds the keyword arguments for `AsyncIOMotorClient`."""
        kwargs: dict[str, Any] = {"serverSelectionTimeoutMS": self.timeout}
        if self.uri:
            kwargs["host"] = self.uri
        else:
            kwargs["host"] = self.host
            kwargs["port"] = self.port

        if self.username is not None:
            kwargs["username"] = self.username
            kwargs["password"] = self.password
            kwargs["authSource"] = self.auth_source

        kwargs.update(self.connection_options)
        return kwargs
