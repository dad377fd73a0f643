import pytest

from fakes import FakeMotorClient

from mondo.capabilities import ServerInfo
from mondo.client import Client


@pytest.fixture
def motor_client() -> FakeMotorClient:
    return FakeMotorClient()


@pytest.fixture
def client(motor_client) -> Client:
    return Client(motor_client, ServerInfo.build(motor_client.version, "ReplicaSetWithPrimary"))


@pytest.fixture
def standalone_client() -> Client:
    handle = FakeMotorClient(topology="Single")
    return Client(handle, ServerInfo.build(handle.version, "Single"))


@pytest.fixture
def users(client):
    collection = client["test"]["users"]
    for uid, age in (("uid1", 10), ("uid2", 11), ("uid3", 30)):
        collection.handle.documents[uid] = {"_id": uid, "age": age}

    return collection
