import pytest

from fakes import FakeMotorClient

from mondo.capabilities import ServerInfo, compare_server_versions, transactions_supported


@pytest.mark.parametrize(
    "v1, v2, sign",
    [
        ("4.0.0", "4.0.0", 0),
        ("4.0.1", "4.0.0", 1),
        ("4.2", "4.10", -1),
        ("5.0.0", "4.4.9", 1),
        ("4.0", "4.0.0", 0),
        ("4.0.0-rc1", "4.0.0", 1),
        ("4.0.0", "4.0.0-rc1", -1),
        ("x.0", "y.0", 1),
    ],
)
def test_compare_server_versions(v1, v2, sign):
    result = compare_server_versions(v1, v2)
    assert (result > 0) - (result < 0) == sign


@pytest.mark.parametrize(
    "version, topology, allowed",
    [
        ("7.0.2", "ReplicaSetWithPrimary", True),
        ("4.2.0", "Sharded", True),
        ("4.0.0", "ReplicaSetWithPrimary", False),
        ("3.6.8", "ReplicaSetWithPrimary", False),
        ("7.0.2", "Single", False),
        ("7.0.2", "Unknown", False),
    ],
)
def test_transactions_supported(version, topology, allowed):
    assert transactions_supported(version, topology) is allowed


@pytest.mark.asyncio
async def test_server_info_is_loaded_from_server_status():
    handle = FakeMotorClient(version="6.0.4", topology="Sharded")
    info = await ServerInfo.load(handle)

    assert info == ServerInfo("6.0.4", "Sharded", True)
    assert handle.commands == ["serverStatus"]


def test_server_info_is_immutable():
    info = ServerInfo.build("7.0.2", "Single")
    with pytest.raises(AttributeError):
        info.transactions_allowed = True
