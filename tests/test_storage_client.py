"""Tests for the local-directory share backend."""

import pytest

from broker.errors import BackendUnavailable
from broker.services.storage_client import LocalShareClient


@pytest.fixture
def client(tmp_path) -> LocalShareClient:
    return LocalShareClient(str(tmp_path / "shares"), mount_path="/", endpoint="10.0.0.1:6789", credential="key")


def test_not_mounted_until_mount(client):
    assert not client.is_filesystem_mounted()
    with pytest.raises(BackendUnavailable):
        client.create_share("i1")

    client.mount_filesystem("/")

    assert client.is_filesystem_mounted()


def test_share_lifecycle(client):
    client.mount_filesystem("/")

    mountpoint = client.create_share("i1")

    assert mountpoint.endswith("i1")
    assert client.get_path_for_share("i1") == "/i1"

    client.delete_share("i1")

    with pytest.raises(BackendUnavailable):
        client.get_path_for_share("i1")


def test_share_names_are_percent_encoded(client):
    client.mount_filesystem("/")
    client.create_share("org/space:1")

    assert client.get_path_for_share("org/space:1") == "/org%2Fspace%3A1"


def test_ids_differing_in_punctuation_keep_separate_shares(client):
    client.mount_filesystem("/")
    for instance_id in ("a.b", "a_b", "a/b"):
        client.create_share(instance_id)

    paths = {client.get_path_for_share(i) for i in ("a.b", "a_b", "a/b")}
    assert len(paths) == 3

    client.delete_share("a_b")

    assert client.get_path_for_share("a.b") == "/a.b"
    assert client.get_path_for_share("a/b") == "/a%2Fb"


@pytest.mark.parametrize("instance_id", ["", ".", ".."])
def test_dot_ids_rejected(client, instance_id):
    client.mount_filesystem("/")
    with pytest.raises(BackendUnavailable):
        client.create_share(instance_id)


def test_delete_unknown_share_fails(client):
    client.mount_filesystem("/")
    with pytest.raises(BackendUnavailable):
        client.delete_share("missing")


def test_mount_state_survives_new_client(tmp_path):
    LocalShareClient(str(tmp_path / "shares"), mount_path="/volumes").mount_filesystem("/volumes")

    assert LocalShareClient(str(tmp_path / "shares"), mount_path="/volumes").is_filesystem_mounted()


def test_config_details(client, tmp_path):
    assert client.get_config_details() == ("10.0.0.1:6789", "key")

    with pytest.raises(BackendUnavailable):
        LocalShareClient(str(tmp_path / "other")).get_config_details()
