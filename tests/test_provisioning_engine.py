"""Tests for service instance provisioning and deletion."""

import json
import threading
from pathlib import Path

import pytest

from broker.errors import BackendUnavailable, PersistenceFailure
from conftest import make_instance


def test_create_instance_records_and_persists(provisioning, store, storage, gateway):
    response = provisioning.create_instance("i1", make_instance())

    assert response.dashboard_url
    assert response.last_operation.state == "in progress"
    assert response.last_operation.description == "creating service instance..."
    assert response.last_operation.async_poll_interval_seconds == 10

    assert store.instance_exists("i1")
    assert store.get_instance("i1").id == "i1"
    assert storage.calls[:3] == ["is_filesystem_mounted", "mount_filesystem", "create_share"]

    persisted = json.loads((Path(gateway.base_path) / "service_instances.json").read_text())
    assert persisted["i1"]["plan_id"] == "p"
    assert persisted["i1"]["last_operation"]["state"] == "in progress"


def test_create_instance_skips_mount_when_mounted(provisioning, storage):
    storage.mounted = True

    provisioning.create_instance("i1", make_instance())

    assert "mount_filesystem" not in storage.calls


def test_create_instance_does_not_mutate_request(provisioning):
    request = make_instance()
    provisioning.create_instance("i1", request)

    assert request.id == ""
    assert request.last_operation is None


def test_mount_failure_aborts_create(provisioning, store, storage, recorder):
    storage.fail["mount_filesystem"] = "mount refused"

    with pytest.raises(BackendUnavailable, match="mount refused"):
        provisioning.create_instance("i1", make_instance())

    assert "create_share" not in storage.calls
    assert not store.instance_exists("i1")
    assert recorder.writes == []


def test_share_failure_aborts_create(provisioning, store, storage, recorder):
    storage.fail["create_share"] = "no space"

    with pytest.raises(BackendUnavailable):
        provisioning.create_instance("i1", make_instance())

    assert not store.instance_exists("i1")
    assert recorder.writes == []


def test_persistence_failure_keeps_in_memory_record(provisioning, store, storage, recorder):
    recorder.failing = True

    with pytest.raises(PersistenceFailure):
        provisioning.create_instance("i1", make_instance())

    assert store.instance_exists("i1")
    assert "i1" in storage.shares


def test_create_overwrites_existing_record(provisioning, store):
    provisioning.create_instance("i1", make_instance(plan_id="p"))
    provisioning.create_instance("i1", make_instance(plan_id="q"))

    assert store.get_instance("i1").plan_id == "q"


def test_delete_instance_removes_record(provisioning, store, storage, gateway):
    provisioning.create_instance("i1", make_instance())

    provisioning.delete_instance("i1")

    assert not store.instance_exists("i1")
    assert "i1" not in storage.shares
    persisted = json.loads((Path(gateway.base_path) / "service_instances.json").read_text())
    assert persisted == {}


def test_delete_backend_failure_keeps_record(provisioning, store, storage):
    provisioning.create_instance("i1", make_instance())
    storage.fail["delete_share"] = "share busy"

    with pytest.raises(BackendUnavailable, match="share busy"):
        provisioning.delete_instance("i1")

    assert store.instance_exists("i1")


def test_delete_persistence_failure_is_not_rolled_back(provisioning, store, recorder):
    provisioning.create_instance("i1", make_instance())
    recorder.failing = True

    with pytest.raises(PersistenceFailure):
        provisioning.delete_instance("i1")

    assert not store.instance_exists("i1")



def test_store_is_held_for_whole_create(provisioning, store, storage):
    storage.share_gate = threading.Event()
    creator = threading.Thread(target=provisioning.create_instance, args=("i1", make_instance()))
    creator.start()
    assert storage.share_entered.wait(timeout=5)

    seen = {}
    reader = threading.Thread(target=lambda: seen.update(exists=store.instance_exists("i1")))
    reader.start()
    reader.join(timeout=0.2)
    assert reader.is_alive()

    storage.share_gate.set()
    creator.join(timeout=5)
    reader.join(timeout=5)

    assert seen == {"exists": True}


def test_concurrent_creates_run_one_after_another(provisioning, store, storage):
    storage.share_gate = threading.Event()
    order = []

    def create(plan_id):
        provisioning.create_instance("i1", make_instance(plan_id=plan_id))
        order.append(plan_id)

    first = threading.Thread(target=create, args=("p",))
    first.start()
    assert storage.share_entered.wait(timeout=5)

    second = threading.Thread(target=create, args=("q",))
    second.start()
    second.join(timeout=0.2)
    assert second.is_alive()
    assert storage.calls.count("create_share") == 1

    storage.share_gate.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert order == ["p", "q"]
    assert store.get_instance("i1").plan_id == "q"
