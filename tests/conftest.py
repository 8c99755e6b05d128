"""Pytest fixtures for share broker tests."""

import threading
from typing import Dict, List, Optional

import pytest

from broker.errors import BackendUnavailable, PersistenceFailure
from broker.models import ServiceBinding, ServiceInstance
from broker.services.binding_engine import BindingEngine
from broker.services.lifecycle_store import LifecycleStore
from broker.services.persistence import FileRecorder, PersistenceGateway
from broker.services.provisioning_engine import ProvisioningEngine
from broker.services.storage_client import StorageClient


class FakeStorageClient(StorageClient):
    """In-memory backend that records calls and fails on demand."""

    def __init__(self):
        self.mounted = False
        self.shares: Dict[str, str] = {}
        self.calls: List[str] = []
        self.fail: Dict[str, str] = {}
        # When set, create_share signals share_entered and waits for share_gate.
        self.share_gate: Optional[threading.Event] = None
        self.share_entered = threading.Event()

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail:
            raise BackendUnavailable(self.fail[operation])

    def is_filesystem_mounted(self) -> bool:
        self.calls.append("is_filesystem_mounted")
        return self.mounted

    def mount_filesystem(self, path: str) -> str:
        self._maybe_fail("mount_filesystem")
        self.mounted = True
        return f"/mnt{path}"

    def create_share(self, instance_id: str) -> str:
        self._maybe_fail("create_share")
        self.share_entered.set()
        if self.share_gate is not None:
            self.share_gate.wait(timeout=5)
        self.shares[instance_id] = f"/{instance_id}"
        return f"/mnt/{instance_id}"

    def delete_share(self, instance_id: str) -> None:
        self._maybe_fail("delete_share")
        self.shares.pop(instance_id, None)

    def get_path_for_share(self, instance_id: str) -> str:
        self._maybe_fail("get_path_for_share")
        return self.shares.get(instance_id, f"/{instance_id}")

    def get_config_details(self) -> tuple[str, str]:
        self._maybe_fail("get_config_details")
        return "10.0.0.1:6789", "secret-keyring"


class FlakyRecorder(FileRecorder):
    """File recorder that can be switched to fail every write."""

    def __init__(self):
        self.failing = False
        self.writes: List[str] = []

    def persist(self, mapping, base_path, filename):
        self.writes.append(filename)
        if self.failing:
            raise PersistenceFailure(f"disk full writing {filename}")
        super().persist(mapping, base_path, filename)


@pytest.fixture
def storage() -> FakeStorageClient:
    return FakeStorageClient()


@pytest.fixture
def recorder() -> FlakyRecorder:
    return FlakyRecorder()


@pytest.fixture
def store() -> LifecycleStore:
    return LifecycleStore()


@pytest.fixture
def gateway(recorder: FlakyRecorder, tmp_path) -> PersistenceGateway:
    return PersistenceGateway(recorder, str(tmp_path / "state"))


@pytest.fixture
def provisioning(store, storage, gateway) -> ProvisioningEngine:
    return ProvisioningEngine(store, storage, gateway)


@pytest.fixture
def binding_engine(store, storage, gateway) -> BindingEngine:
    return BindingEngine(store, storage, gateway)


def make_instance(
    plan_id: str = "p",
    organization_guid: str = "o",
    space_guid: str = "s",
    parameters: Optional[dict] = None,
) -> ServiceInstance:
    return ServiceInstance(
        service_id="cephfs-service-guid",
        plan_id=plan_id,
        organization_guid=organization_guid,
        space_guid=space_guid,
        parameters=parameters or {},
    )


def make_binding(
    binding_id: str = "b1",
    instance_id: str = "i1",
    app_guid: str = "app-1",
    parameters: Optional[dict] = None,
) -> ServiceBinding:
    return ServiceBinding(
        id=binding_id,
        service_instance_id=instance_id,
        app_guid=app_guid,
        service_id="cephfs-service-guid",
        plan_id="free-plan-guid",
        parameters=parameters or {},
    )
