"""
Broker Controller

Single entry point the broker front end calls into. Composes the lifecycle
store, the catalog and both engines, and wraps every operation with
start/end logging.
"""

import logging
from pathlib import Path
from typing import Optional

from broker.config import BrokerSettings
from broker.database import init_db, make_engine, make_session_factory
from broker.models import (
    Catalog,
    CreateServiceBindingResponse,
    CreateServiceInstanceResponse,
    ServiceBinding,
    ServiceInstance,
)
from broker.services.binding_engine import BindingEngine
from broker.services.catalog import get_catalog
from broker.services.lifecycle_store import LifecycleStore
from broker.services.persistence import FileRecorder, PersistenceGateway, Recorder, SqlRecorder
from broker.services.provisioning_engine import ProvisioningEngine
from broker.services.storage_client import LocalShareClient, StorageClient
from shared.logging_config import logged_operation

logger = logging.getLogger(__name__)


class BrokerController:
    def __init__(self, store: LifecycleStore, provisioning: ProvisioningEngine, binding: BindingEngine):
        self.store = store
        self.provisioning = provisioning
        self.binding = binding

    @logged_operation("get-catalog", logger)
    def get_catalog(self) -> Catalog:
        return get_catalog()

    @logged_operation("create-service-instance", logger)
    def create_service_instance(self, instance_id: str, instance: ServiceInstance) -> CreateServiceInstanceResponse:
        return self.provisioning.create_instance(instance_id, instance)

    @logged_operation("service-instance-exists", logger)
    def service_instance_exists(self, instance_id: str) -> bool:
        return self.store.instance_exists(instance_id)

    @logged_operation("service-instance-properties-match", logger)
    def service_instance_properties_match(self, instance_id: str, instance: ServiceInstance) -> bool:
        return self.store.instance_properties_match(instance_id, instance)

    @logged_operation("get-service-instance", logger)
    def get_service_instance(self, instance_id: str) -> Optional[ServiceInstance]:
        return self.store.get_instance(instance_id)

    @logged_operation("delete-service-instance", logger)
    def delete_service_instance(self, instance_id: str) -> None:
        self.provisioning.delete_instance(instance_id)

    @logged_operation("bind-service-instance", logger)
    def bind_service_instance(
        self, instance_id: str, binding_id: str, binding_info: ServiceBinding
    ) -> CreateServiceBindingResponse:
        return self.binding.bind(instance_id, binding_id, binding_info)

    @logged_operation("service-binding-exists", logger)
    def service_binding_exists(self, instance_id: str, binding_id: str) -> bool:
        return self.store.binding_exists(instance_id, binding_id)

    @logged_operation("service-binding-properties-match", logger)
    def service_binding_properties_match(self, instance_id: str, binding_id: str, binding: ServiceBinding) -> bool:
        return self.store.binding_properties_match(instance_id, binding_id, binding)

    @logged_operation("get-binding", logger)
    def get_binding(self, instance_id: str, binding_id: str) -> ServiceBinding:
        return self.binding.get_binding(instance_id, binding_id)

    @logged_operation("unbind", logger)
    def unbind_service_instance(self, instance_id: str, binding_id: str) -> None:
        self.binding.unbind(instance_id, binding_id)


# ============================================================================
# WIRING
# ============================================================================

def make_recorder(settings: BrokerSettings) -> Recorder:
    if settings.persistence == "sql":
        engine = make_engine(settings.database_url)
        init_db(engine)
        return SqlRecorder(make_session_factory(engine))
    return FileRecorder()


def make_storage_client(settings: BrokerSettings) -> StorageClient:
    return LocalShareClient(
        root_path=settings.storage_root,
        mount_path=settings.mount_path,
        endpoint=settings.storage_endpoint,
        credential=settings.storage_credential,
    )


def build_controller(
    settings: BrokerSettings | None = None,
    storage: StorageClient | None = None,
    recorder: Recorder | None = None,
) -> BrokerController:
    """
    Assemble a controller and restore previously persisted state into its store.
    """
    settings = settings or BrokerSettings()
    storage = storage or make_storage_client(settings)
    recorder = recorder or make_recorder(settings)

    store = LifecycleStore()
    gateway = PersistenceGateway(recorder, str(Path(settings.data_dir)))
    gateway.restore(store)

    provisioning = ProvisioningEngine(
        store,
        storage,
        gateway,
        mount_path=settings.mount_path,
        dashboard_url=settings.dashboard_url,
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    binding = BindingEngine(
        store,
        storage,
        gateway,
        driver=settings.driver,
        container_root=settings.container_root,
    )
    logger.info(f"Broker controller ready (persistence={settings.persistence}, data_dir={settings.data_dir})")
    return BrokerController(store, provisioning, binding)
