"""
Provisioning Engine

Creates and deletes service instances: makes sure the shared filesystem is
mounted, asks the backend for a share per instance, records the instance in
the lifecycle store and persists the instance snapshot.

Duplicate and conflict detection happens before these calls; create_instance
overwrites any existing record for the same id.
"""

import logging

from broker.models import CreateServiceInstanceResponse, LastOperation, ServiceInstance
from broker.services.lifecycle_store import LifecycleStore
from broker.services.persistence import PersistenceGateway
from broker.services.storage_client import StorageClient

logger = logging.getLogger(__name__)

CREATING_STATE = "in progress"
CREATING_DESCRIPTION = "creating service instance..."


class ProvisioningEngine:
    def __init__(
        self,
        store: LifecycleStore,
        storage: StorageClient,
        gateway: PersistenceGateway,
        mount_path: str = "/",
        dashboard_url: str = "http://dashboard_url",
        poll_interval_seconds: int = 10,
    ):
        self.store = store
        self.storage = storage
        self.gateway = gateway
        self.mount_path = mount_path
        self.dashboard_url = dashboard_url
        self.poll_interval_seconds = poll_interval_seconds

    def create_instance(self, instance_id: str, instance: ServiceInstance) -> CreateServiceInstanceResponse:
        """
        Provision a share for instance_id and record the instance.

        Steps:
        1. Mount the shared filesystem if it is not mounted yet
        2. Create the share
        3. Stamp id, dashboard URL and last operation
        4. Record the instance and persist the instance snapshot

        Raises:
            BackendUnavailable: mount or share creation failed; nothing recorded
            PersistenceFailure: snapshot write failed; share and record remain
        """
        with self.store.locked():
            if not self.storage.is_filesystem_mounted():
                self.storage.mount_filesystem(self.mount_path)

            mountpoint = self.storage.create_share(instance_id)

            record = instance.model_copy(
                update={
                    "id": instance_id,
                    "dashboard_url": self.dashboard_url,
                    "last_operation": LastOperation(
                        state=CREATING_STATE,
                        description=CREATING_DESCRIPTION,
                        async_poll_interval_seconds=self.poll_interval_seconds,
                    ),
                },
                deep=True,
            )
            self.store.put_instance(record)
            self.gateway.save_instances(self.store.instance_snapshot())

        logger.info(f"Service instance {instance_id} created at {mountpoint}")
        return CreateServiceInstanceResponse(
            dashboard_url=record.dashboard_url,
            last_operation=record.last_operation,
        )

    def delete_instance(self, instance_id: str) -> None:
        """
        Delete the backend share, then forget the instance.

        A backend failure leaves the record in place. A persistence failure
        is raised after the record has already been removed from memory.
        """
        with self.store.locked():
            try:
                self.storage.delete_share(instance_id)
            except Exception as exc:
                logger.error(f"Error deleting share for {instance_id}: {exc}")
                raise
            self.store.remove_instance(instance_id)
            self.gateway.save_instances(self.store.instance_snapshot())

        logger.info(f"Service instance {instance_id} deleted")
