"""
Binding Engine

Issues and revokes volume mount grants for service instances.

A binding is recorded only after the backend has produced everything the
mount descriptor needs (share path, endpoint, credential), so a backend
failure never leaves a binding behind.
"""

import logging
import posixpath
from typing import Any, Mapping

from broker.errors import BindingNotFound, InvalidBindingParameters
from broker.models import (
    CreateServiceBindingResponse,
    Credentials,
    ServiceBinding,
    ShareConfig,
    VolumeMount,
    VolumeMountPrivateDetails,
)
from broker.services.lifecycle_store import LifecycleStore
from broker.services.persistence import PersistenceGateway
from broker.services.storage_client import StorageClient

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_ROOT = "/var/vcap/data"
MOUNT_PATH_KEYS = ("container_path", "path")


def determine_container_mount_path(
    parameters: Mapping[str, Any],
    instance_id: str,
    container_root: str = DEFAULT_CONTAINER_ROOT,
) -> str:
    """
    Resolve where the share appears inside the application container.

    'container_path' wins over 'path'; with neither, the share lands at
    <container_root>/<instance_id>.
    """
    for key in MOUNT_PATH_KEYS:
        if key in (parameters or {}):
            value = parameters[key]
            if not isinstance(value, str):
                raise InvalidBindingParameters(f"binding parameter '{key}' must be a string")
            return value
    return posixpath.join(container_root, instance_id)


class BindingEngine:
    def __init__(
        self,
        store: LifecycleStore,
        storage: StorageClient,
        gateway: PersistenceGateway,
        driver: str = "cephfs",
        container_root: str = DEFAULT_CONTAINER_ROOT,
    ):
        self.store = store
        self.storage = storage
        self.gateway = gateway
        self.driver = driver
        self.container_root = container_root

    def bind(self, instance_id: str, binding_id: str, binding_info: ServiceBinding) -> CreateServiceBindingResponse:
        """
        Build a read-write volume mount for instance_id and record the binding.

        Raises:
            BackendUnavailable: share path or config lookup failed; nothing recorded
            InvalidBindingParameters: mount path parameter is not a string
            PersistenceFailure: snapshot write failed; binding stays recorded
        """
        with self.store.locked():
            share_path = self.storage.get_path_for_share(instance_id)
            container_path = determine_container_mount_path(
                binding_info.parameters, instance_id, self.container_root
            )
            endpoint, credential = self.storage.get_config_details()

            volume_mount = VolumeMount(
                container_path=container_path,
                mode="rw",
                private=VolumeMountPrivateDetails(
                    driver=self.driver,
                    group_id=instance_id,
                    config=ShareConfig(
                        endpoint=endpoint,
                        credential=credential,
                        remote_mountpoint=share_path,
                    ),
                ),
            )

            self.store.put_binding(binding_id, binding_info.model_copy(deep=True))
            self.gateway.save_bindings(self.store.binding_snapshot())

        logger.info(f"Binding {binding_id} issued for instance {instance_id} at {container_path}")
        return CreateServiceBindingResponse(credentials=Credentials(uri=""), volume_mounts=[volume_mount])

    def unbind(self, instance_id: str, binding_id: str) -> None:
        """Forget binding_id (absent ids are a no-op) and persist."""
        with self.store.locked():
            self.store.remove_binding(binding_id)
            try:
                self.gateway.save_bindings(self.store.binding_snapshot())
            except Exception as exc:
                logger.error(f"error-unbind {binding_id}: {exc}")
                raise

    def get_binding(self, instance_id: str, binding_id: str) -> ServiceBinding:
        binding = self.store.get_binding(binding_id)
        if binding is None:
            raise BindingNotFound(binding_id)
        return binding
