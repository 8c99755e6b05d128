from __future__ import annotations

import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

from broker.errors import BackendUnavailable

logger = logging.getLogger(__name__)


class StorageClient(ABC):
    """Capabilities the broker needs from a shared-filesystem backend."""

    @abstractmethod
    def is_filesystem_mounted(self) -> bool: ...

    @abstractmethod
    def mount_filesystem(self, path: str) -> str: ...

    @abstractmethod
    def create_share(self, instance_id: str) -> str: ...

    @abstractmethod
    def delete_share(self, instance_id: str) -> None: ...

    @abstractmethod
    def get_path_for_share(self, instance_id: str) -> str: ...

    @abstractmethod
    def get_config_details(self) -> tuple[str, str]: ...


class LocalShareClient(StorageClient):
    """
    Shares as sub-directories of a local root.

    The filesystem counts as mounted once the directory for mount_path exists
    under the root, so shares stay reachable across broker restarts. Each
    share folder is the percent-encoded instance id; share paths are reported
    relative to the mountpoint.
    """

    def __init__(self, root_path: str, mount_path: str = "/", endpoint: str = "", credential: str = ""):
        self.root = Path(root_path)
        self.mount_path = mount_path
        self.endpoint = endpoint
        self.credential = credential

    @property
    def mountpoint(self) -> Path:
        return self.root / self.mount_path.lstrip("/")

    @staticmethod
    def _share_folder(instance_id: str) -> str:
        # Percent-encoding keeps distinct ids in distinct folders.
        if instance_id in ("", ".", ".."):
            raise BackendUnavailable(f"invalid share name '{instance_id}'")
        return quote(instance_id, safe="")

    def _share_dir(self, instance_id: str) -> Path:
        if not self.is_filesystem_mounted():
            raise BackendUnavailable("filesystem is not mounted")
        return self.mountpoint / self._share_folder(instance_id)

    def is_filesystem_mounted(self) -> bool:
        return self.mountpoint.is_dir()

    def mount_filesystem(self, path: str) -> str:
        target = self.root / path.lstrip("/")
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackendUnavailable(f"failed to mount {path}: {exc}") from exc
        self.mount_path = path
        logger.info(f"Mounted share filesystem at {target.resolve()}")
        return str(target.resolve())

    def create_share(self, instance_id: str) -> str:
        share_dir = self._share_dir(instance_id)
        try:
            share_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackendUnavailable(f"failed to create share {instance_id}: {exc}") from exc
        return str(share_dir.resolve())

    def delete_share(self, instance_id: str) -> None:
        share_dir = self._share_dir(instance_id)
        if not share_dir.exists():
            raise BackendUnavailable(f"share {instance_id} does not exist")
        try:
            shutil.rmtree(share_dir)
        except OSError as exc:
            raise BackendUnavailable(f"failed to delete share {instance_id}: {exc}") from exc

    def get_path_for_share(self, instance_id: str) -> str:
        share_dir = self._share_dir(instance_id)
        if not share_dir.is_dir():
            raise BackendUnavailable(f"share {instance_id} does not exist")
        return "/" + os.path.relpath(share_dir, self.mountpoint).replace(os.sep, "/")

    def get_config_details(self) -> tuple[str, str]:
        if not self.endpoint:
            raise BackendUnavailable("storage endpoint is not configured")
        return self.endpoint, self.credential
