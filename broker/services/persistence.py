"""
Persistence Gateway

Writes a full snapshot of the instance or binding mapping after every
mutation and reads the snapshots back when the broker starts.

Two recorders are available:
- FileRecorder: one JSON document per snapshot under a base directory
- SqlRecorder: one row per snapshot in the persisted_state table
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from broker.config import BINDINGS_FILENAME, INSTANCES_FILENAME
from broker.database import PersistedState
from broker.errors import PersistenceFailure
from broker.models import ServiceBinding, ServiceInstance
from broker.services.lifecycle_store import LifecycleStore

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _encode(mapping: Mapping[str, BaseModel]) -> str:
    payload = {key: record.model_dump(mode="json") for key, record in mapping.items()}
    return json.dumps(payload, indent=2, sort_keys=True)


class Recorder(ABC):
    """Durable home for id -> record snapshots."""

    @abstractmethod
    def persist(self, mapping: Mapping[str, BaseModel], base_path: str, filename: str) -> None:
        """Overwrite the named snapshot with mapping."""

    @abstractmethod
    def load(self, base_path: str, filename: str) -> Optional[Dict[str, Any]]:
        """Return the last persisted snapshot, or None if nothing was persisted."""


class FileRecorder(Recorder):
    def persist(self, mapping: Mapping[str, BaseModel], base_path: str, filename: str) -> None:
        target = Path(base_path) / filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{filename}.", dir=str(target.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(_encode(mapping))
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, target)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise PersistenceFailure(f"failed to write {target}: {exc}") from exc

    def load(self, base_path: str, filename: str) -> Optional[Dict[str, Any]]:
        target = Path(base_path) / filename
        if not target.exists():
            return None
        try:
            return json.loads(target.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceFailure(f"failed to read {target}: {exc}") from exc


class SqlRecorder(Recorder):
    def __init__(self, session_factory):
        """
        Args:
            session_factory: SQLAlchemy session factory bound to a database
                where init_db() has created the persisted_state table
        """
        self.session_factory = session_factory

    def persist(self, mapping: Mapping[str, BaseModel], base_path: str, filename: str) -> None:
        db = self.session_factory()
        try:
            row = db.get(PersistedState, (base_path, filename))
            if row is None:
                row = PersistedState(base_path=base_path, filename=filename, payload="")
                db.add(row)
            row.payload = _encode(mapping)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceFailure(f"failed to record {filename}: {exc}") from exc
        finally:
            db.close()

    def load(self, base_path: str, filename: str) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            row = db.scalars(select(PersistedState).where(
                PersistedState.base_path == base_path, PersistedState.filename == filename
            )).first()
            if row is None:
                return None
            return json.loads(row.payload)
        except (SQLAlchemyError, ValueError) as exc:
            raise PersistenceFailure(f"failed to load {filename}: {exc}") from exc
        finally:
            db.close()


class PersistenceGateway:
    """
    Binds a recorder to the broker's base path and snapshot names.
    """

    def __init__(
        self,
        recorder: Recorder,
        base_path: str,
        instances_filename: str = INSTANCES_FILENAME,
        bindings_filename: str = BINDINGS_FILENAME,
    ):
        self.recorder = recorder
        self.base_path = base_path
        self.instances_filename = instances_filename
        self.bindings_filename = bindings_filename

    def save_instances(self, instances: Mapping[str, ServiceInstance]) -> None:
        self.recorder.persist(instances, self.base_path, self.instances_filename)
        logger.debug(f"Recorded {len(instances)} service instances")

    def save_bindings(self, bindings: Mapping[str, ServiceBinding]) -> None:
        self.recorder.persist(bindings, self.base_path, self.bindings_filename)
        logger.debug(f"Recorded {len(bindings)} service bindings")

    def _load(self, filename: str, model: Type[RecordT]) -> Dict[str, RecordT]:
        raw = self.recorder.load(self.base_path, filename) or {}
        try:
            return {key: model.model_validate(value) for key, value in raw.items()}
        except (AttributeError, ValidationError) as exc:
            raise PersistenceFailure(f"snapshot {filename} is malformed: {exc}") from exc

    def restore(self, store: LifecycleStore) -> None:
        """Load both snapshots into store (missing snapshots load as empty)."""
        instances = self._load(self.instances_filename, ServiceInstance)
        bindings = self._load(self.bindings_filename, ServiceBinding)
        store.load(instances, bindings)
        logger.info(f"Restored {len(instances)} instances and {len(bindings)} bindings from {self.base_path}")
