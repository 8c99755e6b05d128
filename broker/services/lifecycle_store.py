"""
Lifecycle Store

In-memory source of truth for service instances and bindings.
Answers the existence and equality questions the broker front end asks
before it decides whether a request is new, a replay, or a conflict.

All access goes through one re-entrant lock; engines hold it via locked()
for the whole of a mutating operation.
"""

import threading
from collections.abc import Mapping
from contextlib import contextmanager
from numbers import Number
from typing import Any, Dict, Iterator, Optional

from broker.models import ServiceBinding, ServiceInstance


def values_equal(left: Any, right: Any) -> bool:
    """
    Deep structural equality over JSON-like values.

    Mappings compare by key set and per-key value, sequences element-wise,
    numbers by value. Booleans only ever equal booleans.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if left is None or right is None:
        return left is None and right is None

    if isinstance(left, Number) and isinstance(right, Number):
        return left == right

    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right

    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(values_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))

    return False


class LifecycleStore:
    """
    Holds instance-id -> ServiceInstance and binding-id -> ServiceBinding.
    """

    def __init__(
        self,
        instances: Optional[Dict[str, ServiceInstance]] = None,
        bindings: Optional[Dict[str, ServiceBinding]] = None,
    ):
        self._lock = threading.RLock()
        self._instances: Dict[str, ServiceInstance] = dict(instances or {})
        self._bindings: Dict[str, ServiceBinding] = dict(bindings or {})

    @contextmanager
    def locked(self) -> Iterator["LifecycleStore"]:
        with self._lock:
            yield self

    def load(self, instances: Dict[str, ServiceInstance], bindings: Dict[str, ServiceBinding]) -> None:
        """Replace both mappings, e.g. with state restored at startup."""
        with self._lock:
            self._instances = dict(instances)
            self._bindings = dict(bindings)

    # ========================================================================
    # INSTANCES
    # ========================================================================

    def instance_exists(self, instance_id: str) -> bool:
        with self._lock:
            return instance_id in self._instances

    def instance_properties_match(self, instance_id: str, candidate: ServiceInstance) -> bool:
        with self._lock:
            existing = self._instances.get(instance_id)
        if existing is None:
            return False
        if existing.plan_id != candidate.plan_id:
            return False
        if existing.space_guid != candidate.space_guid:
            return False
        if existing.organization_guid != candidate.organization_guid:
            return False
        return values_equal(existing.parameters, candidate.parameters)

    def get_instance(self, instance_id: str) -> Optional[ServiceInstance]:
        with self._lock:
            return self._instances.get(instance_id)

    def put_instance(self, instance: ServiceInstance) -> None:
        with self._lock:
            self._instances[instance.id] = instance

    def remove_instance(self, instance_id: str) -> None:
        with self._lock:
            self._instances.pop(instance_id, None)

    def instance_snapshot(self) -> Dict[str, ServiceInstance]:
        with self._lock:
            return dict(self._instances)

    # ========================================================================
    # BINDINGS
    # ========================================================================

    def binding_exists(self, instance_id: str, binding_id: str) -> bool:
        # Bindings are keyed globally; instance_id is not consulted.
        with self._lock:
            return binding_id in self._bindings

    def binding_properties_match(self, instance_id: str, binding_id: str, candidate: ServiceBinding) -> bool:
        # Parameters are deliberately left out of the comparison.
        with self._lock:
            existing = self._bindings.get(binding_id)
        if existing is None:
            return False
        return (
            existing.app_guid == candidate.app_guid
            and existing.plan_id == candidate.plan_id
            and existing.service_id == candidate.service_id
            and existing.service_instance_id == candidate.service_instance_id
            and existing.id == candidate.id
        )

    def get_binding(self, binding_id: str) -> Optional[ServiceBinding]:
        with self._lock:
            return self._bindings.get(binding_id)

    def put_binding(self, binding_id: str, binding: ServiceBinding) -> None:
        with self._lock:
            self._bindings[binding_id] = binding

    def remove_binding(self, binding_id: str) -> None:
        with self._lock:
            self._bindings.pop(binding_id, None)

    def binding_snapshot(self) -> Dict[str, ServiceBinding]:
        with self._lock:
            return dict(self._bindings)
