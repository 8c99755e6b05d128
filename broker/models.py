"""
Broker data models.

Service instances and bindings are the records the lifecycle store keeps and
the persistence gateway snapshots; the remaining models describe the catalog
and the responses handed back to the broker front end.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# ============================================================================
# CATALOG
# ============================================================================

class ServicePlan(BaseModel):
    """Service plan offered in the catalog"""
    id: str
    name: str
    description: str
    free: bool = True
    metadata: Optional[Dict[str, Any]] = None


class Service(BaseModel):
    """Service offering"""
    id: str
    name: str
    description: str
    bindable: bool = True
    plan_updateable: bool = False
    tags: List[str] = Field(default_factory=list)
    requires: List[str] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None
    plans: List[ServicePlan]
    dashboard_client: Optional[Dict[str, Any]] = None


class Catalog(BaseModel):
    services: List[Service]

# ============================================================================
# LIFECYCLE RECORDS
# ============================================================================

class LastOperation(BaseModel):
    """Asynchronous provisioning progress descriptor"""
    state: str
    description: str = ""
    async_poll_interval_seconds: int = 0


class ServiceInstance(BaseModel):
    """Provisioned storage share, keyed by instance id"""
    id: str = ""
    service_id: str = ""
    plan_id: str = ""
    organization_guid: str = ""
    space_guid: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)
    dashboard_url: str = ""
    last_operation: Optional[LastOperation] = None


class ServiceBinding(BaseModel):
    """Access grant for one application, keyed by binding id"""
    id: str = ""
    service_instance_id: str = ""
    app_guid: str = ""
    service_id: str = ""
    plan_id: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)

# ============================================================================
# RESPONSES
# ============================================================================

class CreateServiceInstanceResponse(BaseModel):
    dashboard_url: str = ""
    last_operation: Optional[LastOperation] = None


class ShareConfig(BaseModel):
    """Backend details a volume driver needs to reach the share"""
    endpoint: str
    credential: str
    remote_mountpoint: str


class VolumeMountPrivateDetails(BaseModel):
    driver: str
    group_id: str
    config: ShareConfig


class VolumeMount(BaseModel):
    container_path: str
    mode: str = "rw"
    private: VolumeMountPrivateDetails


class Credentials(BaseModel):
    uri: str = ""


class CreateServiceBindingResponse(BaseModel):
    credentials: Credentials = Field(default_factory=Credentials)
    volume_mounts: List[VolumeMount] = Field(default_factory=list)
