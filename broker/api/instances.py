from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from broker.api.deps import get_controller
from broker.controller import BrokerController
from broker.models import ServiceInstance

router = APIRouter(prefix="/v2/service_instances", tags=["service_instances"])


class ProvisionRequest(BaseModel):
    service_id: str = ""
    plan_id: str = ""
    organization_guid: str = ""
    space_guid: str = ""
    parameters: Optional[Dict[str, Any]] = None

    def to_instance(self) -> ServiceInstance:
        return ServiceInstance(
            service_id=self.service_id,
            plan_id=self.plan_id,
            organization_guid=self.organization_guid,
            space_guid=self.space_guid,
            parameters=self.parameters or {},
        )


@router.put("/{instance_id}")
def provision(instance_id: str, request: ProvisionRequest, controller: BrokerController = Depends(get_controller)):
    instance = request.to_instance()

    # Check and create under one lock so a racing request sees the new record.
    with controller.store.locked():
        if controller.service_instance_exists(instance_id):
            if controller.service_instance_properties_match(instance_id, instance):
                existing = controller.get_service_instance(instance_id)
                return JSONResponse(status_code=200, content={"dashboard_url": existing.dashboard_url})
            return JSONResponse(
                status_code=409,
                content={"description": f"Service instance {instance_id} already exists with different properties"},
            )

        response = controller.create_service_instance(instance_id, instance)
    return JSONResponse(status_code=201, content=response.model_dump(mode="json"))


@router.delete("/{instance_id}")
def deprovision(instance_id: str, controller: BrokerController = Depends(get_controller)):
    with controller.store.locked():
        if not controller.service_instance_exists(instance_id):
            return JSONResponse(status_code=410, content={})
        controller.delete_service_instance(instance_id)
    return {}
