from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from broker.api.deps import get_controller
from broker.controller import BrokerController
from broker.models import ServiceBinding

router = APIRouter(prefix="/v2/service_instances", tags=["service_bindings"])


class BindResource(BaseModel):
    app_guid: Optional[str] = None


class BindRequest(BaseModel):
    service_id: str = ""
    plan_id: str = ""
    app_guid: Optional[str] = None
    bind_resource: Optional[BindResource] = None
    parameters: Optional[Dict[str, Any]] = None

    def to_binding(self, instance_id: str, binding_id: str) -> ServiceBinding:
        app_guid = self.app_guid
        if not app_guid and self.bind_resource is not None:
            app_guid = self.bind_resource.app_guid
        return ServiceBinding(
            id=binding_id,
            service_instance_id=instance_id,
            app_guid=app_guid or "",
            service_id=self.service_id,
            plan_id=self.plan_id,
            parameters=self.parameters or {},
        )


@router.put("/{instance_id}/service_bindings/{binding_id}")
def bind(
    instance_id: str,
    binding_id: str,
    request: BindRequest,
    controller: BrokerController = Depends(get_controller),
):
    binding = request.to_binding(instance_id, binding_id)

    with controller.store.locked():
        if controller.service_binding_exists(instance_id, binding_id):
            if controller.service_binding_properties_match(instance_id, binding_id, binding):
                return JSONResponse(status_code=200, content={})
            return JSONResponse(
                status_code=409,
                content={"description": f"Service binding {binding_id} already exists with different properties"},
            )

        response = controller.bind_service_instance(instance_id, binding_id, binding)
    return JSONResponse(status_code=201, content=response.model_dump(mode="json"))


@router.get("/{instance_id}/service_bindings/{binding_id}")
def get_binding(instance_id: str, binding_id: str, controller: BrokerController = Depends(get_controller)):
    return controller.get_binding(instance_id, binding_id).model_dump(mode="json")


@router.delete("/{instance_id}/service_bindings/{binding_id}")
def unbind(instance_id: str, binding_id: str, controller: BrokerController = Depends(get_controller)):
    with controller.store.locked():
        if not controller.service_binding_exists(instance_id, binding_id):
            return JSONResponse(status_code=410, content={})
        controller.unbind_service_instance(instance_id, binding_id)
    return {}
