from fastapi import APIRouter, Depends

from broker.api.deps import get_controller
from broker.controller import BrokerController

router = APIRouter(prefix="/v2", tags=["catalog"])


@router.get("/catalog")
def get_catalog(controller: BrokerController = Depends(get_controller)):
    return controller.get_catalog().model_dump()
