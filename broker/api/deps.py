from fastapi import HTTPException

from broker.controller import BrokerController

# Will be injected by service.py (or by tests)
_controller: BrokerController | None = None


def set_controller(controller: BrokerController | None) -> None:
    """Set the controller reference served by the API routers"""
    global _controller
    _controller = controller


def has_controller() -> bool:
    return _controller is not None


def get_controller() -> BrokerController:
    if _controller is None:
        raise HTTPException(status_code=503, detail="Broker controller is not initialized")
    return _controller
