"""
Broker Service Entrypoint

FastAPI application exposing the share broker over the Open Service Broker
v2 paths. Startup validates the profile, configures logging and restores
persisted instance and binding state.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from broker import config
from broker.api import bindings, catalog, deps, instances
from broker.config import BrokerSettings
from broker.controller import build_controller
from broker.errors import BackendUnavailable, BindingNotFound, InvalidBindingParameters, PersistenceFailure
from broker.startup_profile import StartupProfile, validate_broker_profile
from shared.logging_config import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Share Broker Service")

app.include_router(catalog.router)
app.include_router(instances.router)
app.include_router(bindings.router)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"description": str(exc)})


@app.exception_handler(BindingNotFound)
def binding_not_found_handler(request: Request, exc: BindingNotFound):
    return _error(404, exc)


@app.exception_handler(InvalidBindingParameters)
def invalid_parameters_handler(request: Request, exc: InvalidBindingParameters):
    return _error(400, exc)


@app.exception_handler(BackendUnavailable)
def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
    logger.error(f"Backend unavailable during {request.method} {request.url.path}: {exc}")
    return _error(500, exc)


@app.exception_handler(PersistenceFailure)
def persistence_failure_handler(request: Request, exc: PersistenceFailure):
    logger.error(f"Persistence failure during {request.method} {request.url.path}: {exc}")
    return _error(500, exc)


@app.on_event("startup")
def startup_init():
    """Validate settings and build the controller unless one was injected"""
    setup_logging("broker", level=config.LOG_LEVEL, log_file=config.LOG_FILE)

    if deps.has_controller():
        logger.info("Broker controller already injected, skipping build")
        return

    settings = BrokerSettings()
    validate_broker_profile(
        StartupProfile(role="BROKER", host=config.BIND_HOST, port=config.API_PORT),
        persistence=settings.persistence,
        data_dir=settings.data_dir,
    )
    deps.set_controller(build_controller(settings))
    logger.info("Broker service startup complete")


@app.on_event("shutdown")
def shutdown_cleanup():
    deps.set_controller(None)
    logger.info("Broker service shutdown complete")


@app.get("/")
def root():
    return {
        "service": "sharebroker",
        "message": "Share broker service running",
    }
