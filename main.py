import asyncio
import logging
import random
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.controllers.server_controller import ServerController
from app.controllers.system_controller import SystemController
from app.services.panels import build_panel
from app.services.panels.base import PanelAdapter
from core.config import Settings, load_settings
from core.errors import ManagerError

# Router Imports
from routes import servers, status, system

logger = logging.getLogger("main")


def _log_loop_exception(loop, context):
    # Background tasks must never take the process down
    exc = context.get("exception")
    logger.error(f"Unhandled error in background task: {context.get('message')}", exc_info=exc)


def create_app(settings: Optional[Settings] = None, panel: Optional[PanelAdapter] = None, rng: Optional[random.Random] = None) -> FastAPI:
    settings = settings or load_settings()
    panel = panel or build_panel(settings, rng=rng)

    app = FastAPI(title="Game Server Manager")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.panel = panel
    app.state.server_controller = ServerController(panel)
    app.state.system_controller = SystemController(panel)

    # Include API Routers
    app.include_router(system.router)
    app.include_router(servers.router)
    app.include_router(status.router)

    @app.exception_handler(ManagerError)
    async def manager_error_handler(request: Request, exc: ManagerError):
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = "; ".join(f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors())
        return JSONResponse(status_code=400, content={"success": False, "message": f"Invalid request: {errors}"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})

    @app.on_event("startup")
    async def startup_event():
        asyncio.get_running_loop().set_exception_handler(_log_loop_exception)
        logger.info(f"Using '{panel.name}' backend")
        await panel.connect()

    @app.on_event("shutdown")
    async def shutdown_event():
        await panel.close()

    return app

