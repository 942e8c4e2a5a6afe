import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.controllers.server_controller import ServerController
from routes.deps import get_server_controller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/status", tags=["Status"])


@router.get("/{address}")
async def get_public_status(address: str, controller: ServerController = Depends(get_server_controller)):
    """Public status page lookup by host:port. Unknown addresses read as offline."""
    try:
        return await controller.get_public_status(address)
    except Exception as e:
        logger.exception(f"Status lookup for {address} failed")
        return JSONResponse(status_code=500, content={"status": "error", "message": str(e)})
