from fastapi import APIRouter, Depends

from app.controllers.system_controller import SystemController
from app.schemas import HealthResponse
from routes.deps import get_system_controller

router = APIRouter(prefix="/api", tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health(controller: SystemController = Depends(get_system_controller)):
    return await controller.get_health()
