from fastapi import APIRouter, Depends

from app.controllers.server_controller import ServerController
from app.schemas import MessageResponse, ServerCreate, ServerListResponse, ServerResponse
from routes.deps import get_server_controller

router = APIRouter(prefix="/api/servers", tags=["Servers"])


@router.get("", response_model=ServerListResponse)
async def list_servers(controller: ServerController = Depends(get_server_controller)):
    return {"success": True, "servers": await controller.get_all_servers()}


@router.post("", response_model=ServerResponse)
@router.post("/create", response_model=ServerResponse)
async def create_server(server_data: ServerCreate, controller: ServerController = Depends(get_server_controller)):
    server = await controller.create_server(server_data)
    return {"success": True, "message": f"Server '{server.name}' created", "server": server}


@router.get("/{server_id}", response_model=ServerResponse)
async def get_server(server_id: str, controller: ServerController = Depends(get_server_controller)):
    return {"success": True, "server": await controller.get_server(server_id)}


@router.delete("/{server_id}", response_model=MessageResponse)
async def delete_server(server_id: str, controller: ServerController = Depends(get_server_controller)):
    await controller.delete_server(server_id)
    return {"success": True, "message": f"Server {server_id} deleted"}


@router.post("/{server_id}/start", response_model=ServerResponse)
async def start_server(server_id: str, controller: ServerController = Depends(get_server_controller)):
    message, server = await controller.control_server(server_id, "start")
    return {"success": True, "message": message, "server": server}


@router.post("/{server_id}/stop", response_model=ServerResponse)
async def stop_server(server_id: str, controller: ServerController = Depends(get_server_controller)):
    message, server = await controller.control_server(server_id, "stop")
    return {"success": True, "message": message, "server": server}


@router.post("/{server_id}/restart", response_model=ServerResponse)
async def restart_server(server_id: str, controller: ServerController = Depends(get_server_controller)):
    message, server = await controller.control_server(server_id, "restart")
    return {"success": True, "message": message, "server": server}
