from fastapi import Request

from app.controllers.server_controller import ServerController
from app.controllers.system_controller import SystemController


def get_server_controller(request: Request) -> ServerController:
    return request.app.state.server_controller


def get_system_controller(request: Request) -> SystemController:
    return request.app.state.system_controller
