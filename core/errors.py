from typing import Any, Dict, Optional


class ManagerError(Exception):
    """Base class for errors that are rendered as a JSON envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message}


class ValidationError(ManagerError):
    status_code = 400


class NotFoundError(ManagerError):
    status_code = 404

    def __init__(self, message: str = "Server not found"):
        super().__init__(message)


class StateConflictError(ManagerError):
    """The action is a no-op given the current state. Answered with 200."""

    status_code = 200

    def __init__(self, message: str, server: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.server = server

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.server is not None:
            data["server"] = self.server
        return data


class UpstreamError(ManagerError):
    """The backing panel is unreachable (503) or failed the request (500)."""

    status_code = 503


class UnsupportedOperationError(ManagerError):
    status_code = 501
