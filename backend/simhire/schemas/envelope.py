from pydantic import BaseModel
from typing import Any, Optional


class Envelope(BaseModel):
    """Wrapper every API response is returned in."""

    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    errors: Optional[list[Any]] = None
    code: Optional[str] = None


def success_response(data: Any = None, message: Optional[str] = None) -> dict:
    response: dict = {"success": True}
    if message:
        response["message"] = message
    if data is not None:
        response["data"] = data
    return response


def error_response(
    message: str,
    code: Optional[str] = None,
    errors: Optional[list[Any]] = None,
) -> dict:
    response: dict = {"success": False, "message": message}
    if errors:
        response["errors"] = errors
    if code:
        response["code"] = code
    return response
