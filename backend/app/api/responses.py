"""
Response Envelope
Every API response body is ``{success, data?, message?, error?, errors?}``.
The status code is always supplied by the caller.
"""

from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.responses import JSONResponse

from app.schemas.common import Envelope


def _envelope_response(envelope: Envelope, status_code: int) -> JSONResponse:
    return JSONResponse(
        content=envelope.model_dump(mode="json", exclude_unset=True),
        status_code=status_code,
    )


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    fields: Dict[str, Any] = {"success": True, "data": data}
    if message:
        fields["message"] = message
    return _envelope_response(Envelope(**fields), status_code)


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    errors: Optional[Dict[str, List[str]]] = None,
) -> JSONResponse:
    fields: Dict[str, Any] = {"success": False, "error": message}
    if errors:
        fields["errors"] = errors
    return _envelope_response(Envelope(**fields), status_code)


def not_found_response(message: str = "Resource not found") -> JSONResponse:
    return error_response(message, status.HTTP_404_NOT_FOUND)


def validation_error_response(errors: Dict[str, List[str]]) -> JSONResponse:
    return error_response("Validation failed", 422, errors)
