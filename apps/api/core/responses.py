"""Response envelope shared by every endpoint.

Success: ``{"success": true, "data": ..., "message": ...}``
Failure: ``{"success": false, "error": {"code", "message", "errors"?, "requestId"?}}``
"""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(
    data: Any = None,
    message: str = "Success",
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": True, "data": data, "message": message}),
    )


def error_response(
    status_code: int,
    error: dict[str, Any],
    *,
    request_id: str | None = None,
) -> JSONResponse:
    if request_id:
        error = {**error, "requestId": request_id}
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"success": False, "error": error}),
    )
