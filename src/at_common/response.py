"""Unified API response envelope.

All API endpoints return this format:
{
    "code": 0,           // 0=success, non-0=error code
    "message": "success",
    "data": { ... },     // payload on success, error details (or null) on error
    "timestamp": "...",
    "request_id": "..."
}

`request_id` is the one RequestLogMiddleware stamped on the request, so a
collector quoting it from an error toast can be matched to the log line.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field
from starlette.requests import Request

from src.at_common.datetime_utils import utc_now


def new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


def request_id_of(request: Request | None) -> str:
    if request is None:
        return new_request_id()
    return getattr(request.state, "request_id", None) or new_request_id()


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=new_request_id)


def success_response(data: Any = None, request: Request | None = None) -> ApiResponse:
    return ApiResponse(code=0, message="success", data=data, request_id=request_id_of(request))


def error_response(
    code: int, message: str, details: Any = None, request: Request | None = None
) -> ApiResponse:
    return ApiResponse(code=code, message=message, data=details, request_id=request_id_of(request))
