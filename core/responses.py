# core/responses.py
from typing import Any, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from core.exceptions import AppException
from settings.config import settings

# historical envelope shapes
MESSAGE_STYLE = "message"   # {message, messageType, data}
STATUS_STYLE = "status"     # {success, message, code, data}

class ApiResult(BaseModel):
    success: bool
    status_code: int = 200
    message: str = ""
    code: Optional[str] = None
    data: Any = None
    fields: list[str] = []

def ok(message: str, data: Any = None, status_code: int = 200, code: str | None = None) -> ApiResult:
    return ApiResult(success=True, status_code=status_code, message=message, code=code, data=data)

def fail(status_code: int, code: str, message: str, fields: list[str] | None = None) -> ApiResult:
    return ApiResult(success=False, status_code=status_code, message=message, code=code, fields=fields or [])

def from_exception(exc: AppException) -> ApiResult:
    return fail(exc.status_code, exc.code, exc.detail, exc.fields)

def render(result: ApiResult, style: str = MESSAGE_STYLE) -> dict:
    """
    Build the response body for a result.
    RESPONSE_STYLE other than "legacy" forces the same envelope for every route.
    """
    if settings.RESPONSE_STYLE in (MESSAGE_STYLE, STATUS_STYLE):
        style = settings.RESPONSE_STYLE
    if style == STATUS_STYLE:
        body = {"success": result.success, "message": result.message}
        if result.code:
            body["code"] = result.code
        if result.fields:
            body["fields"] = result.fields
        if result.data is not None:
            body["data"] = result.data
        return body
    body = {
        "message": result.message,
        "messageType": "success" if result.success else "failure",
        "data": result.data,
    }
    if not result.success and result.code:
        body["code"] = result.code
    if result.fields:
        body["fields"] = result.fields
    return body

def respond(result: ApiResult, style: str = MESSAGE_STYLE) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(render(result, style)))
