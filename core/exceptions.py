from fastapi import HTTPException, Request, status
from utils.logger import get_logger
from fastapi.responses import JSONResponse

logger = get_logger("Global_Exception")

async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path}
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal server error", "code": "INTERNAL_ERROR"}
    )

class AppException(HTTPException):
    """HTTPException carrying a stable machine-readable code next to the message."""
    def __init__(self, status_code: int, detail: str, code: str = "ERROR", fields: list[str] | None = None):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.fields = fields or []

class RequestValidationFailed(AppException):
    def __init__(self, failure):
        super().__init__(status.HTTP_400_BAD_REQUEST, failure.message, code=failure.code, fields=failure.fields)

class InvalidIdentifier(AppException):
    def __init__(self, label: str = "id"):
        super().__init__(status.HTTP_400_BAD_REQUEST, f"Invalid {label} format.", code="INVALID_ID")

class ResourceNotFound(AppException):
    def __init__(self, detail: str):
        super().__init__(status.HTTP_404_NOT_FOUND, detail, code="NOT_FOUND")

class UpstreamFailure(AppException):
    def __init__(self, code: str, detail: str = "Something went wrong"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, code=code)

class AccessDenied(AppException):
    def __init__(self, detail: str):
        super().__init__(status.HTTP_403_FORBIDDEN, detail, code="FORBIDDEN")
