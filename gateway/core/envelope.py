from typing import Any, Optional
from starlette.responses import JSONResponse


def success(result: Any) -> JSONResponse:
    # backend owns the shape, including the conventional "success": true
    return JSONResponse(result)


def failure(message: str, status_code: int, detail: Optional[str] = None) -> JSONResponse:
    content = {"success": False, "message": message}
    if detail is not None:
        content["error"] = detail
    return JSONResponse(content, status_code=status_code)


def not_found() -> JSONResponse:
    return failure("Route not found", 404)


def internal_error(detail: Optional[str] = None) -> JSONResponse:
    return failure("Internal server error", 500, detail=detail)
