import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

'''
_error_response() - единственное место, где собирается тело ошибки.

Все хендлеры ниже отдают один формат: {success: false, error, code, path, timestamp}.
Заголовки (например WWW-Authenticate для 401) пробрасываются как есть.
'''
def _error_response(
    *,
    status_code: int,
    detail: str,
    code: str,
    request: Request,
    headers: dict | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": detail,
            "code": code,
            "path": request.url.path,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )

# Базовый класс AppError
class AppError(Exception):
    status_code = 400
    code = "app_error"
    detail = "Application error"
    headers: dict | None = None

    def __init__(self, detail: str | None = None, code: str | None = None):
        if detail is not None:
            self.detail = detail
        if code is not None:
            self.code = code
        super().__init__(self.detail)


# ================
# Кастомные ошибки
# ================

class InvalidInput(AppError):
    status_code = 400
    code = "invalid_input"
    detail = "Invalid input"


class Unauthorized(AppError):
    # Плохой токен, неподходящая роль и чужой ресурс намеренно не различаются
    status_code = 401
    code = "unauthorized"
    detail = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class NotFound(AppError):
    status_code = 404
    code = "not_found"
    detail = "Resource not found"


class StoreError(AppError):
    status_code = 500
    code = "store_error"
    detail = "Internal server error"


class SlugGenerationError(AppError):
    status_code = 500
    code = "slug_exhausted"
    detail = "Could not generate a unique slug"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _error_response(
        status_code=exc.status_code,
        detail=exc.detail,
        code=exc.code,
        request=request,
        headers=exc.headers,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(
        status_code=exc.status_code,
        detail=detail,
        code="http_error",
        request=request,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    # Ошибки формы запроса - такие же 400, как и ошибки валидатора
    errors = exc.errors()
    detail = "Validation error"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", detail)
        detail = f"{field}: {message}" if field else message
    return _error_response(
        status_code=400,
        detail=detail,
        code="validation_error",
        request=request,
    )


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> JSONResponse:
    return _error_response(
        status_code=429,
        detail=f"Rate limit exceeded: {exc.detail}",
        code="rate_limited",
        request=request,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(
        status_code=500,
        detail="Internal server error",
        code="internal_server_error",
        request=request,
    )
