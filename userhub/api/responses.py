# userhub/api/responses.py
"""
统一响应信封：{ok: bool, data?: T, error?: str}

- ok(data)：成功，HTTP 200
- fail(status, message)：失败信封
- install_error_handlers(app)：领域错误 / 校验错误 / HTTPException → 信封；
  5xx 只返回通用文案，细节写日志。
"""
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from userhub.core.errors import AppError
from userhub.infra.logger import emit, emit_error

INTERNAL_ERROR = "internal server error"


def _dump(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, (list, tuple)):
        return [_dump(d) for d in data]
    return data


def ok(data: Any = None) -> JSONResponse:
    body = {"ok": True}
    if data is not None:
        body["data"] = _dump(data)
    return JSONResponse(status_code=200, content=body)


def fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message})


def _request_id(request: Request):
    return getattr(request.state, "request_id", None)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


def install_error_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            emit_error("app_error", request_id=_request_id(request), code=exc.code, error=str(exc.__cause__ or exc))
            return fail(exc.status_code, INTERNAL_ERROR)
        emit("app_error", level="WARNING", request_id=_request_id(request), code=exc.code, status=exc.status_code)
        return fail(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        emit("request_invalid", level="WARNING", request_id=_request_id(request), path=str(request.url.path))
        return fail(400, _validation_message(exc))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return fail(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        emit_error("unhandled_error", request_id=_request_id(request), error=repr(exc))
        return fail(500, INTERNAL_ERROR)
