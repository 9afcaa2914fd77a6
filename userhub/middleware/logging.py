"""
模块职责：请求级日志中间件。
- 每个请求生成 request_id，并写入响应头 x-request-id；
- 记录 request_start / request_end（状态码、耗时）；
- 未处理异常记录 request_error 后继续抛出。
"""
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from userhub.infra.logger import emit, emit_error


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = rid
        path = str(request.url.path)
        start = time.perf_counter()
        emit("request_start", request_id=rid, method=request.method, path=path)
        try:
            response: Response = await call_next(request)
        except Exception as e:
            emit_error(
                "request_error",
                request_id=rid,
                method=request.method,
                path=path,
                error=repr(e),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            raise

        emit(
            "request_end",
            request_id=rid,
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        response.headers["x-request-id"] = rid
        return response
