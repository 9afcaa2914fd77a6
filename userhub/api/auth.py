# userhub/api/auth.py
"""
认证路由（挂载前缀 /auth）：
- POST /auth/login      {email, password} → {access_token, token_type:"Bearer"}
- GET  /auth/authorize  Bearer → 当前用户

日志事件：
- auth_login_attempt：收到登录请求（不记录明文密码）
- 失败 / 成功事件由 AuthService 发出
"""
from fastapi import APIRouter, Depends, Request

from userhub.api.deps.auth import get_auth_service, get_current_user
from userhub.api.responses import ok
from userhub.core.schemas import LoginInput, User
from userhub.infra.logger import emit
from userhub.services.auth import AuthService

router = APIRouter()


@router.post("/login")
def login(body: LoginInput, request: Request, auth: AuthService = Depends(get_auth_service)):
    emit(
        "auth_login_attempt",
        email=body.email,
        ip=str(request.client.host) if request.client else None,
        ua=request.headers.get("user-agent"),
    )
    return ok(auth.sign_in(body))


@router.get("/authorize")
def authorize(user: User = Depends(get_current_user)):
    emit("auth_whoami", user_id=user.id)
    return ok(user)
