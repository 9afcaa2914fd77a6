# userhub/api/deps/auth.py
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from userhub.core.errors import TokenError
from userhub.core.schemas import User
from userhub.infra.logger import emit
from userhub.services.auth import AuthService
from userhub.services.users import UserService

bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_bearer_token(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> str:
    """从 Authorization: Bearer <token> 取出令牌；缺失则 401。"""
    if not creds or not creds.credentials:
        emit("auth_missing_header")
        raise TokenError("missing bearer token")
    return creds.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """校验令牌并回库取最新用户记录。"""
    return auth.current_user(token)
