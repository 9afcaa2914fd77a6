"""
模块职能：
- 登录（sign_in）：按 email 查用户 → bcrypt 比对 → 签发令牌。
- 鉴权（authorize）：校验令牌 → 解析出 Identity(user_id)。
- current_user：authorize 后回库取最新用户（用户已删除视为令牌无效）。

令牌方案（每个部署只选一种，由 AUTH_TOKEN_MODE 决定）：
- JwtTokenIssuer：无状态，HS256，负载含 sub / exp
- CacheTokenIssuer：不透明随机串，经 TokenCache 存 token → user_id（带 TTL）

日志：
- auth_login_failed / auth_login_success / auth_token_rejected
"""
from __future__ import annotations

from typing import Protocol

from userhub.core.errors import NotFoundError, TokenError, WrongCredentialsError
from userhub.core.schemas import Identity, LoginInput, TokenPayload, User
from userhub.core.security import PasswordHasher, create_access_token, decode_access_token
from userhub.infra.logger import emit
from userhub.services.token_cache import TokenCache
from userhub.services.user_store import UserStore

BEARER = "Bearer"


class TokenIssuer(Protocol):
    def issue(self, user: User) -> str: ...
    def verify(self, token: str) -> Identity: ...


class JwtTokenIssuer:
    def __init__(self, secret: str, expire_minutes: int):
        self._secret = secret
        self._expire_minutes = expire_minutes

    def issue(self, user: User) -> str:
        return create_access_token(user.id, self._secret, self._expire_minutes)

    def verify(self, token: str) -> Identity:
        payload = decode_access_token(token, self._secret)
        return Identity(user_id=str(payload["sub"]))


class CacheTokenIssuer:
    def __init__(self, cache: TokenCache):
        self._cache = cache

    def issue(self, user: User) -> str:
        token = self._cache.generate()
        self._cache.save(token, user.id)
        return token

    def verify(self, token: str) -> Identity:
        subject = self._cache.resolve(token)
        if not subject:
            raise TokenError("invalid token")
        return Identity(user_id=subject)


class AuthService:
    def __init__(self, users: UserStore, issuer: TokenIssuer, hasher: PasswordHasher):
        self.users = users
        self.issuer = issuer
        self.hasher = hasher

    def sign_in(self, credential: LoginInput) -> TokenPayload:
        try:
            user = self.users.get_by_email(credential.email)
        except NotFoundError:
            emit("auth_login_failed", email=credential.email, reason="not_found_or_bad_password")
            raise WrongCredentialsError()
        if not self.hasher.verify(credential.password, user.password):
            # 不区分“用户不存在”和“口令错误”
            emit("auth_login_failed", email=credential.email, reason="not_found_or_bad_password")
            raise WrongCredentialsError()

        token = self.issuer.issue(user)
        emit("auth_login_success", user_id=user.id)
        return TokenPayload(access_token=token, token_type=BEARER)

    def authorize(self, token: str) -> Identity:
        if not token:
            raise TokenError("missing token")
        try:
            return self.issuer.verify(token)
        except TokenError as e:
            emit("auth_token_rejected", reason=e.message)
            raise

    def current_user(self, token: str) -> User:
        identity = self.authorize(token)
        try:
            return self.users.get_by_id(identity.user_id)
        except NotFoundError:
            emit("auth_token_rejected", reason="user_gone", user_id=identity.user_id)
            raise TokenError("user not found")
