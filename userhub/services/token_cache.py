"""
模块职能：
- 不透明令牌网关（TokenCache 接口）：generate / save / resolve。
- RedisTokenCache：键 token:<token> → user_id，SETEX 写入，TTL 必设。
- MemoryTokenCache：进程内实现（测试 / 本地调试），同样按 TTL 过期。

错误：
- Redis 异常 → TokenStoreError

日志：
- token_saved / cache_error（均不记录 token 本身）
"""
from __future__ import annotations

import secrets
import threading
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from redis import Redis, RedisError

from userhub.core.errors import TokenStoreError
from userhub.infra.logger import emit, emit_error

KEY_PREFIX = "token:"


def token_key(token: str) -> str:
    return f"{KEY_PREFIX}{token}"


def generate_token() -> str:
    return secrets.token_urlsafe(32)


class TokenCache(Protocol):
    def generate(self) -> str: ...
    def save(self, token: str, subject: str) -> None: ...
    def resolve(self, token: str) -> Optional[str]: ...


class RedisTokenCache:
    def __init__(self, client: Redis, ttl_seconds: int):
        self._client = client
        self._ttl = ttl_seconds

    def generate(self) -> str:
        return generate_token()

    def save(self, token: str, subject: str) -> None:
        try:
            self._client.setex(name=token_key(token), time=self._ttl, value=subject)
        except RedisError as e:
            emit_error("cache_error", op="save", error=str(e))
            raise TokenStoreError("token store error") from e
        emit("token_saved", subject=subject, ttl=self._ttl)

    def resolve(self, token: str) -> Optional[str]:
        try:
            return self._client.get(name=token_key(token))
        except RedisError as e:
            emit_error("cache_error", op="resolve", error=str(e))
            raise TokenStoreError("token store error") from e


class MemoryTokenCache:
    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def generate(self) -> str:
        return generate_token()

    def save(self, token: str, subject: str) -> None:
        with self._lock:
            self._entries[token_key(token)] = (subject, self._clock() + self._ttl)

    def resolve(self, token: str) -> Optional[str]:
        key = token_key(token)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            subject, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return subject
