# userhub/core/config.py
"""
进程级配置：启动时构造一次 Settings，由 create_app() 注入到各服务。

- 读取环境变量（main.py 已先加载 .env.example / .env）
- 秘钥优先 SECRET_KEY，其次 JWT_SECRET（老环境兜底）
- AUTH_TOKEN_MODE 选择令牌方案：jwt（默认，无状态）| opaque（Redis 存储）
"""
from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel


def _env(key: str, default: str) -> str:
    v = os.getenv(key)
    return v if v is not None and v != "" else default


class Settings(BaseModel):
    database_url: str = "sqlite:///./userhub.db"
    db_pool_size: int = 5
    db_timeout_seconds: float = 5.0

    redis_url: str = "redis://localhost:6379/0"
    cache_timeout_seconds: float = 2.0

    secret_key: str
    auth_token_mode: Literal["jwt", "opaque"] = "jwt"
    access_token_expire_minutes: int = 60
    password_hash_rounds: int = 12

    serv_host: str = "127.0.0.1"
    serv_port: int = 8080

    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"
    log_file: str = "app.log"
    log_rotate_when: str = "midnight"
    log_backup_count: int = 7

    @property
    def token_ttl_seconds(self) -> int:
        return self.access_token_expire_minutes * 60

    @classmethod
    def from_env(cls) -> "Settings":
        secret = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET")
        if not secret:
            raise RuntimeError("SECRET_KEY is not set in environment")
        return cls(
            database_url=_env("DATABASE_URL", "sqlite:///./userhub.db"),
            db_pool_size=int(_env("DB_POOL_SIZE", "5")),
            db_timeout_seconds=float(_env("DB_TIMEOUT_SECONDS", "5")),
            redis_url=_env("REDIS_URL", "redis://localhost:6379/0"),
            cache_timeout_seconds=float(_env("CACHE_TIMEOUT_SECONDS", "2")),
            secret_key=secret,
            auth_token_mode=_env("AUTH_TOKEN_MODE", "jwt").lower(),
            access_token_expire_minutes=int(_env("ACCESS_TOKEN_EXPIRE_MINUTES", "60")),
            password_hash_rounds=int(_env("PASSWORD_HASH_ROUNDS", "12")),
            serv_host=_env("SERV_HOST", "127.0.0.1"),
            serv_port=int(_env("SERV_PORT", "8080")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            log_to_file=_env("LOG_TO_FILE", "true").lower() == "true",
            log_dir=_env("LOG_DIR", "logs"),
            log_file=_env("LOG_FILE", "app.log"),
            log_rotate_when=_env("LOG_ROTATE_WHEN", "midnight"),
            log_backup_count=int(_env("LOG_BACKUP_COUNT", "7")),
        )
