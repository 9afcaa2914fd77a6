"""
应用入口：
- 加载 .env（先 .env.example 作默认，再用 .env 覆盖）
- create_app(settings)：组装存储网关 / 令牌方案 / 服务，挂到 app.state
- lifespan 启动阶段：配置日志 → 打印 logger_config → 建表；关闭时释放连接
- 装载请求日志中间件、错误处理、路由；提供 / 与 /health
"""
from pathlib import Path
from dotenv import load_dotenv

# 1) 先加载 .env，务必在读取配置之前
ROOT = Path(__file__).resolve().parents[1]
ENV = ROOT / ".env"
ENV_EXAMPLE = ROOT / ".env.example"
if ENV_EXAMPLE.exists():
    load_dotenv(ENV_EXAMPLE, override=False)
if ENV.exists():
    load_dotenv(ENV, override=True)

# 2) 正常导入
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from userhub.api import auth as auth_api
from userhub.api import users as users_api
from userhub.api.responses import install_error_handlers, ok
from userhub.core.config import Settings
from userhub.core.security import PasswordHasher
from userhub.infra.cache import build_redis
from userhub.infra.db import build_engine, init_db, make_session_factory
from userhub.infra.logger import configure_logging, emit
from userhub.middleware.logging import RequestLoggingMiddleware
from userhub.services.auth import AuthService, CacheTokenIssuer, JwtTokenIssuer
from userhub.services.token_cache import RedisTokenCache, TokenCache
from userhub.services.user_store import SqlUserStore, UserStore
from userhub.services.users import UserService


def create_app(
    settings: Optional[Settings] = None,
    user_store: Optional[UserStore] = None,
    token_cache: Optional[TokenCache] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    # 3) 组装：未显式传入的网关用生产实现
    engine = None
    if user_store is None:
        engine = build_engine(settings)
        user_store = SqlUserStore(make_session_factory(engine))

    redis_client = None
    if settings.auth_token_mode == "opaque":
        if token_cache is None:
            redis_client = build_redis(settings)
            token_cache = RedisTokenCache(redis_client, settings.token_ttl_seconds)
        issuer = CacheTokenIssuer(token_cache)
    else:
        issuer = JwtTokenIssuer(settings.secret_key, settings.access_token_expire_minutes)

    hasher = PasswordHasher(settings.password_hash_rounds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # startup
        configure_logging(settings)
        emit(
            "logger_config",
            to_file=settings.log_to_file, dir=settings.log_dir, file=settings.log_file,
            when=settings.log_rotate_when, backup=settings.log_backup_count,
        )
        if engine is not None:
            init_db(engine)
            emit("db_init_done")
        emit("app_ready", token_mode=settings.auth_token_mode)
        yield
        # shutdown
        if redis_client is not None:
            redis_client.close()
        if engine is not None:
            engine.dispose()
        emit("app_shutdown")

    app = FastAPI(title="userhub", lifespan=lifespan)
    app.state.settings = settings
    app.state.user_service = UserService(user_store, hasher)
    app.state.auth_service = AuthService(user_store, issuer, hasher)

    app.add_middleware(RequestLoggingMiddleware)
    install_error_handlers(app)

    @app.get("/")
    def home():
        return ok("Hello, World!")

    @app.get("/health")
    def health():
        return ok()

    app.include_router(auth_api.router, prefix="/auth", tags=["auth"])
    app.include_router(users_api.router, prefix="/users", tags=["users"])
    return app


app = create_app()


def run():
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.serv_host, port=settings.serv_port, log_config=None)


if __name__ == "__main__":
    run()
