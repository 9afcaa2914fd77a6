""""根据 .env 或默认值创建 / 更新一名 demo 用户（口令 bcrypt 哈希）。

可作为脚本执行，也可被测试直接导入调用（提供 run() 函数）"""
# scripts/seed.py
import os
import sys

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("PYTHONUNBUFFERED", "1")

from userhub.core.config import Settings  # noqa: E402
from userhub.core.errors import NotFoundError  # noqa: E402
from userhub.core.schemas import User, UserDraft  # noqa: E402
from userhub.core.security import PasswordHasher  # noqa: E402
from userhub.infra.db import build_engine, init_db, make_session_factory  # noqa: E402
from userhub.infra.logger import emit  # noqa: E402
from userhub.services.user_store import SqlUserStore, UserStore  # noqa: E402


def _get_env(k: str, default: str) -> str:
    v = os.getenv(k)
    return v if v is not None and v != "" else default


def upsert_user(store: UserStore, hasher: PasswordHasher, name: str, email: str, password: str) -> User:
    try:
        u = store.get_by_email(email)
    except NotFoundError:
        u = store.create(UserDraft(name=name, email=email, password=hasher.hash(password)))
        action = "created"
    else:
        u = store.update(u.model_copy(update={"name": name, "password": hasher.hash(password)}))
        action = "updated"

    emit("seed_user_upsert", email=email, action=action)
    print(f"[seed] {action} user: {email}", flush=True)
    return u


def run(settings: Settings = None) -> User:
    settings = settings or Settings.from_env()
    emit("seed_begin", database_url=settings.database_url)

    engine = build_engine(settings)
    try:
        init_db(engine)
        store = SqlUserStore(make_session_factory(engine))
        user = upsert_user(
            store,
            PasswordHasher(settings.password_hash_rounds),
            _get_env("DEMO_NAME", "demo"),
            _get_env("DEMO_EMAIL", "demo@userhub.dev"),
            _get_env("DEMO_PASSWORD", "demo123"),
        )
    finally:
        engine.dispose()

    emit("seed_done", status="ok")
    return user


if __name__ == "__main__":
    try:
        run()
        sys.exit(0)
    except Exception as e:
        emit("seed_error", error=str(e))
        print(f"[seed] ERROR: {e}", file=sys.stderr, flush=True)
        sys.exit(1)
