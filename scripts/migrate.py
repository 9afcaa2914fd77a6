""""轻量迁移：创建 users 表（若不存在），不修改既有表。

用 SQLAlchemy 的 Base.metadata.create_all()，幂等。
可作为脚本执行，也可被测试直接导入调用（提供 run() 函数）。"""

# scripts/migrate.py
import os
import sys

# 确保脚本在控制台有输出；不影响主服务的日志设置
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("PYTHONUNBUFFERED", "1")

from userhub.core.config import Settings  # noqa: E402
from userhub.infra.db import build_engine, init_db  # noqa: E402
from userhub.infra.logger import emit  # noqa: E402


def run(settings: Settings = None):
    settings = settings or Settings.from_env()
    emit("migrate_users_begin", database_url=settings.database_url)
    print("[migrate] creating tables if not exists ...", flush=True)
    engine = build_engine(settings)
    try:
        init_db(engine)
    finally:
        engine.dispose()
    emit("migrate_users_done", status="ok")
    print("[migrate] done.", flush=True)


if __name__ == "__main__":
    try:
        run()
        sys.exit(0)
    except Exception as e:
        emit("migrate_users_error", error=str(e))
        print(f"[migrate] ERROR: {e}", file=sys.stderr, flush=True)
        sys.exit(1)
