# userhub/infra/db.py
""""模块职能：

根据 Settings 创建 SQLAlchemy 引擎（连接池 + 每次调用的超时）

make_session_factory()：每次存储调用创建并释放一个 Session

init_db()：启动时统一建表"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from userhub.core.config import Settings
from userhub.core.models import Base


def _connect_args(url: str, timeout: float) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": timeout}
    if url.startswith("postgresql"):
        # 连接超时 + 语句超时，单次往返不会无限等待
        return {"connect_timeout": max(1, int(timeout)), "options": f"-c statement_timeout={int(timeout * 1000)}"}
    return {}


def build_engine(settings: Settings) -> Engine:
    url = settings.database_url
    kwargs = {"connect_args": _connect_args(url, settings.db_timeout_seconds), "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=settings.db_pool_size, pool_timeout=settings.db_timeout_seconds)
    return create_engine(url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine):
    Base.metadata.create_all(bind=engine)
