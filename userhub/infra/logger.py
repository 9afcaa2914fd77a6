"""
模块职责：统一日志配置与结构化输出（JSON 一行）。
- configure_logging(settings): 控制台 + 可选按天滚动文件；uvicorn 日志合流。
- emit(event, **kwargs) / emit_error(event, **kwargs): 结构化事件，便于检索。

约定：不记录明文密码与 token。
"""
import json
import logging
import os
import pathlib
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler

from userhub.core.config import Settings

_configured = False
_app_logger = logging.getLogger("userhub")


def configure_logging(settings: Settings):
    global _configured
    if _configured:
        return

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root.addHandler(console)

    if settings.log_to_file:
        pathlib.Path(settings.log_dir).mkdir(parents=True, exist_ok=True)
        fileh = TimedRotatingFileHandler(
            os.path.join(settings.log_dir, settings.log_file),
            when=settings.log_rotate_when,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        fileh.setLevel(level)
        # 文件里只写 message（纯 JSON）
        fileh.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(fileh)

    root.setLevel(level)

    for ln in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(ln)
        lg.handlers = []
        lg.propagate = True

    _configured = True


def _now_iso():
    return datetime.now().astimezone().isoformat(timespec="milliseconds")


def _record(level: str, event: str, fields: dict) -> str:
    rec = {"ts": _now_iso(), "level": level, "event": event, **fields}
    try:
        return json.dumps(rec, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(rec)


def emit(event: str, level: str = "INFO", **kwargs):
    """
    结构化日志：默认 INFO。
    用法：emit("user_created", user_id=..., email=...)
    """
    _app_logger.log(getattr(logging, level, logging.INFO), _record(level, event, kwargs))


def emit_error(event: str, **kwargs):
    """错误日志（level=ERROR）。用法：emit_error("db_error", error=str(e))"""
    _app_logger.error(_record("ERROR", event, kwargs))
