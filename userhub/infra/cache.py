# userhub/infra/cache.py
"""
Redis 客户端：进程内共享一个，自带连接池，可并发使用。
socket 超时即每次缓存调用的截止时间。
"""
from redis import Redis
from redis import from_url as redis_from_url

from userhub.core.config import Settings


def build_redis(settings: Settings) -> Redis:
    return redis_from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.cache_timeout_seconds,
        socket_connect_timeout=settings.cache_timeout_seconds,
    )
