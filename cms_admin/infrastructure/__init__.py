from .cache import DistributedCache, RedisCache
from .locks import LocalSiteLocks, LockTimeoutError, RedisSiteLocks, SiteLocks
from .redis import RedisClient, close_redis, get_redis, init_redis

__all__ = [
    "DistributedCache",
    "LocalSiteLocks",
    "LockTimeoutError",
    "RedisCache",
    "RedisClient",
    "RedisSiteLocks",
    "SiteLocks",
    "close_redis",
    "get_redis",
    "init_redis",
]
