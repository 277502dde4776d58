from typing import Any, Callable, Optional, Set, Union

import redis

from abmembership.core.settings import config_settings
from .base import PersistenceAdapter


_redis: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.Redis.from_url(config_settings.REDIS_URL, decode_responses=True)
    return _redis


def set_redis(client: Optional[redis.Redis]) -> None:
    """Replace the shared client (None drops it so the next call reconnects)."""
    global _redis
    _redis = client


class RedisAdapter(PersistenceAdapter):
    """
    Stores each user's keys in one Redis hash named ``<namespace>:<identity>``.

    When no identity is given it is taken from the context through
    ``lookup_by``: either a callable receiving the context or the name of an
    attribute on it. Values come back as strings.
    """

    config = {
        "namespace": config_settings.PERSISTENCE_NAMESPACE,
        "lookup_by": None,
        "expire_seconds": config_settings.REDIS_EXPIRE_SECONDS,
    }

    def __init__(self, context: Any = None, identity: Any = None):
        if identity is None:
            identity = self._lookup(context)
        super().__init__(context, identity)
        self.redis_key = f"{self.config['namespace']}:{identity}"
        self.redis = get_redis()

    @classmethod
    def configure(
        cls,
        namespace: Optional[str] = None,
        lookup_by: Union[Callable[[Any], Any], str, None] = None,
        expire_seconds: Optional[int] = None,
    ) -> None:
        # copied so subclasses do not share the parent's settings
        config = dict(cls.config)
        if namespace is not None:
            config["namespace"] = namespace
        if lookup_by is not None:
            config["lookup_by"] = lookup_by
        if expire_seconds is not None:
            config["expire_seconds"] = expire_seconds
        cls.config = config

    @classmethod
    def find(cls, identity: Any) -> "RedisAdapter":
        return cls(None, identity)

    def _lookup(self, context: Any) -> Any:
        lookup_by = self.config.get("lookup_by")
        if lookup_by is None:
            raise ValueError("RedisAdapter needs an identity or a configured lookup_by")
        if callable(lookup_by):
            return lookup_by(context)
        return getattr(context, lookup_by)

    def get(self, key: str) -> Optional[Any]:
        return self.redis.hget(self.redis_key, key)

    def set(self, key: str, value: Any) -> Any:
        self.redis.hset(self.redis_key, key, str(value))
        expire_seconds = self.config.get("expire_seconds")
        if expire_seconds:
            self.redis.expire(self.redis_key, expire_seconds)
        return value

    def delete(self, key: str) -> None:
        self.redis.hdel(self.redis_key, key)

    def keys(self) -> Set[str]:
        return set(self.redis.hkeys(self.redis_key))
