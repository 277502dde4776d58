from typing import Any, Callable, Optional, Set, Type

from .base import PersistenceAdapter
from .redis_adapter import RedisAdapter
from .session_adapter import SessionAdapter


def _never_logged_in(context: Any) -> bool:
    return False


class DualAdapter(PersistenceAdapter):
    """
    Picks a backend per request: one for logged-in users, another for anonymous ones.

    Which one applies depends on the request context, so a dual adapter
    cannot be looked up by identity alone and provides no ``find``.
    """

    config = {
        "is_logged_in": _never_logged_in,
        "logged_in_adapter": RedisAdapter,
        "logged_out_adapter": SessionAdapter,
    }

    def __init__(self, context: Any = None, identity: Any = None):
        super().__init__(context, identity)
        if self.config["is_logged_in"](context):
            adapter_cls = self.config["logged_in_adapter"]
        else:
            adapter_cls = self.config["logged_out_adapter"]
        self.adapter: PersistenceAdapter = adapter_cls(context, identity)

    @classmethod
    def configure(
        cls,
        is_logged_in: Optional[Callable[[Any], bool]] = None,
        logged_in_adapter: Optional[Type[PersistenceAdapter]] = None,
        logged_out_adapter: Optional[Type[PersistenceAdapter]] = None,
    ) -> None:
        config = dict(cls.config)
        if is_logged_in is not None:
            config["is_logged_in"] = is_logged_in
        if logged_in_adapter is not None:
            config["logged_in_adapter"] = logged_in_adapter
        if logged_out_adapter is not None:
            config["logged_out_adapter"] = logged_out_adapter
        cls.config = config

    def get(self, key: str) -> Optional[Any]:
        return self.adapter.get(key)

    def set(self, key: str, value: Any) -> Any:
        return self.adapter.set(key, value)

    def delete(self, key: str) -> None:
        self.adapter.delete(key)

    def keys(self) -> Set[str]:
        return self.adapter.keys()

    def close(self) -> None:
        self.adapter.close()
