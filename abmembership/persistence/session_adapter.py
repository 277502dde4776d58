from typing import Any, Optional, Set

from abmembership.core.settings import config_settings
from .base import PersistenceAdapter


class SessionAdapter(PersistenceAdapter):
    """Keeps the user's keys in the request session (``context.session``)."""

    def __init__(self, context: Any = None, identity: Any = None):
        super().__init__(context, identity)
        session = context.session
        session.setdefault(config_settings.SESSION_KEY, {})
        self._store = session[config_settings.SESSION_KEY]

    def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    def set(self, key: str, value: Any) -> Any:
        self._store[key] = value
        return value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> Set[str]:
        return set(self._store.keys())
