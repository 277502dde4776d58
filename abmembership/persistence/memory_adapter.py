from typing import Any, Dict, Optional, Set

from .base import PersistenceAdapter


class MemoryAdapter(PersistenceAdapter):
    """Process-local storage, shared by every adapter with the same identity."""

    _users: Dict[str, Dict[str, Any]] = {}

    def __init__(self, context: Any = None, identity: Any = None):
        super().__init__(context, identity)
        if identity is None:
            raise ValueError("MemoryAdapter requires a user identity")
        self._store = self._users.setdefault(str(identity), {})

    @classmethod
    def find(cls, identity: Any) -> "MemoryAdapter":
        return cls(None, identity)

    @classmethod
    def clear(cls) -> None:
        cls._users.clear()

    def get(self, key: str) -> Optional[Any]:
        return self._store.get(key)

    def set(self, key: str, value: Any) -> Any:
        self._store[key] = value
        return value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> Set[str]:
        return set(self._store.keys())
