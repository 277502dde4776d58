from abc import ABC, abstractmethod
from typing import Any, Optional, Set


class PersistenceAdapter(ABC):
    """
    Per-user key-value storage.

    Adapters are built from ``(context, identity)``: ``context`` is whatever the
    caller has at hand for the current request (usually an object with a
    ``session`` mapping) and ``identity`` names the user explicitly. Adapters
    that can be looked up by identity alone also implement ``find``.
    """

    def __init__(self, context: Any = None, identity: Any = None):
        self.context = context
        self.identity = identity

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> Any:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def keys(self) -> Set[str]:
        ...

    def close(self) -> None:
        """Releases backend resources held by this adapter."""

    def __getitem__(self, key: str) -> Optional[Any]:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        self.delete(key)
