"""Maps adapter selectors (``"redis"``, ``"sql"``, ...) to adapter classes."""

import logging
from typing import Any, Callable, Dict, Optional, Type

from abmembership.core.settings import config_settings
from .base import PersistenceAdapter
from .dual_adapter import DualAdapter
from .memory_adapter import MemoryAdapter
from .redis_adapter import RedisAdapter
from .session_adapter import SessionAdapter
from .sql_adapter import SqlAdapter

logger = logging.getLogger(__name__)

ADAPTERS: Dict[str, Type[PersistenceAdapter]] = {
    "session": SessionAdapter,
    "memory": MemoryAdapter,
    "redis": RedisAdapter,
    "sql": SqlAdapter,
    "dual_adapter": DualAdapter,
}

# Backends whose stored state can be loaded from an identity alone.
FINDERS: Dict[str, Callable[[Any], PersistenceAdapter]] = {
    "memory": MemoryAdapter.find,
    "redis": RedisAdapter.find,
    "sql": SqlAdapter.find,
}


def adapter_class(selector: Optional[str] = None) -> Type[PersistenceAdapter]:
    """Adapter class for ``selector``, or for the PERSISTENCE_ADAPTER setting."""
    selector = selector or config_settings.PERSISTENCE_ADAPTER
    try:
        return ADAPTERS[selector]
    except KeyError:
        raise ValueError(f"Unknown persistence adapter: {selector!r}") from None


def find_adapter(selector: str, identity: Any) -> Optional[PersistenceAdapter]:
    """
    Loads the stored state of ``identity`` from the ``selector`` backend.

    Returns None when the selector is unknown or its adapter cannot be found
    by identity alone.
    """
    if selector not in ADAPTERS:
        logger.warning("Unknown persistence adapter %r", selector)
        return None

    finder = FINDERS.get(selector)
    if finder is None:
        logger.debug("Adapter %r does not support lookup by identity", selector)
        return None

    return finder(identity)
