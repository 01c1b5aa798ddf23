"""
Registry of storage drivers by name.
"""
import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

_drivers: Dict[str, Callable[..., Any]] = {}


def register_storage_driver(name: str, factory: Callable[..., Any]) -> None:
    """
    Register a storage driver factory.

    Args:
        name (str): Name used to select the driver, e.g. "wavefront"
        factory (callable): Returns a driver with add_stats() and close()
    """
    if name in _drivers:
        logger.warning("Storage driver %s registered twice, replacing", name)
    _drivers[name] = factory
    logger.debug("Registered storage driver: %s", name)


def new_storage_driver(name: str, *args, **kwargs) -> Any:
    """
    Create a driver by its registered name.

    Raises:
        ValueError: If no driver is registered under name
    """
    factory = _drivers.get(name)
    if factory is None:
        available = get_available_drivers()
        raise ValueError(
            f"Unknown storage driver: {name}. Available drivers: {available if available else 'None'}"
        )
    return factory(*args, **kwargs)


def get_available_drivers() -> List[str]:
    return sorted(_drivers)
