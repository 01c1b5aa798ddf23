"""
Configuration settings for the metrics forwarder.
"""
import logging
import os
import socket
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)


def _int_from_env(name: str, default: int) -> int:
    """
    Read an integer environment variable.

    An unparsable value is logged and replaced by the default.
    """
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %s", name, raw, default)
        return default


# Collector (Wavefront proxy) configuration
PROXY_ADDRESS = os.getenv('WF_PROXY_ADDRESS', 'localhost:2878')
SOURCE_NAME = os.getenv('WF_SOURCE', socket.gethostname())
CONNECT_TIMEOUT = 10  # seconds

# Flush configuration
INTERVAL = _int_from_env('WF_INTERVAL', 0)  # seconds between flushes per container
ADD_TAGS = os.getenv('WF_ADD_TAGS', '')  # e.g. az="us-west-2" app="cadvisortesting"
PREFIX = os.getenv('WF_PREFIX', 'cadvisor.')

# Logging configuration
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


@dataclass(frozen=True)
class AdapterConfig:
    """Static settings of one storage driver instance."""
    source: str
    proxy_address: str
    interval: int = 0
    add_tags: str = ''
    prefix: str = 'cadvisor.'
    connect_timeout: float = CONNECT_TIMEOUT

    @classmethod
    def from_env(cls, source: str, proxy_address: str, **overrides) -> 'AdapterConfig':
        """
        Build a config from the WF_* environment variables.

        Args:
            source (str): Value of the source tag on every line
            proxy_address (str): host:port of the Wavefront proxy
            **overrides: Explicit values that win over the environment

        Returns:
            AdapterConfig: The resulting configuration
        """
        config = cls(
            source=source,
            proxy_address=proxy_address,
            interval=_int_from_env('WF_INTERVAL', 0),
            add_tags=os.getenv('WF_ADD_TAGS') or '',
            prefix=os.getenv('WF_PREFIX') or 'cadvisor.',
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **overrides)
