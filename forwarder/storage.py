"""
Wavefront storage driver.

Receives container stats from the monitoring host and forwards them to a
Wavefront proxy as line protocol, at most once per interval per container.

Environment variables read at construction:
    WF_INTERVAL=10 - the number of seconds between flushes of one container
    WF_ADD_TAGS='az="us-west-2" app="cadvisortesting"' - tags added to all metrics
    WF_PREFIX=cadvisor. - prefix of every metric name
"""
import logging
import time
from datetime import datetime
from typing import Callable, Optional

import pytz

from .config import AdapterConfig
from .encoder import encode
from .formatter import format_series
from .models import ContainerReference, ContainerStats
from .registry import register_storage_driver
from .sink import ConnectionSink, SinkWriteError
from .throttle import FlushThrottle

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(pytz.UTC)


class WavefrontStorage:
    """Storage driver forwarding container stats to a Wavefront proxy."""

    def __init__(
        self,
        config: AdapterConfig,
        sink: ConnectionSink,
        clock: Optional[Callable[[], datetime]] = None,
        monotonic: Optional[Callable[[], float]] = None
    ):
        """
        Initialize the driver.

        Args:
            config (AdapterConfig): Driver settings
            sink (ConnectionSink): Connected sink the lines are written to
            clock (callable, optional): Returns the current aware datetime. Defaults to UTC now.
            monotonic (callable, optional): Returns seconds from a monotonic clock for
                throttling. Defaults to time.monotonic.
        """
        self.config = config
        self.sink = sink
        self.throttle = FlushThrottle(config.interval)
        self._clock = clock or _utc_now
        self._monotonic = monotonic or time.monotonic

    def add_stats(self, ref: ContainerReference, stats: Optional[ContainerStats]) -> None:
        """
        Forward one snapshot of a container if its interval has passed.

        Args:
            ref (ContainerReference): The container the snapshot belongs to
            stats (ContainerStats, optional): The snapshot; None is ignored

        Raises:
            SinkWriteError: If a line could not be written. Lines written
                before the failure stay sent and the flush is not undone.
        """
        if stats is None:
            logger.debug("No stats for %s, skipping", ref.name)
            return

        container_name = ref.display_name
        # Only send to Wavefront if the interval has passed for this container.
        if not self.throttle.should_flush(container_name, self._monotonic()):
            return

        timestamp = int(self._clock().timestamp())
        series = encode(stats)

        written = 0
        try:
            for line in format_series(series, timestamp, self.config, ref):
                self.sink.write(line)
                written += 1
        except SinkWriteError as e:
            logger.error(
                "Failed to send stats for %s after %d of %d lines: %s",
                container_name, written, len(series), str(e)
            )
            raise

        logger.debug("Sent %d metrics for %s", written, container_name)

    # Name used by hosts that push snapshots rather than store them
    push = add_stats

    def close(self) -> None:
        """Release the connection to the proxy."""
        self.sink.close()


def new_storage(source: str, proxy_address: str, **overrides) -> WavefrontStorage:
    """
    Create a driver connected to a Wavefront proxy.

    Args:
        source (str): Value of the source tag
        proxy_address (str): host:port of the proxy
        **overrides: interval, add_tags, prefix or connect_timeout, taking
            precedence over the WF_* environment variables

    Returns:
        WavefrontStorage: The connected driver

    Raises:
        SinkConnectionError: If the proxy cannot be reached within the timeout
    """
    config = AdapterConfig.from_env(source, proxy_address, **overrides)
    sink = ConnectionSink.connect(config.proxy_address, timeout=config.connect_timeout)
    logger.info(
        "Wavefront storage ready: source=%s interval=%ss prefix=%s",
        config.source, config.interval, config.prefix
    )
    return WavefrontStorage(config, sink)


register_storage_driver('wavefront', new_storage)
