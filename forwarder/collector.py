"""
Base collector class for producing container stats snapshots.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

from .models import ContainerReference, ContainerStats
from .sink import SinkWriteError

logger = logging.getLogger(__name__)

Snapshot = Tuple[ContainerReference, ContainerStats]


class Collector(ABC):
    """
    Abstract base class for all snapshot collectors.

    Collectors stand in for the monitoring host: they produce snapshots and
    hand them to a storage driver.
    """

    @abstractmethod
    def collect(self) -> List[Snapshot]:
        """
        Collect snapshots.

        Returns:
            list: (ContainerReference, ContainerStats) pairs
        """
        pass

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def safe_collect(self) -> List[Snapshot]:
        """
        Collect snapshots, logging any exception.

        Returns:
            list: The snapshots, or an empty list if collection fails
        """
        try:
            return self.collect()
        except Exception as e:
            logger.error("Error collecting stats from %s: %s", self.name, str(e))
            return []

    def collect_and_push(self, driver, dry_run: bool = False) -> int:
        """
        Collect snapshots and push them to a storage driver.

        Args:
            driver: Storage driver with an add_stats() method
            dry_run (bool): If True, log the snapshots instead of pushing them

        Returns:
            int: Number of snapshots handed to the driver
        """
        snapshots = self.safe_collect()
        pushed = 0

        for ref, stats in snapshots:
            if dry_run:
                logger.info("DRY RUN: Would push %s stats for %s: %s", self.name, ref.display_name, stats)
                continue
            try:
                driver.add_stats(ref, stats)
                pushed += 1
            except SinkWriteError as e:
                logger.error("Failed to push stats for %s: %s", ref.display_name, str(e))

        return pushed
