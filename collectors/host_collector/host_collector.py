import logging
import socket
from typing import List

import psutil

from forwarder.collector import Collector, Snapshot
from forwarder.models import (
    ContainerReference,
    ContainerStats,
    CpuStats,
    CpuUsage,
    FsStats,
    MemoryStats,
    NetworkStats,
)

logger = logging.getLogger(__name__)

NANOSECONDS = 1_000_000_000


class HostCollector(Collector):
    """Collector treating the whole host as the root container."""

    def __init__(self, name: str = '/', alias: str = '', namespace: str = ''):
        self.reference = ContainerReference(
            name=name,
            aliases=[alias] if alias else [],
            namespace=namespace,
            labels={'hostname': socket.gethostname()},
        )

    def collect(self) -> List[Snapshot]:
        """Collect one snapshot of host CPU, memory, network and disks."""
        stats = ContainerStats(
            cpu=self._collect_cpu(),
            memory=self._collect_memory(),
            network=self._collect_network(),
            filesystem=self._collect_filesystem(),
        )
        return [(self.reference, stats)]

    def _collect_cpu(self) -> CpuStats:
        """Cumulative CPU time in nanoseconds, as cAdvisor reports it."""
        times = psutil.cpu_times()
        total = int((times.user + times.system) * NANOSECONDS)
        return CpuStats(usage=CpuUsage(total=total))

    def _collect_memory(self) -> MemoryStats:
        memory = psutil.virtual_memory()
        return MemoryStats(
            usage=int(memory.total - memory.free),
            working_set=int(memory.total - memory.available),
        )

    def _collect_network(self) -> NetworkStats:
        counters = psutil.net_io_counters()
        if counters is None:
            # No network interfaces
            return NetworkStats()
        return NetworkStats(
            rx_bytes=counters.bytes_recv,
            rx_errors=counters.errin,
            tx_bytes=counters.bytes_sent,
            tx_errors=counters.errout,
        )

    def _collect_filesystem(self) -> List[FsStats]:
        filesystems = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError as e:
                logger.debug("Skipping %s: %s", partition.mountpoint, str(e))
                continue
            filesystems.append(FsStats(device=partition.device, limit=usage.total, usage=usage.used))
        return filesystems


if __name__ == '__main__':
    # Setup logging
    logging.basicConfig(level=logging.INFO,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    collector = HostCollector()
    for ref, stats in collector.safe_collect():
        print("%s: %s" % (ref.display_name, stats))
