"""
Conversion of stats snapshots into flat metric name -> value mappings.
"""
from typing import Dict

from .models import ContainerStats

COL_CPU_CUMULATIVE_USAGE = 'cpu_cumulative_usage'
# Memory usage
COL_MEMORY_USAGE = 'memory_usage'
# Working set size
COL_MEMORY_WORKING_SET = 'memory_working_set'
# Cumulative count of bytes received.
COL_RX_BYTES = 'rx_bytes'
# Cumulative count of receive errors encountered.
COL_RX_ERRORS = 'rx_errors'
# Cumulative count of bytes transmitted.
COL_TX_BYTES = 'tx_bytes'
# Cumulative count of transmit errors encountered.
COL_TX_ERRORS = 'tx_errors'
# Filesystem summary
COL_FS_SUMMARY = 'fs_summary'
# Filesystem limit.
COL_FS_LIMIT = 'fs_limit'
# Filesystem usage.
COL_FS_USAGE = 'fs_usage'

# Joins a device identifier to a metric name; never valid inside a metric name.
DEVICE_SEPARATOR = '~'

FS_SUMMARY_LIMIT = f"{COL_FS_SUMMARY}.{COL_FS_LIMIT}"
FS_SUMMARY_USAGE = f"{COL_FS_SUMMARY}.{COL_FS_USAGE}"


def device_key(device: str, metric: str) -> str:
    return f"{device}{DEVICE_SEPARATOR}{metric}"


def container_stats_to_values(stats: ContainerStats) -> Dict[str, int]:
    """
    Copy the cumulative CPU, memory and network counters of a snapshot.

    Args:
        stats (ContainerStats): The snapshot to encode

    Returns:
        dict: Metric name -> value
    """
    return {
        COL_CPU_CUMULATIVE_USAGE: stats.cpu.usage.total,
        COL_MEMORY_USAGE: stats.memory.usage,
        COL_MEMORY_WORKING_SET: stats.memory.working_set,
        COL_RX_BYTES: stats.network.rx_bytes,
        COL_RX_ERRORS: stats.network.rx_errors,
        COL_TX_BYTES: stats.network.tx_bytes,
        COL_TX_ERRORS: stats.network.tx_errors,
    }


def container_fs_stats_to_values(series: Dict[str, int], stats: ContainerStats) -> None:
    """
    Add filesystem metrics of a snapshot to an existing mapping.

    Limits and usages are summed across devices under the fs_summary keys and
    recorded per device under keys carrying the device separator.

    Args:
        series (dict): Mapping to update in place
        stats (ContainerStats): The snapshot to encode
    """
    for fs_stat in stats.filesystem:
        # Summary stats.
        series[FS_SUMMARY_LIMIT] = series.get(FS_SUMMARY_LIMIT, 0) + fs_stat.limit
        series[FS_SUMMARY_USAGE] = series.get(FS_SUMMARY_USAGE, 0) + fs_stat.usage

        # Per device stats.
        series[device_key(fs_stat.device, COL_FS_LIMIT)] = fs_stat.limit
        series[device_key(fs_stat.device, COL_FS_USAGE)] = fs_stat.usage


def encode(stats: ContainerStats) -> Dict[str, int]:
    """Full metric set for a snapshot, filesystem metrics included."""
    series = container_stats_to_values(stats)
    container_fs_stats_to_values(series, stats)
    return series
