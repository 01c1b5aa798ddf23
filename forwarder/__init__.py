"""
Container metrics forwarder: relays container stats to a Wavefront proxy.
"""
from .collector import Collector
from .config import AdapterConfig
from .models import (
    ContainerReference,
    ContainerStats,
    CpuStats,
    CpuUsage,
    FsStats,
    MemoryStats,
    NetworkStats,
)
from .registry import get_available_drivers, new_storage_driver, register_storage_driver
from .sink import ConnectionSink, SinkConnectionError, SinkWriteError
from .storage import WavefrontStorage, new_storage
from .throttle import FlushThrottle

__all__ = [
    'AdapterConfig',
    'Collector',
    'ConnectionSink',
    'ContainerReference',
    'ContainerStats',
    'CpuStats',
    'CpuUsage',
    'FlushThrottle',
    'FsStats',
    'MemoryStats',
    'NetworkStats',
    'SinkConnectionError',
    'SinkWriteError',
    'WavefrontStorage',
    'get_available_drivers',
    'new_storage',
    'new_storage_driver',
    'register_storage_driver',
]
