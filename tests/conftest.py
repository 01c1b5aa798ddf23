"""
Pytest configuration and shared fixtures
"""
import socket
import threading
from types import SimpleNamespace
from datetime import datetime, timedelta

import pytest
import pytz

from forwarder.config import AdapterConfig
from forwarder.models import (
    ContainerReference,
    ContainerStats,
    CpuStats,
    CpuUsage,
    FsStats,
    MemoryStats,
    NetworkStats,
)
from forwarder.sink import SinkWriteError

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=pytz.UTC)


class FakeSink:
    """Sink recording written lines, optionally failing after some writes."""

    def __init__(self, fail_after=None):
        self.lines = []
        self.fail_after = fail_after
        self.closed = False

    def write(self, line):
        if self.fail_after is not None and len(self.lines) >= self.fail_after:
            raise SinkWriteError("Broken pipe")
        self.lines.append(line)

    def close(self):
        self.closed = True


class FakeClock:
    """Wall clock returning a settable time, with a matching monotonic clock."""

    def __init__(self, now=START):
        self.now = now
        self.elapsed = 1000.0

    def advance(self, seconds):
        """Move both clocks forward."""
        self.now += timedelta(seconds=seconds)
        self.elapsed += seconds

    def monotonic(self):
        return self.elapsed

    def __call__(self):
        return self.now


@pytest.fixture
def adapter_config():
    """Config with default interval, prefix and tags"""
    return AdapterConfig(source='host1', proxy_address='localhost:2878')


@pytest.fixture
def fake_sink():
    return FakeSink()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def container_ref():
    return ContainerReference(name='c1')


@pytest.fixture
def sample_stats():
    """Snapshot with one filesystem device"""
    return ContainerStats(
        cpu=CpuStats(usage=CpuUsage(total=100)),
        memory=MemoryStats(usage=50, working_set=40),
        network=NetworkStats(rx_bytes=10, rx_errors=0, tx_bytes=20, tx_errors=1),
        filesystem=[FsStats(device='/dev/sda1', usage=5, limit=100)],
    )


@pytest.fixture
def tcp_server():
    """Loopback TCP listener collecting everything received on one connection."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(('127.0.0.1', 0))
    listener.listen(1)
    received = bytearray()
    done = threading.Event()

    def serve():
        conn, _ = listener.accept()
        with conn:
            while True:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                received.extend(chunk)
        done.set()

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    host, port = listener.getsockname()
    yield SimpleNamespace(address=f'{host}:{port}', received=received, done=done)

    listener.close()


@pytest.fixture
def failing_sink():
    """Sink whose fourth write fails"""
    return FakeSink(fail_after=3)
